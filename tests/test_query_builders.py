"""
Tests for SQL query builder functions — utils/query.py

Covers the trip WHERE clause builder, pagination normalisation and the
total-pages calculation.
"""
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from api.database import init_schema, insert_trip, open_connection
from utils.query import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    MAX_OFFSET,
    TRIP_ORDER_CLAUSE,
    Pagination,
    build_trip_where_clause,
    parse_budget_bound,
    parse_pagination,
    total_pages,
)


# ═══════════════════════════════════════════════════════════════════════════════
# build_trip_where_clause
# ═══════════════════════════════════════════════════════════════════════════════


class TestWhereNoFilters:
    def test_all_none(self):
        where, params = build_trip_where_clause()
        assert where == ""
        assert params == []

    def test_blank_text_ignored(self):
        where, params = build_trip_where_clause(destination="  ", search="")
        assert where == ""
        assert params == []


class TestWhereDestination:
    def test_substring_casefolded(self):
        where, params = build_trip_where_clause(destination=" PARIS ")
        assert where == "WHERE instr(casefold(destination), ?) > 0"
        assert params == ["paris"]


class TestWhereSearch:
    def test_title_or_destination(self):
        where, params = build_trip_where_clause(search="Tokyo")
        assert "casefold(title)" in where
        assert " OR " in where
        assert params == ["tokyo", "tokyo"]

    def test_anded_with_destination(self):
        where, params = build_trip_where_clause(destination="india", search="goa")
        assert where.startswith("WHERE instr(casefold(destination), ?) > 0 AND (")
        assert params == ["india", "goa", "goa"]


class TestWhereBudget:
    def test_min_only(self):
        where, params = build_trip_where_clause(min_budget=100.0)
        assert where == "WHERE budget >= ?"
        assert params == [100.0]

    def test_both_bounds(self):
        where, params = build_trip_where_clause(min_budget=1.0, max_budget=2.0)
        assert where == "WHERE budget >= ? AND budget <= ?"
        assert params == [1.0, 2.0]

    def test_zero_bound_is_applied(self):
        where, params = build_trip_where_clause(max_budget=0.0)
        assert where == "WHERE budget <= ?"
        assert params == [0.0]


class TestWhereAgainstStore:
    """Run the generated clause against a real trips table."""

    @pytest.fixture()
    def conn(self, tmp_path):
        conn = open_connection(tmp_path / "q.sqlite")
        init_schema(conn)
        for title, dest, budget in (
            ("Paris City Break", "Paris, France", 75000),
            ("Tokyo Adventure", "Tokyo, Japan", 120000),
            ("Straße trip", "Berlin, Germany", 50000),
        ):
            insert_trip(conn, title, dest, 5, budget)
        yield conn
        conn.close()

    def _titles(self, conn, **filters):
        where, params = build_trip_where_clause(**filters)
        rows = conn.execute(f"SELECT title FROM trips {where} {TRIP_ORDER_CLAUSE}", params)
        return [r[0] for r in rows]

    def test_search_case_insensitive(self, conn):
        assert self._titles(conn, search="TOKYO") == ["Tokyo Adventure"]

    def test_casefold_expands_sharp_s(self, conn):
        assert self._titles(conn, search="STRASSE") == ["Straße trip"]

    def test_order_newest_first(self, conn):
        assert self._titles(conn) == ["Straße trip", "Tokyo Adventure", "Paris City Break"]

    def test_budget_range(self, conn):
        assert self._titles(conn, min_budget=60000, max_budget=100000) == ["Paris City Break"]

    def test_no_match(self, conn):
        assert self._titles(conn, destination="Mars") == []


# ═══════════════════════════════════════════════════════════════════════════════
# Pagination
# ═══════════════════════════════════════════════════════════════════════════════


class TestParsePagination:
    def test_defaults(self):
        assert parse_pagination() == Pagination(page=1, limit=DEFAULT_LIMIT)

    def test_numeric_strings(self):
        assert parse_pagination("3", "20") == Pagination(page=3, limit=20)

    @pytest.mark.parametrize("page, limit", [
        ("abc", "xyz"), ("0", "0"), ("-1", "-10"), ("2.5", "1e2"), ("", None),
    ])
    def test_invalid_falls_back(self, page, limit):
        assert parse_pagination(page, limit) == Pagination(page=1, limit=10)

    def test_limit_capped(self):
        assert parse_pagination(1, 10_000).limit == MAX_LIMIT

    def test_huge_page_falls_back(self):
        assert parse_pagination("99999999999999999999", 10) == Pagination(page=1, limit=10)
        assert parse_pagination(10**18, 100).page == 1

    def test_largest_fitting_page_kept(self):
        page = MAX_OFFSET // 100 + 1
        paging = parse_pagination(page, 100)
        assert paging.page == page
        assert paging.offset <= MAX_OFFSET

    def test_offset(self):
        assert Pagination(page=3, limit=10).offset == 20
        assert Pagination(page=1, limit=25).offset == 0


class TestTotalPages:
    @pytest.mark.parametrize("total, limit, expected", [
        (0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (25, 10, 3), (7, 3, 3),
    ])
    def test_ceil(self, total, limit, expected):
        assert total_pages(total, limit) == expected

    def test_rejects_zero_limit(self):
        with pytest.raises(ValueError):
            total_pages(5, 0)


class TestParseBudgetBound:
    def test_number_text(self):
        assert parse_budget_bound("1500.5") == 1500.5

    @pytest.mark.parametrize("raw", [None, "", "cheap", "nan", "inf"])
    def test_unparsable_is_none(self, raw):
        assert parse_budget_bound(raw) is None
