"""Shared SQL query builder utilities for the trip routes.

Translates the optional list filters (free-text search, destination,
budget bounds) and pagination parameters into a WHERE clause, an ORDER BY
clause and a LIMIT/OFFSET pair for the ``trips`` table.

Substring predicates go through the ``casefold()`` SQL function registered
on every connection by api.database, so matching is case-insensitive for
non-ASCII text too.
"""

import math
from dataclasses import dataclass
from typing import Any

from utils.strings import clean_text, safe_float, safe_int

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100

# SQLite binds OFFSET as a signed 64-bit integer.
MAX_OFFSET = 2**63 - 1

# Newest first; rowid orders records that share a timestamp by insertion.
TRIP_ORDER_CLAUSE = "ORDER BY created_at DESC, rowid DESC"


@dataclass(frozen=True)
class Pagination:
    """Normalised page / limit pair plus the derived row offset."""

    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def parse_pagination(page: Any = None, limit: Any = None) -> Pagination:
    """Normalise raw ``page`` / ``limit`` query values.

    Absent, non-numeric or non-positive values fall back to the defaults
    (page 1, limit 10).  ``limit`` above MAX_LIMIT is clamped, and a page
    whose offset would not fit in SQLite's OFFSET falls back to page 1.
    Never raises.
    """
    p = safe_int(page, DEFAULT_PAGE)
    lim = safe_int(limit, DEFAULT_LIMIT)
    if p < 1:
        p = DEFAULT_PAGE
    if lim < 1:
        lim = DEFAULT_LIMIT
    lim = min(lim, MAX_LIMIT)
    if (p - 1) * lim > MAX_OFFSET:
        p = DEFAULT_PAGE
    return Pagination(page=p, limit=lim)


def parse_budget_bound(value: Any) -> float | None:
    """Parse a minBudget / maxBudget query value; unparsable means unset."""
    return safe_float(value, None)


def total_pages(total: int, limit: int) -> int:
    """Return ``ceil(total / limit)``.

    Raises:
        ValueError: If limit is not positive.
    """
    if limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")
    return math.ceil(total / limit) if total > 0 else 0


def build_trip_where_clause(
    destination: str | None = None,
    search: str | None = None,
    min_budget: float | None = None,
    max_budget: float | None = None,
) -> tuple[str, list[Any]]:
    """Build a SQL WHERE clause from trip filter parameters.

    Args:
        destination: Case-insensitive substring the destination must contain.
        search: Case-insensitive substring that the title OR the destination
            must contain.  ANDed with ``destination`` when both are set.
        min_budget: Inclusive lower bound on budget.
        max_budget: Inclusive upper bound on budget.

    Returns:
        Tuple of (where_clause_string, params_list). The where_clause_string
        starts with "WHERE " if any conditions exist, or is "" if none.
    """
    conditions: list[str] = []
    params: list[Any] = []

    destination = clean_text(destination)
    search = clean_text(search)

    if destination:
        conditions.append("instr(casefold(destination), ?) > 0")
        params.append(destination.casefold())

    if search:
        needle = search.casefold()
        conditions.append(
            "(instr(casefold(title), ?) > 0 OR instr(casefold(destination), ?) > 0)"
        )
        params.extend([needle, needle])

    if min_budget is not None:
        conditions.append("budget >= ?")
        params.append(min_budget)

    if max_budget is not None:
        conditions.append("budget <= ?")
        params.append(max_budget)

    where = "WHERE " + " AND ".join(conditions) if conditions else ""
    return where, params
