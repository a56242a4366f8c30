"""Shared utilities for the Trip Planner API server and client."""

# String utilities
from utils.strings import safe_int, safe_float, clean_text

# Query building
from utils.query import (
    DEFAULT_PAGE,
    DEFAULT_LIMIT,
    MAX_LIMIT,
    TRIP_ORDER_CLAUSE,
    Pagination,
    parse_pagination,
    parse_budget_bound,
    total_pages,
    build_trip_where_clause,
)

# HTTP utilities
from utils.http import DEFAULT_HEADERS, SessionManager

# Configuration
from utils.config import Config, AppConfig

__all__ = [
    # Strings
    "safe_int",
    "safe_float",
    "clean_text",
    # Query
    "DEFAULT_PAGE",
    "DEFAULT_LIMIT",
    "MAX_LIMIT",
    "TRIP_ORDER_CLAUSE",
    "Pagination",
    "parse_pagination",
    "parse_budget_bound",
    "total_pages",
    "build_trip_where_clause",
    # HTTP
    "DEFAULT_HEADERS",
    "SessionManager",
    # Config
    "Config",
    "AppConfig",
]
