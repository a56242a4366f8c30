"""String parsing utilities for the Trip Planner.

Query-string values arrive as raw text.  These helpers turn them into
numbers or cleaned strings without ever raising, so a malformed filter
degrades to "not set" instead of failing the request.
"""

import math
import re

_INTEGER = re.compile(r"^[+-]?\d+$")


def safe_int(val, default: int) -> int:
    """Parse an integer, returning *default* for anything unparsable.

    Only plain base-10 integer text is accepted ("12", " 3 ", "+4").
    Floats ("2.5"), words ("two") and empty values all return *default*.

    Args:
        val: Value to convert (str, int, or None)
        default: Value to return on failure

    Returns:
        int: Parsed value or default
    """
    if val is None or isinstance(val, bool):
        return default
    if isinstance(val, int):
        return val
    s = str(val).strip()
    if not _INTEGER.match(s):
        return default
    return int(s)


def safe_float(val, default: float | None = None) -> float | None:
    """Parse a finite float, returning *default* on failure.

    "nan", "inf" and friends are rejected along with non-numeric text.

    Args:
        val: Value to convert (any type)
        default: Value to return on failure (default: None)

    Returns:
        float: Parsed value or default
    """
    if val is None or val == "" or isinstance(val, bool):
        return default
    try:
        result = float(val)
    except (ValueError, TypeError):
        return default
    if not math.isfinite(result):
        return default
    return result


def clean_text(s: str | None) -> str | None:
    """Strip surrounding whitespace; blank or missing input becomes None."""
    if s is None:
        return None
    s = s.strip()
    return s or None
