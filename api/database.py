"""
Trip store: SQLite connection management and record operations for the API.

Provides a get_db() dependency that opens a per-request SQLite connection and
closes it after the response is sent.  The database path is resolved once at
startup from the APP_DB_PATH environment variable (default: trips.sqlite).

connect_database() is called once from the app lifespan: it creates the
schema and reports whether the store is reachable.  The resulting flag is
the only process-wide state the API keeps and is read-only afterwards.
"""

import logging
import os
import re
import secrets
import sqlite3
import threading
from collections.abc import Generator
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_DB_PATH: Path = Path(os.getenv("APP_DB_PATH", "trips.sqlite"))

_db_connected: bool = False

_TRIP_ID = re.compile(r"^[0-9a-f]{24}$")

_SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS trips (
        id          TEXT PRIMARY KEY,
        title       TEXT NOT NULL CHECK (length(trim(title)) > 0),
        destination TEXT NOT NULL CHECK (length(trim(destination)) > 0),
        days        INTEGER NOT NULL CHECK (days >= 1),
        budget      REAL NOT NULL CHECK (budget >= 0),
        created_at  TEXT NOT NULL
    );
    CREATE INDEX IF NOT EXISTS idx_trips_created_at ON trips(created_at);
    CREATE INDEX IF NOT EXISTS idx_trips_destination ON trips(destination);
"""

_SELECT_COLUMNS = "id, title, destination, days, budget, created_at"


def get_db_path() -> Path:
    """Return the configured database path."""
    return _DB_PATH


def is_connected() -> bool:
    """Return the "database connected" flag set at startup."""
    return _db_connected


def _make_conn(db_path: Path) -> sqlite3.Connection:
    """Open a SQLite connection with standard pragmas and SQL helpers.

    Registers ``casefold(text)`` so the query builder can express
    case-insensitive substring matches that also work outside ASCII.
    """
    conn = sqlite3.connect(str(db_path), check_same_thread=False, timeout=10)
    conn.row_factory = sqlite3.Row
    conn.create_function("casefold", 1, _casefold, deterministic=True)
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA synchronous=NORMAL")
    conn.execute("PRAGMA busy_timeout=5000")
    return conn


def _casefold(value):
    return value.casefold() if isinstance(value, str) else value


def init_schema(conn: sqlite3.Connection) -> None:
    """Create the trips table and its indexes (idempotent)."""
    conn.executescript(_SCHEMA_SQL)
    conn.commit()


def connect_database(db_path: Path | None = None) -> bool:
    """Open the store once, create the schema, and record the outcome.

    Returns:
        True if the database is reachable and the schema is in place.
    """
    global _db_connected, _DB_PATH
    if db_path is not None:
        _DB_PATH = Path(db_path)
    try:
        _DB_PATH.parent.mkdir(parents=True, exist_ok=True)
        conn = _make_conn(_DB_PATH)
        try:
            init_schema(conn)
        finally:
            conn.close()
    except (sqlite3.Error, OSError) as exc:
        logger.error("Trip store connection error at %s: %s", _DB_PATH, exc)
        _db_connected = False
        return False
    logger.info("Connected to trip store at %s", _DB_PATH)
    _db_connected = True
    return True


def open_connection(db_path: Path | None = None) -> sqlite3.Connection:
    """Open a connection to *db_path*, or to the configured store."""
    return _make_conn(Path(db_path) if db_path is not None else _DB_PATH)


def get_db() -> Generator[sqlite3.Connection, None, None]:
    """FastAPI dependency: yield a SQLite connection, close on exit.

    Usage in a route::

        from api.database import get_db
        from fastapi import Depends

        @router.get("/example")
        def example(conn=Depends(get_db)):
            ...
    """
    conn = open_connection()
    try:
        yield conn
    finally:
        conn.close()


# ── Trip record operations ────────────────────────────────────────────────────

_clock_lock = threading.Lock()
_last_created_at: datetime | None = None


def new_trip_id() -> str:
    """Return a fresh 24-character hex record id."""
    return secrets.token_hex(12)


def is_trip_id(value: str) -> bool:
    """True if *value* has the shape of an id this store assigns."""
    return bool(_TRIP_ID.match(value))


def next_created_at() -> datetime:
    """Current UTC time, never earlier than the previous call's result."""
    global _last_created_at
    with _clock_lock:
        now = datetime.now(timezone.utc)
        if _last_created_at is not None and now < _last_created_at:
            now = _last_created_at
        _last_created_at = now
        return now


def _format_timestamp(dt: datetime) -> str:
    # Fixed-width UTC text so lexicographic order equals time order.
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _row_to_trip(row: sqlite3.Row) -> dict[str, Any]:
    return {
        "id": row["id"],
        "title": row["title"],
        "destination": row["destination"],
        "days": row["days"],
        "budget": row["budget"],
        "created_at": row["created_at"],
    }


def insert_trip(conn: sqlite3.Connection, title: str, destination: str,
                days: int, budget: float) -> dict[str, Any]:
    """Insert one trip, assigning its id and creation time."""
    trip_id = new_trip_id()
    created_at = _format_timestamp(next_created_at())
    with conn:
        conn.execute(
            "INSERT INTO trips (id, title, destination, days, budget, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (trip_id, title, destination, days, budget, created_at),
        )
    return {
        "id": trip_id,
        "title": title,
        "destination": destination,
        "days": days,
        "budget": budget,
        "created_at": created_at,
    }


def fetch_trip(conn: sqlite3.Connection, trip_id: str) -> dict[str, Any] | None:
    """Return the trip with *trip_id*, or None."""
    if not is_trip_id(trip_id):
        return None
    row = conn.execute(
        f"SELECT {_SELECT_COLUMNS} FROM trips WHERE id = ?", (trip_id,)
    ).fetchone()
    return _row_to_trip(row) if row is not None else None


_UPDATABLE = ("title", "destination", "days", "budget")


def update_trip(conn: sqlite3.Connection, trip_id: str,
                changes: dict[str, Any]) -> dict[str, Any] | None:
    """Apply *changes* to one trip in a single statement.

    Only title, destination, days and budget can change; other keys are
    ignored.  Returns the updated trip, or None if the id does not resolve.
    """
    if not is_trip_id(trip_id):
        return None
    fields = [k for k in _UPDATABLE if k in changes]
    if fields:
        assignments = ", ".join(f"{k} = ?" for k in fields)
        with conn:
            cur = conn.execute(
                f"UPDATE trips SET {assignments} WHERE id = ?",
                [changes[k] for k in fields] + [trip_id],
            )
        if cur.rowcount == 0:
            return None
    return fetch_trip(conn, trip_id)


def count_trips(conn: sqlite3.Connection, where: str, params: list[Any]) -> int:
    """Number of trips matching a WHERE clause from utils.query."""
    return conn.execute(f"SELECT COUNT(*) FROM trips {where}", params).fetchone()[0]


def list_trips(conn: sqlite3.Connection, where: str, params: list[Any],
               order: str, limit: int, offset: int) -> list[dict[str, Any]]:
    """One page of trips matching a WHERE clause from utils.query."""
    rows = conn.execute(
        f"SELECT {_SELECT_COLUMNS} FROM trips {where} {order} LIMIT ? OFFSET ?",
        params + [limit, offset],
    ).fetchall()
    return [_row_to_trip(r) for r in rows]
