"""
Seed the trip store with sample trips.

Inserts twenty sample trips through the same record operations the API
uses, so every row gets a store-assigned id and creation time.

Usage:
    python scripts/seed_trips.py                     # seed trips.sqlite
    python scripts/seed_trips.py --db /data/trips.sqlite
    python scripts/seed_trips.py --reset             # delete existing trips first
"""

import argparse
import logging
import os
import sqlite3
import sys
from pathlib import Path

# Ensure the project root is on sys.path so we can import the api package
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from api import database as _db  # noqa: E402

_logger = logging.getLogger("seed_trips")
logging.basicConfig(
    format="%(asctime)s %(levelname)s %(message)s",
    level=logging.INFO,
)

_DEFAULT_DB = Path(os.environ.get("APP_DB_PATH", "trips.sqlite"))

# (title, destination, days, budget)
SAMPLE_TRIPS: list[tuple[str, str, int, float]] = [
    ("Paris City Break",        "Paris, France",            5,  75000),
    ("Tokyo Adventure",         "Tokyo, Japan",             8,  120000),
    ("Bali Paradise",           "Bali, Indonesia",          7,  65000),
    ("Swiss Alps Trek",         "Interlaken, Switzerland",  10, 150000),
    ("Dubai Luxury",            "Dubai, UAE",               6,  95000),
    ("Goa Beach Vacation",      "Goa, India",               5,  25000),
    ("Kerala Backwaters",       "Alleppey, Kerala",         6,  35000),
    ("Rajasthan Heritage",      "Jaipur, Rajasthan",        8,  55000),
    ("Himalayan Trek",          "Manali, Himachal Pradesh", 12, 45000),
    ("New York City",           "New York, USA",            7,  180000),
    ("London Explorer",         "London, UK",               6,  110000),
    ("Rome Historical",         "Rome, Italy",              5,  70000),
    ("Barcelona Culture",       "Barcelona, Spain",         6,  80000),
    ("Amsterdam Canals",        "Amsterdam, Netherlands",   4,  60000),
    ("Singapore Modern",        "Singapore",                5,  85000),
    ("Thailand Islands",        "Phuket, Thailand",         9,  55000),
    ("Australia Outback",       "Sydney, Australia",        14, 200000),
    ("Iceland Northern Lights", "Reykjavik, Iceland",       7,  130000),
    ("Morocco Desert",          "Marrakech, Morocco",       8,  65000),
    ("South Korea Culture",     "Seoul, South Korea",       6,  90000),
]


def seed_database(db_path: Path, reset: bool = False) -> int:
    """Insert SAMPLE_TRIPS into the store at *db_path*.

    Args:
        db_path: SQLite file to seed; created along with the schema if needed.
        reset: Delete all existing trips before inserting.

    Returns:
        Number of trips inserted.

    Raises:
        RuntimeError: If the store cannot be opened.
    """
    if not _db.connect_database(db_path):
        raise RuntimeError(f"Failed to connect to database at {db_path}")

    conn = _db.open_connection(db_path)
    try:
        if reset:
            with conn:
                removed = conn.execute("DELETE FROM trips").rowcount
            _logger.info("Removed %d existing trip(s)", removed)
        for title, destination, days, budget in SAMPLE_TRIPS:
            _db.insert_trip(conn, title, destination, days, float(budget))
    finally:
        conn.close()

    _logger.info("Seeded %d trips into %s", len(SAMPLE_TRIPS), db_path)
    return len(SAMPLE_TRIPS)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Insert sample trips into the Trip Planner database.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=_DEFAULT_DB,
        help="Path to the SQLite trip store.",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Delete all existing trips before seeding.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the seed script.

    Returns:
        0 on success, 1 on error.
    """
    args = _build_parser().parse_args(argv)
    try:
        seed_database(args.db, reset=args.reset)
    except (RuntimeError, OSError, sqlite3.Error) as exc:
        _logger.error("Seeding failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
