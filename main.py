#!/usr/bin/env python3
"""
Trip Planner — launch the API server.

Usage:
    python main.py                          # http://localhost:3001
    python main.py --port 9000              # http://localhost:9000
    python main.py --host 127.0.0.1         # bind to localhost only
    python main.py --db /path/to/trips.sqlite
    python main.py --reload                 # auto-reload on code changes
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Launch the Trip Planner API server.",
    )
    parser.add_argument(
        "--host", default=os.getenv("APP_HOST", "0.0.0.0"),
        help="Bind address (default: 0.0.0.0 or APP_HOST env var)",
    )
    parser.add_argument(
        "--port", type=int, default=int(os.getenv("APP_PORT", "3001")),
        help="Port to listen on (default: 3001 or APP_PORT env var)",
    )
    parser.add_argument(
        "--db", type=Path, default=None,
        help="Path to SQLite trip store (default: trips.sqlite or APP_DB_PATH env var)",
    )
    parser.add_argument(
        "--reload", action="store_true",
        help="Enable auto-reload on file changes (development mode)",
    )
    args = parser.parse_args()

    # Set DB path env var if provided via CLI
    if args.db is not None:
        os.environ["APP_DB_PATH"] = str(args.db)

    try:
        import uvicorn
    except ImportError:
        print("Error: uvicorn is not installed.")
        print("  pip install uvicorn[standard]")
        sys.exit(1)

    url = f"http://{'localhost' if args.host == '0.0.0.0' else args.host}:{args.port}"
    print(f"Starting Trip Planner API at {url}")
    print(f"Database: {os.getenv('APP_DB_PATH', 'trips.sqlite')}")
    print()

    uvicorn.run(
        "api.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info",
    )


if __name__ == "__main__":
    main()
