"""
Pytest fixtures for Trip Planner tests.

Provides a per-test SQLite trip store, a FastAPI TestClient bound to it,
a helper for creating trips through the API, and a manual-clock scheduler
for driving the dashboard's search debounce deterministically.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from fastapi.testclient import TestClient  # noqa: E402

from api.app import create_app  # noqa: E402


# ── Manual scheduler ──────────────────────────────────────────────────────────

class _ManualTask:
    def __init__(self, due: float, callback):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler whose clock only moves when a test calls advance()."""

    def __init__(self):
        self.now = 0.0
        self.tasks: list[_ManualTask] = []

    def call_later(self, delay, callback):
        task = _ManualTask(self.now + delay, callback)
        self.tasks.append(task)
        return task

    @property
    def pending(self) -> list[_ManualTask]:
        return [t for t in self.tasks if not t.cancelled]

    def advance(self, seconds: float) -> None:
        self.now += seconds
        due = sorted((t for t in self.pending if t.due <= self.now + 1e-9),
                     key=lambda t: t.due)
        for task in due:
            self.tasks.remove(task)
            if not task.cancelled:
                task.callback()


# ── Fixtures ──────────────────────────────────────────────────────────────────

@pytest.fixture()
def db_path(tmp_path):
    return tmp_path / "trips.sqlite"


@pytest.fixture()
def app(db_path):
    return create_app(db_path=db_path)


@pytest.fixture()
def client(app):
    """TestClient with lifespan run, so the schema exists."""
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture()
def make_trip(client):
    """Create a trip through the API and return its JSON body."""

    def _make(title="Paris City Break", destination="Paris, France",
              days=5, budget=75000):
        resp = client.post("/api/trips", json={
            "title": title, "destination": destination,
            "days": days, "budget": budget,
        })
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make


@pytest.fixture()
def scheduler():
    return ManualScheduler()
