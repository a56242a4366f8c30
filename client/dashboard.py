"""
Dashboard state machine.

Holds everything the trip dashboard shows (current page of trips, paging,
search and destination filters, loading / searching / error flags, the
accumulated destination list) and the transitions between those states:

    keystroke      -> echo raw term, searching=True, restart 300 ms debounce
    debounce fires -> commit effective term, page=1, fetch
    page change    -> set page, fetch
    destination    -> set destination, page=1, fetch
    fetch          -> loading=True, error=None
                      success: trips/total_pages replaced, destinations merged
                               (only while no filter or search is active)
                      failure: error set, trips/total_pages cleared
                      always:  loading=False, searching=False

Every fetch is tagged with a sequence number; a response that is not for
the most recently issued fetch is dropped, so a slow stale response can
never overwrite newer state.

The store is UI-agnostic.  A view subscribes to snapshots, passes a
Scheduler for the debounce timer, and a runner that decides where fetches
execute (inline by default, a worker thread in the Tk GUI).
"""

import dataclasses
import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from pydantic import ValidationError

from api.models import TripOut
from client.api import ApiError, TripFilters, TripsClient
from client.scheduling import Debouncer, Scheduler, ThreadingScheduler

logger = logging.getLogger(__name__)

TRIPS_PER_PAGE = 10
SEARCH_DEBOUNCE_SECONDS = 0.3
FETCH_FAILED = "Failed to fetch trips"


@dataclass
class DashboardState:
    trips: list[TripOut] = field(default_factory=list)
    search_term: str = ""
    debounced_search_term: str = ""
    selected_destination: str = ""
    destinations: list[str] = field(default_factory=list)
    current_page: int = 1
    total_pages: int = 0
    is_loading: bool = True
    is_searching: bool = False
    error: str | None = None

    @property
    def has_active_filter(self) -> bool:
        return bool(self.selected_destination or self.debounced_search_term)


def merge_destinations(known: Iterable[str], seen: Iterable[str]) -> list[str]:
    """Union of two destination lists, deduplicated and sorted.

    Sorting ignores case first and falls back to the raw text, so
    "bali" and "Bali" sit next to each other in a stable order.
    """
    return sorted(set(known) | set(seen), key=lambda d: (d.casefold(), d))


Listener = Callable[[DashboardState], None]
Runner = Callable[[Callable[[], None]], None]


def _run_inline(fn: Callable[[], None]) -> None:
    fn()


class DashboardStore:
    """State holder and transition logic for the trips dashboard."""

    def __init__(self, client: TripsClient,
                 scheduler: Scheduler | None = None,
                 runner: Runner | None = None,
                 page_size: int = TRIPS_PER_PAGE,
                 debounce_delay: float = SEARCH_DEBOUNCE_SECONDS) -> None:
        self._client = client
        self._debouncer = Debouncer(scheduler or ThreadingScheduler(), debounce_delay)
        self._run = runner or _run_inline
        self.page_size = page_size
        self._lock = threading.RLock()
        self._state = DashboardState()
        self._request_seq = 0
        self._listeners: list[Listener] = []

    # ── Observation ───────────────────────────────────────────────────────

    @property
    def state(self) -> DashboardState:
        """A snapshot; mutating it does not affect the store."""
        with self._lock:
            return self._snapshot()

    def _snapshot(self) -> DashboardState:
        return dataclasses.replace(
            self._state,
            trips=list(self._state.trips),
            destinations=list(self._state.destinations),
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* with a snapshot after every change.

        Returns a function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(self, **changes) -> None:
        with self._lock:
            self._state = dataclasses.replace(self._state, **changes)
            snapshot = self._snapshot()
        self._notify(snapshot)

    def _notify(self, snapshot: DashboardState) -> None:
        for listener in list(self._listeners):
            listener(snapshot)

    # ── Fetching ──────────────────────────────────────────────────────────

    def fetch_trips(self) -> None:
        """Load the current page with the current filters."""
        with self._lock:
            self._request_seq += 1
            seq = self._request_seq
            self._state = dataclasses.replace(self._state, is_loading=True, error=None)
            current = self._snapshot()
        self._notify(current)

        filters = TripFilters(
            page=current.current_page,
            limit=self.page_size,
            search=current.debounced_search_term or None,
            destination=current.selected_destination or None,
        )
        try:
            response = self._client.get_trips(filters)
        except ApiError as exc:
            self._finish(seq, error=exc.message or FETCH_FAILED)
            return
        except ValidationError:
            logger.exception("Malformed trip list response")
            self._finish(seq, error=FETCH_FAILED)
            return
        except Exception:
            logger.exception("Trip list fetch failed")
            self._finish(seq, error=FETCH_FAILED)
            return
        self._finish(seq, trips=response.trips, total_pages=response.total_pages,
                     filtered=current.has_active_filter)

    def _finish(self, seq: int, trips: list[TripOut] | None = None,
                total_pages: int = 0, filtered: bool = True,
                error: str | None = None) -> None:
        with self._lock:
            if seq != self._request_seq:
                logger.debug("Dropping stale trip list response #%d (latest #%d)",
                             seq, self._request_seq)
                return
            if error is not None:
                changes = dict(error=error, trips=[], total_pages=0)
            else:
                changes = dict(trips=list(trips or []), total_pages=total_pages)
                if not filtered:
                    changes["destinations"] = merge_destinations(
                        self._state.destinations, (t.destination for t in trips or [])
                    )
            self._state = dataclasses.replace(
                self._state, is_loading=False, is_searching=False, **changes
            )
            snapshot = self._snapshot()
        self._notify(snapshot)

    # ── User input ────────────────────────────────────────────────────────

    def handle_search_change(self, value: str) -> None:
        """Echo the raw term now; commit and fetch after the quiet period."""
        self._set(search_term=value, is_searching=True)
        self._debouncer.call(lambda: self._commit_search(value))

    def _commit_search(self, value: str) -> None:
        self._set(debounced_search_term=value, current_page=1)
        self._run(self.fetch_trips)

    def handle_page_change(self, page: int) -> None:
        self._set(current_page=max(1, page))
        self._run(self.fetch_trips)

    def handle_destination_change(self, destination: str) -> None:
        self._set(selected_destination=destination, current_page=1)
        self._run(self.fetch_trips)

    def retry(self) -> None:
        """The "Try Again" action: repeat the last fetch as-is."""
        self._run(self.fetch_trips)

    def initialize(self) -> None:
        self._run(self.fetch_trips)

    # ── Teardown ──────────────────────────────────────────────────────────

    def clear_debounce(self) -> None:
        """Cancel a pending search commit, if any."""
        self._debouncer.cancel()

    def close(self) -> None:
        self.clear_debounce()
        self._listeners.clear()
