"""
Trip API client.

Wraps the four /api/trips calls behind one contract: each call returns a
typed record (TripOut / TripListResponse) or raises ApiError carrying the
HTTP status and the message from the response body.

Usage::

    from client.api import TripsClient, TripFilters

    with TripsClient("http://localhost:3001") as api:
        page = api.get_trips(TripFilters(search="paris", page=1, limit=10))
        for trip in page.trips:
            print(trip.title, trip.budget)
"""

import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

import requests
from pydantic import BaseModel, ConfigDict, Field

from api.models import TripListResponse, TripOut
from utils.config import AppConfig
from utils.http import SessionManager

logger = logging.getLogger(__name__)

UNKNOWN_ERROR = "Unknown error"


class ApiError(Exception):
    """A failed API call.

    ``status`` is the HTTP status code, or 0 when no response arrived
    (connection refused, DNS failure, timeout).
    """

    def __init__(self, status: int, message: str):
        self.status = status
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"ApiError(status={self.status}, message={self.message!r})"


class TripFilters(BaseModel):
    """Filters for GET /api/trips.  Unset (or empty) filters are not sent."""
    model_config = ConfigDict(populate_by_name=True)

    destination: str | None = None
    search: str | None = None
    page: int | None = None
    limit: int | None = None
    min_budget: float | None = Field(None, alias="minBudget")
    max_budget: float | None = Field(None, alias="maxBudget")

    def to_params(self) -> dict[str, str]:
        params: dict[str, str] = {}
        if self.destination:
            params["destination"] = self.destination
        if self.search:
            params["search"] = self.search
        if self.page:
            params["page"] = str(self.page)
        if self.limit:
            params["limit"] = str(self.limit)
        if self.min_budget is not None:
            params["minBudget"] = str(self.min_budget)
        if self.max_budget is not None:
            params["maxBudget"] = str(self.max_budget)
        return params


def _error_message(response: requests.Response) -> str:
    """Pull the ``error`` field out of an error body, with fallbacks."""
    try:
        body = response.json()
    except ValueError:
        return UNKNOWN_ERROR
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"HTTP {response.status_code}"


def _as_payload(data: BaseModel | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(data, BaseModel):
        return data.model_dump(exclude_unset=True)
    return dict(data)


class TripsClient:
    """Thin typed client for the Trip API.  No retries, no custom timeout
    unless one is passed in."""

    def __init__(self, base_url: str | None = None,
                 session_manager: SessionManager | None = None,
                 timeout: float | None = None) -> None:
        self.base_url = (base_url or AppConfig.from_env().api_base_url).rstrip("/")
        self._sessions = session_manager or SessionManager()
        self.timeout = timeout

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}{endpoint}"
        try:
            response = self._sessions.session.request(
                method, url, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise ApiError(0, f"Network error: {exc}") from exc

        if not response.ok:
            raise ApiError(response.status_code, _error_message(response))
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(response.status_code, "Invalid JSON in response") from exc

    def create_trip(self, trip: BaseModel | Mapping[str, Any]) -> TripOut:
        """POST /api/trips."""
        body = self._request("POST", "/api/trips", json=_as_payload(trip))
        return TripOut.model_validate(body)

    def get_trips(self, filters: TripFilters | None = None) -> TripListResponse:
        """GET /api/trips with the set filters as query parameters."""
        params = (filters or TripFilters()).to_params()
        body = self._request("GET", "/api/trips", params=params or None)
        return TripListResponse.model_validate(body)

    def get_trip(self, trip_id: str) -> TripOut:
        """GET /api/trips/{id}."""
        body = self._request("GET", f"/api/trips/{quote(trip_id, safe='')}")
        return TripOut.model_validate(body)

    def update_trip(self, trip_id: str, changes: BaseModel | Mapping[str, Any]) -> TripOut:
        """PUT /api/trips/{id} with only the fields to change."""
        body = self._request(
            "PUT", f"/api/trips/{quote(trip_id, safe='')}", json=_as_payload(changes)
        )
        return TripOut.model_validate(body)

    def close(self) -> None:
        self._sessions.close()

    def __enter__(self) -> "TripsClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
