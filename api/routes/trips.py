"""
/api/trips endpoints.

POST /api/trips          create a trip
GET  /api/trips          list trips with search, filters and pagination
GET  /api/trips/{id}     single trip
PUT  /api/trips/{id}     partial update

List filters are deliberately lenient: page/limit/minBudget/maxBudget are
accepted as raw text and normalised by utils.query, so a malformed value
falls back to its default instead of failing the request.
"""

import logging
import sqlite3

from fastapi import APIRouter, Depends, HTTPException, Query, status

from api.database import count_trips, fetch_trip, get_db, insert_trip, list_trips, update_trip
from api.models import ErrorResponse, TripCreate, TripListResponse, TripOut, TripUpdate
from utils.query import (
    TRIP_ORDER_CLAUSE,
    build_trip_where_clause,
    parse_budget_bound,
    parse_pagination,
    total_pages,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trips", tags=["trips"])

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Trip not found"}}
_BAD_REQUEST = {400: {"model": ErrorResponse, "description": "Validation failed"}}


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=TripOut,
    responses=_BAD_REQUEST,
    summary="Create a trip",
)
def create_trip(
    trip: TripCreate,
    conn: sqlite3.Connection = Depends(get_db),
) -> TripOut:
    """Persist a new trip; the server assigns ``id`` and ``createdAt``."""
    record = insert_trip(conn, trip.title, trip.destination, trip.days, trip.budget)
    logger.info("Created trip %s (%s)", record["id"], record["destination"])
    return TripOut(**record)


@router.get("", response_model=TripListResponse, summary="List trips")
def list_trips_endpoint(
    page: str | None = Query(None, description="Page number (1-based, default 1)"),
    limit: str | None = Query(None, description="Trips per page (default 10, max 100)"),
    destination: str | None = Query(None, description="Case-insensitive destination substring"),
    search: str | None = Query(None, description="Case-insensitive substring of title or destination"),
    min_budget: str | None = Query(None, alias="minBudget", description="Inclusive minimum budget"),
    max_budget: str | None = Query(None, alias="maxBudget", description="Inclusive maximum budget"),
    conn: sqlite3.Connection = Depends(get_db),
) -> TripListResponse:
    """Return one page of trips, newest first, plus the total match count."""
    paging = parse_pagination(page, limit)
    where, params = build_trip_where_clause(
        destination=destination,
        search=search,
        min_budget=parse_budget_bound(min_budget),
        max_budget=parse_budget_bound(max_budget),
    )

    total = count_trips(conn, where, params)
    rows = list_trips(conn, where, params, TRIP_ORDER_CLAUSE, paging.limit, paging.offset)

    return TripListResponse(
        trips=[TripOut(**r) for r in rows],
        total=total,
        page=paging.page,
        limit=paging.limit,
        total_pages=total_pages(total, paging.limit),
    )


@router.get(
    "/{trip_id}",
    response_model=TripOut,
    responses=_NOT_FOUND,
    summary="Get single trip",
)
def get_trip(
    trip_id: str,
    conn: sqlite3.Connection = Depends(get_db),
) -> TripOut:
    """Return one trip.  Unknown and malformed ids are both a 404."""
    record = fetch_trip(conn, trip_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Trip not found")
    return TripOut(**record)


@router.put(
    "/{trip_id}",
    response_model=TripOut,
    responses={**_NOT_FOUND, **_BAD_REQUEST},
    summary="Update a trip",
)
def update_trip_endpoint(
    trip_id: str,
    trip: TripUpdate,
    conn: sqlite3.Connection = Depends(get_db),
) -> TripOut:
    """Replace the fields present in the body; everything else is unchanged."""
    record = update_trip(conn, trip_id, trip.changes())
    if record is None:
        raise HTTPException(status_code=404, detail="Trip not found")
    logger.info("Updated trip %s fields=%s", trip_id, sorted(trip.model_fields_set))
    return TripOut(**record)
