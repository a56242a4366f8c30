"""
Pydantic request/response models for the Trip API.

Request bodies use strict number validation: ``days`` must be a JSON
integer and ``budget`` a JSON number, so "5", 2.5 days or ``true`` are
rejected instead of being coerced.  Wire names follow the JSON API
(``createdAt``, ``totalPages``); Python code uses snake_case.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, Strict, field_validator


def _required_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be empty")
    return value


# SQLite INTEGER columns hold signed 64-bit values.
MAX_DAYS = 2**63 - 1

TripText = Annotated[str, AfterValidator(_required_text)]
TripDays = Annotated[int, Strict(), Field(ge=1, le=MAX_DAYS)]
TripBudget = Annotated[float, Strict(), Field(ge=0, allow_inf_nan=False)]


# ── Request bodies ────────────────────────────────────────────────────────────

class TripCreate(BaseModel):
    """Body of POST /api/trips."""
    model_config = ConfigDict(extra="ignore")

    title: TripText = Field(..., description="Trip title", examples=["Paris City Break"])
    destination: TripText = Field(..., description="Where the trip goes", examples=["Paris, France"])
    days: TripDays = Field(..., description="Trip length in days (>= 1, fits a 64-bit integer)", examples=[5])
    budget: TripBudget = Field(..., description="Planned budget (>= 0)", examples=[75000])


class TripUpdate(BaseModel):
    """Body of PUT /api/trips/{id}.  Every field is optional; present fields
    follow the same rules as TripCreate.  ``id`` and ``createdAt`` are ignored.
    """
    model_config = ConfigDict(extra="ignore")

    title: TripText | None = Field(None, description="New title")
    destination: TripText | None = Field(None, description="New destination")
    days: TripDays | None = Field(None, description="New length in days")
    budget: TripBudget | None = Field(None, description="New budget")

    @field_validator("title", "destination", "days", "budget")
    @classmethod
    def _not_null(cls, value: Any) -> Any:
        # Defaults skip validation, so this only fires for an explicit null.
        if value is None:
            raise ValueError("may not be null")
        return value

    def changes(self) -> dict[str, Any]:
        """Only the fields the caller actually sent."""
        return self.model_dump(include=self.model_fields_set)


# ── Response bodies ───────────────────────────────────────────────────────────

class TripOut(BaseModel):
    """A single trip record."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Store-assigned identifier", examples=["65a4f0c2e1b3a9d4c7f01234"])
    title: str = Field(..., examples=["Paris City Break"])
    destination: str = Field(..., examples=["Paris, France"])
    days: int = Field(..., examples=[5])
    budget: float = Field(..., examples=[75000])
    created_at: datetime = Field(..., alias="createdAt", description="Creation time (UTC)")


class TripListResponse(BaseModel):
    """Response body for GET /api/trips."""
    model_config = ConfigDict(populate_by_name=True)

    trips: list[TripOut] = Field(..., description="Trips on this page, newest first")
    total: int = Field(..., description="Total matching trips (before pagination)", examples=[42])
    page: int = Field(..., description="Page number used (1-based)", examples=[1])
    limit: int = Field(..., description="Page size used", examples=[10])
    total_pages: int = Field(..., alias="totalPages", description="ceil(total / limit)", examples=[5])


class DatabaseStatus(BaseModel):
    connected: bool
    status: str = Field(..., examples=["Connected"])


class HealthResponse(BaseModel):
    """Response body for GET /health."""
    status: str = Field(..., examples=["OK"])
    timestamp: str = Field(..., description="Server time, ISO-8601")
    database: DatabaseStatus


# ── Error model ───────────────────────────────────────────────────────────────

class ErrorResponse(BaseModel):
    """Standard error response body."""
    error: str = Field(..., description="Short error message", examples=["Trip not found"])
    details: list[dict[str, Any]] | None = Field(None, description="Field-level validation problems")
    status_code: int = Field(..., ge=400, le=599, description="HTTP status code", examples=[404])
