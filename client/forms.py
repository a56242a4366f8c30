"""Trip create / edit form model.

Holds the raw field values exactly as typed (text entries hand over
strings) and derives validation messages, the submit-button state and
the request body from them.
"""

from dataclasses import dataclass, field
from typing import Any

from api.models import TripOut
from utils.strings import clean_text, safe_float, safe_int

TITLE_REQUIRED = "Title is required"
DESTINATION_REQUIRED = "Destination is required"
DAYS_TOO_FEW = "Days must be at least 1"
BUDGET_INVALID = "Budget must be a positive number"

FIELDS = ("title", "destination", "days", "budget")


@dataclass
class TripForm:
    title: str = ""
    destination: str = ""
    days: Any = 1
    budget: Any = 0
    initial: TripOut | None = field(default=None, repr=False)

    @classmethod
    def for_trip(cls, trip: TripOut) -> "TripForm":
        """A form pre-filled from an existing trip, in edit mode."""
        return cls(title=trip.title, destination=trip.destination,
                   days=trip.days, budget=trip.budget, initial=trip)

    @property
    def is_editing(self) -> bool:
        return self.initial is not None

    def _values(self) -> dict[str, Any]:
        return {
            "title": clean_text(self.title),
            "destination": clean_text(self.destination),
            "days": safe_int(self.days, 0),
            "budget": safe_float(self.budget),
        }

    def validate(self) -> dict[str, str]:
        """Map of field name to message for every invalid field."""
        v = self._values()
        errors: dict[str, str] = {}
        if not v["title"]:
            errors["title"] = TITLE_REQUIRED
        if not v["destination"]:
            errors["destination"] = DESTINATION_REQUIRED
        if v["days"] < 1:
            errors["days"] = DAYS_TOO_FEW
        if v["budget"] is None or v["budget"] < 0:
            errors["budget"] = BUDGET_INVALID
        return errors

    def changed_fields(self) -> dict[str, Any]:
        """Fields whose value differs from the trip being edited."""
        if self.initial is None:
            return {}
        v = self._values()
        return {
            name: v[name] for name in FIELDS
            if v[name] != getattr(self.initial, name)
        }

    def is_submittable(self) -> bool:
        """Valid, and when editing, actually different from the original."""
        if self.validate():
            return False
        if self.is_editing:
            return bool(self.changed_fields())
        return True

    def to_payload(self) -> dict[str, Any]:
        """Request body: the full trip for create, changed fields for edit.

        Raises:
            ValueError: If the form does not validate.
        """
        errors = self.validate()
        if errors:
            raise ValueError("; ".join(errors.values()))
        if self.is_editing:
            return self.changed_fields()
        return self._values()
