"""
Tests for the trip form model — client/forms.py
"""
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from api.models import TripOut
from client.forms import (
    BUDGET_INVALID,
    DAYS_TOO_FEW,
    DESTINATION_REQUIRED,
    TITLE_REQUIRED,
    TripForm,
)


@pytest.fixture()
def trip():
    return TripOut(
        id="65a4f0c2e1b3a9d4c7f01234", title="Paris City Break",
        destination="Paris, France", days=5, budget=75000.0,
        created_at=datetime(2026, 1, 15, tzinfo=timezone.utc),
    )


class TestValidate:
    def test_blank_form_messages(self):
        errors = TripForm().validate()
        assert errors == {"title": TITLE_REQUIRED, "destination": DESTINATION_REQUIRED}

    def test_whitespace_text_is_blank(self):
        errors = TripForm(title="  ", destination="\t").validate()
        assert set(errors) == {"title", "destination"}

    @pytest.mark.parametrize("days", [0, "0", "-3", "", "abc", "2.5"])
    def test_bad_days(self, days):
        errors = TripForm(title="A", destination="B", days=days).validate()
        assert errors == {"days": DAYS_TOO_FEW}

    @pytest.mark.parametrize("budget", [-1, "-0.5", "", "lots", "nan"])
    def test_bad_budget(self, budget):
        errors = TripForm(title="A", destination="B", budget=budget).validate()
        assert errors == {"budget": BUDGET_INVALID}

    def test_text_entry_values_accepted(self):
        assert TripForm(title="A", destination="B", days="4", budget="1200.50").validate() == {}


class TestCreateMode:
    def test_submittable_when_valid(self):
        assert TripForm(title="A", destination="B").is_submittable()

    def test_not_submittable_when_invalid(self):
        assert not TripForm(title="", destination="B").is_submittable()

    def test_payload_is_full_trip(self):
        form = TripForm(title=" Goa Beach ", destination="Goa, India", days="5", budget="25000")
        assert form.to_payload() == {
            "title": "Goa Beach", "destination": "Goa, India", "days": 5, "budget": 25000.0,
        }

    def test_payload_rejects_invalid(self):
        with pytest.raises(ValueError, match=TITLE_REQUIRED):
            TripForm(destination="B").to_payload()


class TestEditMode:
    def test_prefilled(self, trip):
        form = TripForm.for_trip(trip)
        assert form.is_editing
        assert (form.title, form.destination, form.days, form.budget) == (
            "Paris City Break", "Paris, France", 5, 75000.0)

    def test_unchanged_not_submittable(self, trip):
        assert not TripForm.for_trip(trip).is_submittable()

    def test_same_values_as_text_not_submittable(self, trip):
        form = TripForm.for_trip(trip)
        form.days = "5"
        form.budget = "75000"
        form.title = "Paris City Break "
        assert not form.is_submittable()

    def test_payload_only_changed_fields(self, trip):
        form = TripForm.for_trip(trip)
        form.budget = "80000"
        assert form.is_submittable()
        assert form.to_payload() == {"budget": 80000.0}

    def test_invalid_change_not_submittable(self, trip):
        form = TripForm.for_trip(trip)
        form.days = "0"
        assert not form.is_submittable()
