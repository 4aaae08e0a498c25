"""
Tests: request-input helpers — id coercion, typed required fields and
primary-key lookups.
"""

import pytest

from conftest import make_hotel
from facilities.core.exceptions import NotFoundError, ValidationError
from facilities.models.hotel import Hotel
from facilities.utils.helpers import get_or_raise, optional_text, require_fields, to_id


@pytest.mark.parametrize("value,expected", [(5, 5), ("5", 5), (" 12 ", 12), (3.0, 3)])
def test_to_id_accepts_integers(value, expected):
    assert to_id(value) == expected


@pytest.mark.parametrize("value", [True, False, "5a", "", 2.5, {"id": 1}, [1], None])
def test_to_id_rejects_everything_else(value):
    with pytest.raises(ValidationError) as exc:
        to_id(value, "locationId")

    assert exc.value.details == {"locationId": "invalid"}


def test_require_fields_reports_missing_and_mistyped_together():
    with pytest.raises(ValidationError) as exc:
        require_fields({"name": 1, "title": " "}, "name", "title", "category", text=("name",))

    assert exc.value.details == {"name": "invalid", "title": "required", "category": "required"}
    assert str(exc.value).startswith("Missing required fields: title, category")


def test_require_fields_only_type_checks_listed_fields():
    require_fields({"hotelId": 3, "name": "Boiler"}, "hotelId", "name", text=("name",))


def test_optional_text():
    assert optional_text({}, "description") == ""
    assert optional_text({"notes": None}, "notes", None) is None
    assert optional_text({"notes": "ok"}, "notes") == "ok"
    with pytest.raises(ValidationError):
        optional_text({"notes": 4}, "notes")


def test_get_or_raise_coerces_then_looks_up():
    hotel = make_hotel()

    assert get_or_raise(Hotel, str(hotel.id)) is hotel
    with pytest.raises(NotFoundError):
        get_or_raise(Hotel, hotel.id + 100)
    with pytest.raises(NotFoundError):
        get_or_raise(Hotel, None)
    with pytest.raises(ValidationError) as exc:
        get_or_raise(Hotel, {"x": 1}, field="hotelId")
    assert exc.value.details == {"hotelId": "invalid"}
