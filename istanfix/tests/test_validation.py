"""
Input Validation Tests
"""

import pytest

from istanfix.db.models import ReportStatus, UserRole
from istanfix.errors import ValidationFailed
from istanfix.validation import (
    is_blank,
    is_valid_email,
    parse_coordinates,
    parse_id,
    parse_role,
    parse_status,
    require_fields,
)


class TestBasics:

    @pytest.mark.parametrize("value", [None, "", "   ", "\n"])
    def test_blank(self, value):
        assert is_blank(value)

    @pytest.mark.parametrize("value", ["x", 0, 12])
    def test_not_blank(self, value):
        assert not is_blank(value)

    def test_require_fields_uses_given_message(self):
        with pytest.raises(ValidationFailed) as exc_info:
            require_fields({"a": "1", "b": " "}, ["a", "b"], "a and b are required.")
        assert exc_info.value.message == "a and b are required."

    @pytest.mark.parametrize("email", ["a@b.co", "first.last@istanbul.bel.tr"])
    def test_valid_email(self, email):
        assert is_valid_email(email)

    @pytest.mark.parametrize("email", ["plain", "a@b", "a b@c.com", "@b.com"])
    def test_invalid_email(self, email):
        assert not is_valid_email(email)


class TestEnums:

    def test_role_defaults_to_user(self):
        assert parse_role(None) == UserRole.USER

    def test_role_case_insensitive(self):
        assert parse_role("Government") == UserRole.GOVERNMENT

    def test_unknown_role(self):
        with pytest.raises(ValidationFailed):
            parse_role("admin")

    @pytest.mark.parametrize("value", ["open", "in-progress", "resolved"])
    def test_status_values(self, value):
        assert parse_status(value) == ReportStatus(value)

    @pytest.mark.parametrize("value", [None, "", "closed", "OPEN"])
    def test_invalid_status(self, value):
        with pytest.raises(ValidationFailed) as exc_info:
            parse_status(value)
        assert "open, in-progress, resolved" in exc_info.value.message


class TestIds:

    def test_absent(self):
        assert parse_id(None, "neighborhood_id") is None
        assert parse_id("", "neighborhood_id") is None

    def test_numeric_text(self):
        assert parse_id(" 42 ", "category_id") == 42
        assert parse_id(7, "category_id") == 7

    @pytest.mark.parametrize("value", ["abc", "1.5", "-3", "0", "²", True])
    def test_rejected(self, value):
        with pytest.raises(ValidationFailed) as exc_info:
            parse_id(value, "category_id")
        assert exc_info.value.message == "category_id must be a valid integer id."


class TestCoordinates:

    def test_both_absent(self):
        assert parse_coordinates(None, "") == (None, None)

    def test_both_present(self):
        assert parse_coordinates("41.0082", "28.9784") == (41.0082, 28.9784)

    @pytest.mark.parametrize("lat,lon", [
        ("41.0", None),
        (None, "28.9"),
        ("north", "28.9"),
        ("41.0", "nan"),
        ("inf", "28.9"),
    ])
    def test_must_be_paired_numbers(self, lat, lon):
        with pytest.raises(ValidationFailed):
            parse_coordinates(lat, lon)

    def test_out_of_range(self):
        with pytest.raises(ValidationFailed) as exc_info:
            parse_coordinates("91", "28.9")
        assert "within" in exc_info.value.message
