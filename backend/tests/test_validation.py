"""
Measurement payload validation (pure functions, no database).
"""

from datetime import datetime

import pytest

from fittrack.errors import ValidationError
from fittrack.validation import (
    normalize_phone,
    parse_datetime_field,
    parse_numeric,
    validate_email,
    validate_measurement,
)


class TestValidateMeasurement:

    def test_empty_payload_reports_both_requirements(self):
        result = validate_measurement({})
        assert result.is_valid is False
        assert "Client name or phone is required" in result.errors
        assert "At least one measurement field is required" in result.errors

    def test_name_and_one_field_is_enough(self):
        result = validate_measurement({"client_name": "Jane", "chest": 100})
        assert result.is_valid
        assert result.errors == []

    def test_phone_alone_identifies_client(self):
        assert validate_measurement({"client_phone": "555-0101", "neck": 40}).is_valid

    def test_blank_name_does_not_count(self):
        result = validate_measurement({"client_name": "   ", "chest": 100})
        assert result.errors == ["Client name or phone is required"]

    def test_numeric_strings_accepted(self):
        assert validate_measurement({"client_name": "Jane", "chest": "99.5"}).is_valid

    def test_non_numeric(self):
        result = validate_measurement({"client_name": "Jane", "chest": "wide"})
        assert result.errors == ["chest must be a number"]

    def test_boolean_is_not_a_number(self):
        result = validate_measurement({"client_name": "Jane", "chest": True})
        assert result.errors == ["chest must be a number"]

    @pytest.mark.parametrize("raw", ["NaN", "nan", "inf", "-Infinity", float("nan"), float("inf")])
    def test_non_finite_is_not_a_number(self, raw):
        result = validate_measurement({"client_name": "Jane", "chest": raw})
        assert not result.is_valid
        assert result.errors == ["chest must be a number"]

    def test_negative(self):
        result = validate_measurement({"client_name": "Jane", "wrist": -3})
        assert result.errors == ["wrist cannot be negative"]

    def test_out_of_range_in_centimetres(self):
        result = validate_measurement({"client_name": "Jane", "chest": 250})
        assert result.errors == ["chest must be between 50 and 200 cm (got 250)"]

    def test_range_bounds_are_inclusive(self):
        assert validate_measurement({"client_name": "Jane", "chest": 50, "neck": 60}).is_valid
        assert validate_measurement({"client_name": "Jane", "chest": 200}).is_valid

    def test_inch_ranges_apply_for_inches(self):
        assert validate_measurement({"client_name": "Jane", "chest": 40}, units="in").is_valid
        result = validate_measurement({"client_name": "Jane", "chest": 100}, units="in")
        assert result.errors == ["chest must be between 20 and 80 in (got 100)"]

    def test_fractional_value_is_reported_as_given(self):
        result = validate_measurement({"client_name": "Jane", "wrist": 40.5})
        assert result.errors == ["wrist must be between 10 and 40 cm (got 40.5)"]

    def test_unknown_units(self):
        result = validate_measurement({"client_name": "Jane", "chest": 100}, units="mm")
        assert result.errors == ["Invalid units 'mm'. Must be one of: cm, in"]

    def test_partial_skips_required_checks(self):
        assert validate_measurement({"neck": 41}, partial=True).is_valid
        result = validate_measurement({"chest": 300}, partial=True)
        assert result.errors == ["chest must be between 50 and 200 cm (got 300)"]

    def test_every_bad_field_is_reported(self):
        result = validate_measurement({"client_name": "Jane", "chest": "x", "neck": -1, "wrist": 99})
        assert len(result.errors) == 3

    def test_to_dict(self):
        assert validate_measurement({"client_name": "Jane", "chest": 100}).to_dict() == {
            "isValid": True,
            "errors": [],
        }


class TestFieldParsers:

    @pytest.mark.parametrize(
        "raw,expected",
        [(None, None), ("", None), ("  ", None), (False, None), ("12", 12.0), (7, 7.0), ("abc", None),
         ("NaN", None), ("inf", None), ("-inf", None), (float("nan"), None), (10 ** 400, None)],
    )
    def test_parse_numeric(self, raw, expected):
        assert parse_numeric(raw) == expected

    def test_normalize_phone(self):
        assert normalize_phone(" +1 (555) 010-1234 ") == "+15550101234"
        assert normalize_phone("") is None

    def test_validate_email(self):
        assert validate_email("jane@example.com")
        assert not validate_email("jane@example")
        assert not validate_email(None)

    def test_to_date_is_end_of_day(self):
        assert parse_datetime_field("2026-03-01", "toDate", end_of_day=True) == datetime(
            2026, 3, 1, 23, 59, 59, 999999
        )

    def test_datetime_with_offset_normalized_to_utc(self):
        assert parse_datetime_field("2026-03-01T10:00:00+02:00", "fromDate") == datetime(2026, 3, 1, 8, 0)

    def test_garbage_date(self):
        with pytest.raises(ValidationError) as exc:
            parse_datetime_field("next tuesday", "fromDate")
        assert exc.value.status_code == 400
        assert "fromDate" in str(exc.value)
