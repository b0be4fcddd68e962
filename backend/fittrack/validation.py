# Overview: Pure input validation for measurements and shared field parsers (no I/O).

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Optional

from .errors import ValidationError
from .time_utils import parse_iso_datetime

MEASUREMENT_FIELDS = (
    "across_back",
    "chest",
    "sleeve_length",
    "around_arm",
    "neck",
    "top_length",
    "wrist",
    "trouser_waist",
    "trouser_thigh",
    "trouser_knee",
    "trouser_length",
    "trouser_bars",
)

UNITS = ("cm", "in")

# Inclusive [min, max] per field and unit
MEASUREMENT_RANGES = {
    "cm": {
        "across_back": (20, 80),
        "chest": (50, 200),
        "sleeve_length": (20, 100),
        "around_arm": (15, 80),
        "neck": (20, 60),
        "top_length": (30, 150),
        "wrist": (10, 40),
        "trouser_waist": (50, 200),
        "trouser_thigh": (30, 100),
        "trouser_knee": (20, 80),
        "trouser_length": (50, 150),
        "trouser_bars": (5, 30),
    },
    "in": {
        "across_back": (8, 32),
        "chest": (20, 80),
        "sleeve_length": (8, 40),
        "around_arm": (6, 32),
        "neck": (8, 24),
        "top_length": (12, 60),
        "wrist": (4, 16),
        "trouser_waist": (20, 80),
        "trouser_thigh": (12, 40),
        "trouser_knee": (8, 32),
        "trouser_length": (20, 60),
        "trouser_bars": (2, 12),
    },
}

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass
class MeasurementValidation:
    is_valid: bool
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"isValid": self.is_valid, "errors": list(self.errors)}


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def ensure_text(value: Any, name: str) -> Optional[str]:
    """Pass strings and None through; any other JSON type is a ValidationError."""
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"{name} must be a string")
    return value


def parse_numeric(value: Any) -> Optional[float]:
    """
    Coerce a JSON value to float.

    Returns None for absent/blank values and for anything that does not parse
    to a finite number (NaN and infinities included). Booleans are rejected
    even though they are ints in Python.
    """
    if is_blank(value) or isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            number = float(value)
        else:
            number = float(str(value).strip())
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def normalize_phone(value: Any) -> Optional[str]:
    if is_blank(value):
        return None
    return re.sub(r"[^\d+]", "", str(value).strip()) or None


def validate_email(value: Any) -> bool:
    return isinstance(value, str) and bool(EMAIL_RE.match(value.strip()))


def _format_number(n: float) -> str:
    return str(int(n)) if float(n).is_integer() else str(n)


def validate_measurement(data: dict, units: str = "cm", partial: bool = False) -> MeasurementValidation:
    """
    Check a measurement payload.

    Full validation (create) requires a client name or phone and at least one
    numeric field. With partial=True (update) only the fields present are
    checked. Every present numeric field must be a non-negative number inside
    the range for `units`.
    """
    errors: list[str] = []
    data = data or {}

    if units not in MEASUREMENT_RANGES:
        return MeasurementValidation(False, [f"Invalid units '{units}'. Must be one of: {', '.join(UNITS)}"])
    ranges = MEASUREMENT_RANGES[units]

    if not partial:
        name = data.get("client_name", data.get("name"))
        phone = data.get("client_phone", data.get("phone"))
        if is_blank(name) and is_blank(phone):
            errors.append("Client name or phone is required")

    present = [f for f in MEASUREMENT_FIELDS if not is_blank(data.get(f))]
    if not partial and not present:
        errors.append("At least one measurement field is required")

    for name in present:
        raw = data.get(name)
        value = parse_numeric(raw)
        if value is None:
            errors.append(f"{name} must be a number")
            continue
        if value < 0:
            errors.append(f"{name} cannot be negative")
            continue
        low, high = ranges[name]
        if value < low or value > high:
            errors.append(
                f"{name} must be between {_format_number(low)} and {_format_number(high)} {units} "
                f"(got {_format_number(value)})"
            )

    return MeasurementValidation(is_valid=not errors, errors=errors)


def parse_datetime_field(value: Any, name: str, end_of_day: bool = False) -> Optional[datetime]:
    """
    Parse an ISO date/datetime from input, raising ValidationError on garbage.

    With end_of_day=True a bare date ("2026-03-01") means the last instant of
    that day, so "toDate" filters are inclusive.
    """
    try:
        dt = parse_iso_datetime(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {name}: expected an ISO-8601 date")
    if dt is not None and end_of_day and len(str(value).strip()) == 10:
        dt = dt + timedelta(days=1) - timedelta(microseconds=1)
    return dt
