# Overview: Application branding/locale settings stored as a single JSON document.

from __future__ import annotations

from ..errors import ValidationError
from ..extensions import db
from ..models import SystemSetting

SETTINGS_KEY = "app"

DEFAULT_SETTINGS = {
    "business_name": "FitTrack",
    "tagline": "Measurements made simple",
    "primary_color": "#1e3a8a",
    "secondary_color": "#f59e0b",
    "currency": "USD",
    "timezone": "UTC",
    "date_format": "YYYY-MM-DD",
    "default_units": "cm",
}


def get_settings() -> dict:
    row = db.session.get(SystemSetting, SETTINGS_KEY)
    if row is None:
        return dict(DEFAULT_SETTINGS)
    return {**DEFAULT_SETTINGS, **(row.value or {})}


def update_settings(principal, data: dict) -> dict:
    """Replace the stored document. Unknown keys are rejected; missing keys fall back to defaults."""
    if not isinstance(data, dict) or not data:
        raise ValidationError("Settings payload must be a non-empty object")
    unknown = sorted(set(data) - set(DEFAULT_SETTINGS))
    if unknown:
        raise ValidationError(f"Unknown settings: {', '.join(unknown)}")
    if "default_units" in data and data["default_units"] not in ("cm", "in"):
        raise ValidationError("default_units must be 'cm' or 'in'")

    row = db.session.get(SystemSetting, SETTINGS_KEY)
    if row is None:
        row = SystemSetting(key=SETTINGS_KEY, value=dict(data), updated_by=principal.id)
        db.session.add(row)
    else:
        row.value = dict(data)
        row.updated_by = principal.id
    db.session.commit()
    return get_settings()
