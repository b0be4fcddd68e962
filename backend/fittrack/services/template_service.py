# Overview: Measurement templates used to pre-fill capture forms.

from __future__ import annotations

from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..models import MeasurementTemplate
from ..validation import MEASUREMENT_FIELDS, UNITS, ensure_text, is_blank, parse_numeric

TEMPLATE_TYPES = ("shirt", "suit", "trouser", "dress", "traditional", "custom")


def list_templates(template_type: str | None = None, region: str | None = None) -> list[MeasurementTemplate]:
    query = db.session.query(MeasurementTemplate)
    if template_type:
        query = query.filter(MeasurementTemplate.template_type == template_type)
    if region:
        query = query.filter(MeasurementTemplate.region == region)
    return query.order_by(MeasurementTemplate.name).all()


def get_template(template_id: int) -> MeasurementTemplate:
    template = db.session.get(MeasurementTemplate, template_id)
    if not template:
        raise NotFoundError("Template not found")
    return template


def _clean_defaults(values: dict | None) -> dict:
    result = {}
    for name, raw in (values or {}).items():
        if name not in MEASUREMENT_FIELDS:
            raise ValidationError(f"Unknown measurement field '{name}'")
        value = parse_numeric(raw)
        if value is None:
            raise ValidationError(f"Default for {name} must be a number")
        result[name] = value
    return result


def _clean_ranges(ranges: dict | None) -> dict:
    result = {}
    for name, bounds in (ranges or {}).items():
        if name not in MEASUREMENT_FIELDS:
            raise ValidationError(f"Unknown measurement field '{name}'")
        if not isinstance(bounds, dict):
            raise ValidationError(f"Range for {name} must be an object with min and max")
        low, high = parse_numeric(bounds.get("min")), parse_numeric(bounds.get("max"))
        if low is None or high is None or low > high:
            raise ValidationError(f"Range for {name} needs numeric min <= max")
        result[name] = {"min": low, "max": high}
    return result


def create_template(principal, data: dict) -> MeasurementTemplate:
    units = data.get("units") or "cm"
    if units not in UNITS:
        raise ValidationError(f"units must be one of: {', '.join(UNITS)}")
    template_type = data.get("template_type") or "custom"
    if template_type not in TEMPLATE_TYPES:
        raise ValidationError(f"template_type must be one of: {', '.join(TEMPLATE_TYPES)}")

    # Field defaults may come nested under "defaults" or flat on the body
    defaults = data.get("defaults")
    if defaults is None:
        defaults = {name: data[name] for name in MEASUREMENT_FIELDS if not is_blank(data.get(name))}

    template = MeasurementTemplate(
        name=(ensure_text(data.get("name"), "name") or "").strip() or "Untitled Template",
        description=data.get("description") or None,
        template_type=template_type,
        region=data.get("region") or "",
        units=units,
        defaults=_clean_defaults(defaults),
        field_ranges=_clean_ranges(data.get("field_ranges")),
        created_by=principal.id,
    )
    db.session.add(template)
    db.session.commit()
    return template
