# Overview: Measurement profiles (named groupings per customer) and garment fit feedback.

from __future__ import annotations

from ..database import require_tables
from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..models import Customer, GarmentFeedback, Measurement, MeasurementProfile, Order
from ..validation import ensure_text, is_blank

PROFILE_TYPES = ("wedding", "seasonal", "formal", "casual", "custom")
FIT_FEEDBACK_VALUES = ("too_tight", "slightly_tight", "perfect", "slightly_loose", "too_loose")


def list_profiles(customer_id: int | None = None) -> list[MeasurementProfile]:
    require_tables(MeasurementProfile.__tablename__)
    query = db.session.query(MeasurementProfile)
    if customer_id:
        query = query.filter(MeasurementProfile.customer_id == customer_id)
    return query.order_by(MeasurementProfile.created_at.desc(), MeasurementProfile.id.desc()).all()


def create_profile(principal, data: dict) -> MeasurementProfile:
    require_tables(MeasurementProfile.__tablename__)
    customer_id = data.get("customer_id")
    name = ensure_text(data.get("name"), "name")
    if not customer_id or is_blank(name):
        raise ValidationError("customer_id and name are required")
    if not db.session.get(Customer, customer_id):
        raise NotFoundError("Customer not found")

    profile_type = data.get("profile_type") or "custom"
    if profile_type not in PROFILE_TYPES:
        raise ValidationError(f"profile_type must be one of: {', '.join(PROFILE_TYPES)}")

    profile = MeasurementProfile(
        customer_id=customer_id,
        name=name.strip(),
        profile_type=profile_type,
        notes=data.get("notes") or None,
        created_by=principal.id,
    )
    db.session.add(profile)
    db.session.commit()
    return profile


def list_feedback(measurement_id: int | None = None) -> list[GarmentFeedback]:
    require_tables(GarmentFeedback.__tablename__)
    query = db.session.query(GarmentFeedback)
    if measurement_id:
        query = query.filter(GarmentFeedback.measurement_id == measurement_id)
    return query.order_by(GarmentFeedback.created_at.desc(), GarmentFeedback.id.desc()).all()


def create_feedback(principal, data: dict) -> GarmentFeedback:
    require_tables(GarmentFeedback.__tablename__)
    measurement_id = data.get("measurement_id")
    fit = data.get("fit_feedback")
    if not measurement_id or not fit:
        raise ValidationError("measurement_id and fit_feedback are required")
    if fit not in FIT_FEEDBACK_VALUES:
        raise ValidationError(f"fit_feedback must be one of: {', '.join(FIT_FEEDBACK_VALUES)}")
    if not db.session.get(Measurement, measurement_id):
        raise NotFoundError("Measurement not found")
    order_id = data.get("order_id")
    if order_id and not db.session.get(Order, order_id):
        raise NotFoundError("Order not found")

    feedback = GarmentFeedback(
        measurement_id=measurement_id,
        order_id=order_id or None,
        garment_type=data.get("garment_type") or None,
        fit_feedback=fit,
        notes=data.get("notes") or None,
        created_by=principal.id,
    )
    db.session.add(feedback)
    db.session.commit()
    return feedback
