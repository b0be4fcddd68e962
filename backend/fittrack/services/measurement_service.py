# Overview: Service-layer operations for measurements and their append-only history.

"""
Every create and update writes a MeasurementHistory row in the same
transaction as the measurement itself. History rows are never updated or
deleted; a measurement delete adds a final "delete" entry.
"""

from __future__ import annotations

import secrets
import string
import time

from sqlalchemy.orm import joinedload

from ..database import has_table, transaction
from ..errors import ConflictError, NotFoundError, ValidationError
from ..extensions import db
from ..models import (
    Customer,
    Fitting,
    GarmentFeedback,
    Measurement,
    MeasurementHistory,
    Order,
    Reminder,
    User,
)
from ..pagination import paginate
from ..permissions import Resource
from ..validation import (
    MEASUREMENT_FIELDS,
    UNITS,
    is_blank,
    parse_datetime_field,
    parse_numeric,
    validate_measurement,
)
from . import customer_service, permission_service

UPDATABLE_TEXT_FIELDS = ("fit_preference", "additional_info", "branch")
MIN_COMPARE = 2
MAX_COMPARE = 5


def generate_entry_id() -> str:
    alphabet = string.ascii_lowercase + string.digits
    suffix = "".join(secrets.choice(alphabet) for _ in range(9))
    return f"ENT-{int(time.time() * 1000)}-{suffix}"


def _base_query():
    return db.session.query(Measurement).options(
        joinedload(Measurement.customer),
        joinedload(Measurement.creator),
    )


def list_measurements(
    principal,
    access,
    *,
    search=None,
    branch=None,
    unit=None,
    tailor=None,
    from_date=None,
    to_date=None,
    page=1,
    limit=20,
) -> dict:
    query = _base_query().outerjoin(Customer, Measurement.customer_id == Customer.id)
    query = permission_service.scope_query(principal, Resource.MEASUREMENT, query, access)

    if search:
        term = f"%{search.strip()}%"
        query = query.filter(
            Customer.name.ilike(term) | Customer.phone.ilike(term) | Measurement.entry_id.ilike(term)
        )
    if branch:
        query = query.filter(Measurement.branch == branch)
    if unit:
        query = query.filter(Measurement.units == unit)
    if tailor:
        query = query.filter(Measurement.created_by == tailor)
    if from_date:
        query = query.filter(Measurement.created_at >= parse_datetime_field(from_date, "fromDate"))
    if to_date:
        query = query.filter(Measurement.created_at <= parse_datetime_field(to_date, "toDate", end_of_day=True))

    query = query.order_by(Measurement.created_at.desc(), Measurement.id.desc())
    return paginate(query, page, limit)


def find_measurement(identifier) -> Measurement | None:
    """Look up by primary key, then by entry_id."""
    measurement = None
    text = str(identifier).strip()
    if text.isdigit():
        measurement = _base_query().filter(Measurement.id == int(text)).first()
    if measurement is None:
        measurement = _base_query().filter(Measurement.entry_id == text).first()
    return measurement


def get_measurement(principal, access, identifier) -> Measurement:
    measurement = find_measurement(identifier)
    if not measurement:
        raise NotFoundError("Measurement not found")
    permission_service.ensure_row_access(principal, Resource.MEASUREMENT, measurement, access)
    return measurement


def _user_branch(user_id: int) -> str | None:
    user = db.session.get(User, user_id)
    return user.branch if user else None


def create_measurement(principal, data: dict) -> Measurement:
    data = dict(data or {})
    units = data.get("units") or "cm"

    customer = None
    if data.get("customer_id"):
        customer = db.session.get(Customer, data.get("customer_id"))
        if not customer:
            raise NotFoundError("Customer not found")
        data.setdefault("client_name", customer.name)
        data.setdefault("client_phone", customer.phone)

    validation = validate_measurement(data, units)
    if not validation.is_valid:
        raise ValidationError("Validation failed", errors=validation.errors)

    entry_id = data.get("entry_id") or generate_entry_id()
    if db.session.query(Measurement.id).filter(Measurement.entry_id == entry_id).first():
        raise ConflictError("A measurement with this entry ID already exists")

    branch = data.get("branch")
    if not branch and principal.role != "admin":
        branch = _user_branch(principal.id)

    with transaction():
        if customer is None:
            customer = customer_service.find_or_create(
                data.get("client_name", data.get("name")),
                data.get("client_phone", data.get("phone")),
                data.get("client_email", data.get("email")),
                data.get("client_address", data.get("address")),
            )

        measurement = Measurement(
            entry_id=entry_id,
            customer_id=customer.id,
            units=units,
            fit_preference=data.get("fit_preference") or None,
            additional_info=data.get("additional_info") or None,
            created_by=principal.id,
            branch=branch or None,
            version=1,
        )
        for name in MEASUREMENT_FIELDS:
            setattr(measurement, name, parse_numeric(data.get(name)))
        db.session.add(measurement)
        db.session.flush()

        db.session.add(MeasurementHistory(
            measurement_id=measurement.id,
            version=1,
            action="create",
            changes={name: {"old": None, "new": value} for name, value in measurement.field_values().items() if value is not None},
            changed_by=principal.id,
        ))

    return measurement


def update_measurement(principal, access, measurement_id: int, data: dict) -> tuple[Measurement, dict]:
    """Apply a partial update. Returns the measurement and the recorded changes ({} when nothing changed)."""
    measurement = get_measurement(principal, access, measurement_id)
    data = data or {}

    units = data.get("units") or measurement.units
    if units not in UNITS:
        raise ValidationError("Validation failed", errors=[f"Invalid units '{units}'. Must be one of: {', '.join(UNITS)}"])

    provided = [name for name in MEASUREMENT_FIELDS if name in data]
    if not provided and not any(key in data for key in ("units",) + UPDATABLE_TEXT_FIELDS):
        raise ValidationError("No valid fields to update")

    merged = {**measurement.field_values(), **{name: data.get(name) for name in provided}}
    validation = validate_measurement(merged, units, partial=True)
    if not validation.is_valid:
        raise ValidationError("Validation failed", errors=validation.errors)

    changes = {}
    for name in provided:
        new = parse_numeric(data.get(name))
        old = getattr(measurement, name)
        if new != old:
            changes[name] = {"old": old, "new": new}
            setattr(measurement, name, new)

    if units != measurement.units:
        changes["units"] = {"old": measurement.units, "new": units}
        measurement.units = units

    for name in UPDATABLE_TEXT_FIELDS:
        if name in data:
            new = None if is_blank(data.get(name)) else str(data.get(name)).strip()
            old = getattr(measurement, name)
            if new != old:
                changes[name] = {"old": old, "new": new}
                setattr(measurement, name, new)

    if not changes:
        return measurement, {}

    with transaction():
        measurement.version = (measurement.version or 1) + 1
        db.session.add(MeasurementHistory(
            measurement_id=measurement.id,
            version=measurement.version,
            action="update",
            changes=changes,
            changed_by=principal.id,
        ))

    return measurement, changes


def delete_measurement(principal, measurement_id: int) -> dict:
    measurement = db.session.get(Measurement, measurement_id)
    if not measurement:
        raise NotFoundError("Measurement not found")

    if db.session.query(Order.id).filter_by(measurement_id=measurement.id).first() or \
            db.session.query(Fitting.id).filter_by(measurement_id=measurement.id).first():
        raise ConflictError("Cannot delete a measurement that has orders or fittings")

    summary = {"id": measurement.id, "entry_id": measurement.entry_id}
    with transaction():
        if has_table(Reminder.__tablename__):
            db.session.query(Reminder).filter_by(measurement_id=measurement.id).update({"measurement_id": None})
        if has_table(GarmentFeedback.__tablename__):
            db.session.query(GarmentFeedback).filter_by(measurement_id=measurement.id).delete()
        db.session.add(MeasurementHistory(
            measurement_id=measurement.id,
            version=measurement.version,
            action="delete",
            changes={"entry_id": {"old": measurement.entry_id, "new": None}},
            changed_by=principal.id,
        ))
        db.session.delete(measurement)

    return summary


def get_history(principal, access, measurement_id: int) -> list[MeasurementHistory]:
    measurement = get_measurement(principal, access, measurement_id)
    return (
        db.session.query(MeasurementHistory)
        .options(joinedload(MeasurementHistory.user))
        .filter(MeasurementHistory.measurement_id == measurement.id)
        .order_by(MeasurementHistory.created_at.desc(), MeasurementHistory.id.desc())
        .all()
    )


def compare(principal, access, identifiers: list[str]) -> list[Measurement]:
    identifiers = [i.strip() for i in identifiers if i and i.strip()]
    if len(identifiers) < MIN_COMPARE or len(identifiers) > MAX_COMPARE:
        raise ValidationError(f"Provide between {MIN_COMPARE} and {MAX_COMPARE} measurement ids")

    result = []
    for identifier in identifiers:
        measurement = find_measurement(identifier)
        if not measurement:
            raise NotFoundError("Measurement not found", invalidId=identifier)
        permission_service.ensure_row_access(principal, Resource.MEASUREMENT, measurement, access)
        result.append(measurement)
    return result
