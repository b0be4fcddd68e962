# Overview: Service-layer operations for customer reminders.

from __future__ import annotations

from datetime import timedelta

from sqlalchemy.orm import joinedload

from ..database import require_tables
from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..models import Customer, Measurement, Reminder, REMINDER_STATUSES
from ..permissions import Resource
from ..time_utils import utcnow
from ..validation import parse_datetime_field
from . import permission_service

MAX_LIMIT = 100
CHANNELS = ("in_app", "email", "sms")
DEFAULT_SNOOZE_DAYS = 7


def list_reminders(principal, access, *, customer_id=None, status=None, limit=50) -> list[Reminder]:
    require_tables(Reminder.__tablename__)
    query = db.session.query(Reminder).options(joinedload(Reminder.customer), joinedload(Reminder.measurement))
    query = permission_service.scope_query(principal, Resource.REMINDER, query, access)
    if customer_id:
        query = query.filter(Reminder.customer_id == customer_id)
    if status:
        query = query.filter(Reminder.status == status)
    limit = min(max(limit or 50, 1), MAX_LIMIT)
    return (
        query.order_by(Reminder.due_at.is_(None), Reminder.due_at.asc(), Reminder.id.asc())
        .limit(limit)
        .all()
    )


def create_reminder(principal, data: dict) -> Reminder:
    require_tables(Reminder.__tablename__)
    customer_id = data.get("customer_id")
    if not customer_id:
        raise ValidationError("customer_id is required")
    if not db.session.get(Customer, customer_id):
        raise NotFoundError("Customer not found")

    measurement_id = data.get("measurement_id")
    if measurement_id and not db.session.get(Measurement, measurement_id):
        raise NotFoundError("Measurement not found")

    due_at = parse_datetime_field(data.get("due_at"), "due_at")
    if due_at is None:
        raise ValidationError("due_at is required")

    channel = data.get("channel") or "in_app"
    if channel not in CHANNELS:
        raise ValidationError(f"channel must be one of: {', '.join(CHANNELS)}")

    reminder = Reminder(
        customer_id=customer_id,
        measurement_id=measurement_id or None,
        reminder_type=data.get("reminder_type") or "periodic",
        due_at=due_at,
        status="pending",
        channel=channel,
        created_by=principal.id,
    )
    db.session.add(reminder)
    db.session.commit()
    return reminder


def update_reminder(reminder_id: int, data: dict) -> Reminder:
    require_tables(Reminder.__tablename__)
    reminder = db.session.get(Reminder, reminder_id)
    if not reminder:
        raise NotFoundError("Reminder not found")

    status = data.get("status")
    if status not in REMINDER_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(REMINDER_STATUSES)}")

    reminder.status = status
    if status == "sent":
        reminder.sent_at = utcnow()
    elif status == "snoozed":
        snooze_until = parse_datetime_field(data.get("snooze_until"), "snooze_until")
        reminder.due_at = snooze_until or utcnow() + timedelta(days=DEFAULT_SNOOZE_DAYS)

    db.session.commit()
    return reminder
