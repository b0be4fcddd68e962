# Overview: Expiry rules and the sweep that marks stale measurements.

"""
The sweep is request-triggered and runs to completion inside the request.

For each active rule:
  cutoff = now - (days_since_updated or days_since_created or 365) days
  compared column = updated_at when days_since_updated is set, else created_at
  candidates = measurements older than cutoff, not already expired,
               restricted to rule.branch when the rule has one

`mark_expired` rules flag the candidates (is_expired, expires_at = now).
`remind_only` rules leave them untouched and open one pending "remeasure"
reminder per candidate that does not already have one.

Already-expired rows never match again, so running the sweep twice in a row
marks nothing the second time.
"""

from __future__ import annotations

from datetime import timedelta

from flask import current_app

from ..database import has_table, require_tables
from ..errors import ValidationError
from ..extensions import db
from ..models import ExpiryRule, Measurement, Reminder
from ..time_utils import utcnow
from ..validation import ensure_text, is_blank

DEFAULT_EXPIRY_DAYS = 365
ACTIONS = ("mark_expired", "remind_only")
REMEASURE_REMINDER = "remeasure"


def list_rules() -> list[ExpiryRule]:
    require_tables(ExpiryRule.__tablename__)
    return db.session.query(ExpiryRule).order_by(ExpiryRule.created_at.desc(), ExpiryRule.id.desc()).all()


def _optional_days(data: dict, key: str):
    value = data.get(key)
    if value is None or value == "":
        return None
    try:
        days = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be a whole number of days")
    if days < 0:
        raise ValidationError(f"{key} cannot be negative")
    return days


def create_rule(data: dict) -> ExpiryRule:
    require_tables(ExpiryRule.__tablename__)
    name = ensure_text(data.get("name"), "name")
    if is_blank(name):
        raise ValidationError("name is required")
    action = data.get("action") or "mark_expired"
    if action not in ACTIONS:
        raise ValidationError(f"action must be one of: {', '.join(ACTIONS)}")

    rule = ExpiryRule(
        name=name.strip(),
        days_since_created=_optional_days(data, "days_since_created"),
        days_since_updated=_optional_days(data, "days_since_updated"),
        action=action,
        branch=data.get("branch") or None,
        is_active=data.get("is_active", True) is not False,
    )
    db.session.add(rule)
    db.session.commit()
    return rule


def _candidates(rule: ExpiryRule, now):
    if rule.days_since_updated is not None:
        days, column = rule.days_since_updated, Measurement.updated_at
    else:
        days = rule.days_since_created if rule.days_since_created is not None else DEFAULT_EXPIRY_DAYS
        column = Measurement.created_at
    cutoff = now - timedelta(days=days)

    query = db.session.query(Measurement).filter(column < cutoff, Measurement.is_expired.is_(False))
    if rule.branch:
        query = query.filter(Measurement.branch == rule.branch)
    return query


def _remind(rule: ExpiryRule, now) -> int:
    if not has_table(Reminder.__tablename__):
        current_app.logger.warning("Expiry rule %s wants reminders but %s is missing", rule.id, Reminder.__tablename__)
        return 0

    created = 0
    for measurement in _candidates(rule, now).all():
        exists = (
            db.session.query(Reminder.id)
            .filter(
                Reminder.measurement_id == measurement.id,
                Reminder.reminder_type == REMEASURE_REMINDER,
                Reminder.status.in_(("pending", "snoozed")),
            )
            .first()
        )
        if exists:
            continue
        db.session.add(Reminder(
            customer_id=measurement.customer_id,
            measurement_id=measurement.id,
            reminder_type=REMEASURE_REMINDER,
            due_at=now,
            status="pending",
            channel="in_app",
        ))
        created += 1
    return created


def run_sweep() -> dict:
    if not has_table(ExpiryRule.__tablename__):
        return {"marked": 0, "reminded": 0, "message": "No expiry rules"}

    rules = db.session.query(ExpiryRule).filter(ExpiryRule.is_active.is_(True)).order_by(ExpiryRule.id).all()
    if not rules:
        return {"marked": 0, "reminded": 0, "message": "No expiry rules"}

    now = utcnow()
    marked = 0
    reminded = 0
    try:
        for rule in rules:
            if rule.action == "mark_expired":
                marked += _candidates(rule, now).update(
                    {Measurement.is_expired: True, Measurement.expires_at: now},
                    synchronize_session=False,
                )
            elif rule.action == "remind_only":
                reminded += _remind(rule, now)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info("Expiry sweep: %s rules, %s marked, %s reminders", len(rules), marked, reminded)
    return {
        "marked": marked,
        "reminded": reminded,
        "message": f"Marked {marked} measurement(s) as expired",
    }
