# Overview: Read-only view over the audit log for the activity screen.

from __future__ import annotations

from sqlalchemy.orm import joinedload

from ..extensions import db
from ..models import AuditLog
from ..pagination import paginate
from ..validation import parse_datetime_field


def list_activity(*, action=None, resource_type=None, user_id=None, from_date=None, to_date=None, page=1, limit=50) -> dict:
    query = db.session.query(AuditLog).options(joinedload(AuditLog.user))
    if action:
        query = query.filter(AuditLog.action == action)
    if resource_type:
        query = query.filter(AuditLog.resource_type == resource_type)
    if user_id:
        query = query.filter(AuditLog.user_id == user_id)
    if from_date:
        query = query.filter(AuditLog.created_at >= parse_datetime_field(from_date, "fromDate"))
    if to_date:
        query = query.filter(AuditLog.created_at <= parse_datetime_field(to_date, "toDate", end_of_day=True))
    query = query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
    return paginate(query, page, limit)
