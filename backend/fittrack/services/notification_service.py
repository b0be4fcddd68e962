# Overview: Reading and acknowledging in-app notifications. Always scoped to the caller.

from __future__ import annotations

from sqlalchemy import func

from ..database import has_table, require_tables
from ..errors import NotFoundError
from ..extensions import db
from ..models import Notification
from ..time_utils import utcnow

MAX_LIMIT = 100


def list_notifications(principal, limit: int = 50) -> dict:
    require_tables(Notification.__tablename__)
    limit = min(max(limit or 50, 1), MAX_LIMIT)
    rows = (
        db.session.query(Notification)
        .filter(Notification.user_id == principal.id)
        .order_by(Notification.read_at.isnot(None), Notification.created_at.desc(), Notification.id.desc())
        .limit(limit)
        .all()
    )
    unread = (
        db.session.query(func.count(Notification.id))
        .filter(Notification.user_id == principal.id, Notification.read_at.is_(None))
        .scalar()
    )
    return {"notifications": [n.to_dict() for n in rows], "unreadCount": unread or 0}


def mark_read(principal, notification_id: int) -> Notification:
    """
    Mark one notification read.

    Idempotent: a notification that is already read keeps its original
    read_at and the call still succeeds. Another user's notification is
    reported as not found, as is any id when the notifications table is
    missing.
    """
    if not has_table(Notification.__tablename__):
        raise NotFoundError("Notification not found")
    notification = (
        db.session.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == principal.id)
        .first()
    )
    if not notification:
        raise NotFoundError("Notification not found")
    if notification.read_at is None:
        notification.read_at = utcnow()
        db.session.commit()
    return notification


def mark_all_read(principal) -> int:
    require_tables(Notification.__tablename__)
    count = (
        db.session.query(Notification)
        .filter(Notification.user_id == principal.id, Notification.read_at.is_(None))
        .update({Notification.read_at: utcnow()}, synchronize_session=False)
    )
    db.session.commit()
    return count
