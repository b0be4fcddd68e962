# Overview: Best-effort side-effect sink for audit records and in-app notifications.

"""
Side effects run after the primary write has committed. Each one runs in its
own savepoint: a failing effect rolls back only that savepoint and is logged
at WARNING. Nothing raised here reaches the caller, so a failed audit row
or notification never turns a successful request into an error.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from flask import current_app, has_request_context, request

from ..extensions import db
from ..models import AuditLog, Notification

MAX_IP_LENGTH = 255
MAX_USER_AGENT_LENGTH = 512


def dispatch(effect: Callable[[], Any], description: str) -> bool:
    """Run `effect` in a savepoint and commit; swallow and log any failure. Returns True on success."""
    try:
        with db.session.begin_nested():
            effect()
    except Exception as e:
        current_app.logger.warning("Side effect '%s' failed: %s", description, e)
        return False

    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.warning("Side effect '%s' failed on commit: %s", description, e)
        return False
    return True


def client_ip() -> Optional[str]:
    if not has_request_context():
        return None
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        ip = forwarded.split(",")[0].strip()
    else:
        ip = request.headers.get("X-Real-IP") or request.remote_addr
    return ip[:MAX_IP_LENGTH] if ip else None


def client_user_agent() -> Optional[str]:
    if not has_request_context():
        return None
    agent = request.headers.get("User-Agent")
    return agent[:MAX_USER_AGENT_LENGTH] if agent else None


def record_audit(
    user_id: Optional[int],
    action: str,
    resource_type: str,
    resource_id: Any = None,
    details: Optional[dict] = None,
) -> bool:
    def write():
        db.session.add(AuditLog(
            user_id=user_id,
            action=action,
            resource_type=resource_type,
            resource_id=str(resource_id) if resource_id is not None else None,
            details=details or {},
            ip_address=client_ip(),
            user_agent=client_user_agent(),
        ))

    return dispatch(write, f"audit {action} {resource_type}")


def notify(
    user_id: int,
    type: str,
    title: str,
    body: Optional[str] = None,
    resource_type: Optional[str] = None,
    resource_id: Optional[int] = None,
) -> bool:
    def write():
        db.session.add(Notification(
            user_id=user_id,
            type=type,
            title=title,
            body=body,
            resource_type=resource_type,
            resource_id=resource_id,
        ))

    return dispatch(write, f"notify {type}")
