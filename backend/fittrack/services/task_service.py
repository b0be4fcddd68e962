# Overview: Service-layer operations for staff task assignments.

from __future__ import annotations

from sqlalchemy.orm import joinedload

from ..database import has_table, require_tables
from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..models import TaskAssignment, User, TASK_STATUSES
from ..permissions import Access, Resource
from ..time_utils import utcnow
from ..validation import ensure_text, is_blank, parse_datetime_field
from . import permission_service

MAX_LIMIT = 100
RESOURCE_TYPES = ("measurement", "order", "fitting", "customer", "reminder")


def _base_query():
    return db.session.query(TaskAssignment).options(joinedload(TaskAssignment.assignee))


def list_tasks(principal, access, *, assignee_id=None, status=None, limit=50) -> list[TaskAssignment]:
    require_tables(TaskAssignment.__tablename__)
    query = permission_service.scope_query(principal, Resource.TASK, _base_query(), access)
    if assignee_id and access == Access.ALLOW:
        query = query.filter(TaskAssignment.assignee_id == assignee_id)
    if status:
        query = query.filter(TaskAssignment.status == status)
    limit = min(max(limit or 50, 1), MAX_LIMIT)
    return (
        query.order_by(
            TaskAssignment.due_at.is_(None),
            TaskAssignment.due_at.asc(),
            TaskAssignment.created_at.desc(),
            TaskAssignment.id.desc(),
        )
        .limit(limit)
        .all()
    )


def get_task(principal, access, task_id: int) -> TaskAssignment:
    # A missing table means the task cannot exist
    if not has_table(TaskAssignment.__tablename__):
        raise NotFoundError("Task not found")
    task = _base_query().filter(TaskAssignment.id == task_id).first()
    if not task:
        raise NotFoundError("Task not found")
    permission_service.ensure_row_access(principal, Resource.TASK, task, access)
    return task


def create_task(principal, data: dict) -> TaskAssignment:
    require_tables(TaskAssignment.__tablename__)
    assignee_id = data.get("assignee_id")
    task_type = ensure_text(data.get("task_type"), "task_type")
    resource_type = data.get("resource_type")
    if not assignee_id or is_blank(task_type) or is_blank(resource_type):
        raise ValidationError("assignee_id, task_type and resource_type are required")
    if resource_type not in RESOURCE_TYPES:
        raise ValidationError(f"resource_type must be one of: {', '.join(RESOURCE_TYPES)}")

    assignee = db.session.get(User, assignee_id)
    if not assignee or assignee.role == "customer":
        raise ValidationError("assignee_id must reference a staff user")

    task = TaskAssignment(
        assignee_id=assignee.id,
        task_type=task_type.strip(),
        resource_type=resource_type,
        resource_id=data.get("resource_id") or None,
        due_at=parse_datetime_field(data.get("due_at"), "due_at"),
        status="pending",
        created_by=principal.id,
    )
    db.session.add(task)
    db.session.commit()
    return task


def update_task(principal, access, task_id: int, data: dict) -> TaskAssignment:
    require_tables(TaskAssignment.__tablename__)
    task = get_task(principal, access, task_id)

    status = data.get("status")
    if status is None:
        raise ValidationError("No valid fields to update")
    if status not in TASK_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(TASK_STATUSES)}")

    task.status = status
    task.completed_at = utcnow() if status == "completed" else None
    db.session.commit()
    return task


def delete_task(principal, access, task_id: int) -> None:
    require_tables(TaskAssignment.__tablename__)
    task = get_task(principal, access, task_id)
    db.session.delete(task)
    db.session.commit()
