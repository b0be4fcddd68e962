# Overview: Evaluates the role policy and applies row-level ownership to queries and rows.

"""
The policy table (fittrack.permissions) answers allow / self / deny for a
(role, resource, action). This module is the only place that turns "self"
into concrete ownership rules:

- fitting      -> fitting.tailor_id == principal.id
- task         -> task.assignee_id == principal.id
- reminder     -> reminder.created_by == principal.id
- measurement  -> tailor: created_by == principal.id;
                  customer: the measurement's customer has the principal's email
- customer     -> the tailor created at least one measurement for the customer
- notification -> notification.user_id == principal.id (every role)
"""

from __future__ import annotations

from sqlalchemy import false, func, select

from ..database import require_tables
from ..errors import AuthorizationError
from ..extensions import db
from ..models import (
    Customer,
    Fitting,
    Measurement,
    Notification,
    Permission,
    Reminder,
    TaskAssignment,
)
from ..permissions import Access, Resource, evaluate, permission_rows


class PermissionDeniedError(AuthorizationError):
    """Raised when the policy denies a role outright."""


def check_access(principal, resource: str, action: str) -> str:
    """Return ALLOW or SELF; raise PermissionDeniedError for DENY."""
    access = evaluate(principal.role, resource, action)
    if access == Access.DENY:
        raise PermissionDeniedError("Insufficient permissions")
    return access


def _customer_ids_for_email(email: str):
    return select(Customer.id).where(func.lower(Customer.email) == (email or "").lower())


def _customer_ids_measured_by(user_id: int):
    return select(Measurement.customer_id).where(Measurement.created_by == user_id)


def scope_query(principal, resource: str, query, access: str):
    """Narrow a list query to the principal's own rows when access is SELF."""
    if access != Access.SELF:
        return query

    if resource == Resource.FITTING:
        return query.filter(Fitting.tailor_id == principal.id)
    if resource == Resource.TASK:
        return query.filter(TaskAssignment.assignee_id == principal.id)
    if resource == Resource.REMINDER:
        return query.filter(Reminder.created_by == principal.id)
    if resource == Resource.NOTIFICATION:
        return query.filter(Notification.user_id == principal.id)
    if resource == Resource.MEASUREMENT:
        if principal.role == "customer":
            return query.filter(Measurement.customer_id.in_(_customer_ids_for_email(principal.email)))
        return query.filter(Measurement.created_by == principal.id)
    if resource == Resource.CUSTOMER:
        return query.filter(Customer.id.in_(_customer_ids_measured_by(principal.id)))

    # SELF on a resource without an ownership rule matches nothing
    return query.filter(false())


def owns(principal, resource: str, row) -> bool:
    if resource == Resource.FITTING:
        return row.tailor_id == principal.id
    if resource == Resource.TASK:
        return row.assignee_id == principal.id
    if resource == Resource.REMINDER:
        return row.created_by == principal.id
    if resource == Resource.NOTIFICATION:
        return row.user_id == principal.id
    if resource == Resource.MEASUREMENT:
        if principal.role == "customer":
            customer = row.customer
            return bool(customer and customer.email and customer.email.lower() == (principal.email or "").lower())
        return row.created_by == principal.id
    if resource == Resource.CUSTOMER:
        return db.session.query(
            db.session.query(Measurement.id)
            .filter(Measurement.customer_id == row.id, Measurement.created_by == principal.id)
            .exists()
        ).scalar()
    return False


def ensure_row_access(principal, resource: str, row, access: str) -> None:
    """403 when access is SELF and the row belongs to someone else."""
    if access == Access.SELF and not owns(principal, resource, row):
        raise AuthorizationError("Access denied")


def permissions_for_role(role: str) -> dict:
    """Granted actions grouped by resource, read from the permissions table."""
    require_tables("permissions")
    rows = (
        db.session.query(Permission)
        .filter(Permission.role == role)
        .order_by(Permission.resource_type, Permission.action)
        .all()
    )
    result: dict[str, list[str]] = {}
    for row in rows:
        result.setdefault(row.resource_type, []).append(row.action)
    return result


def seed_permissions() -> int:
    """
    Write every non-deny policy entry into the permissions table.

    Idempotent: existing rows are kept, stale rows removed. Returns the number
    of rows inserted.
    """
    require_tables("permissions")
    wanted = set(permission_rows())
    existing = {(p.role, p.resource_type, p.action): p for p in db.session.query(Permission).all()}

    for key, row in existing.items():
        if key not in wanted:
            db.session.delete(row)

    created = 0
    for role, resource, action in sorted(wanted - set(existing)):
        db.session.add(Permission(role=role, resource_type=resource, action=action))
        created += 1

    db.session.commit()
    return created
