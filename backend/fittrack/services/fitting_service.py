# Overview: Service-layer operations for fitting appointments.

"""
Tailors only ever see and change fittings assigned to them: list queries are
scoped implicitly (a tailor's own tailor_id filter is ignored) and single-row
operations go through permission_service.ensure_row_access.
"""

from __future__ import annotations

from sqlalchemy.orm import joinedload

from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..models import Customer, Fitting, Measurement, User, FITTING_STATUSES
from ..pagination import paginate
from ..permissions import Access, Resource
from ..time_utils import utcnow
from ..validation import is_blank, parse_datetime_field
from . import permission_service

DEFAULT_LIMIT = 50
CLOSED_STATUSES = ("completed", "cancelled")


def _base_query():
    return db.session.query(Fitting).options(
        joinedload(Fitting.customer),
        joinedload(Fitting.measurement),
        joinedload(Fitting.tailor),
    )


def _check_status(status):
    if status not in FITTING_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(FITTING_STATUSES)}")


def _resolve_tailor(tailor_id) -> User:
    tailor = db.session.get(User, tailor_id)
    if not tailor or tailor.role != "tailor":
        raise ValidationError("tailor_id must reference a user with the tailor role")
    return tailor


def list_fittings(
    principal,
    access,
    *,
    search=None,
    status=None,
    tailor_id=None,
    from_date=None,
    to_date=None,
    branch=None,
    page=1,
    limit=DEFAULT_LIMIT,
) -> dict:
    query = _base_query().outerjoin(Customer, Fitting.customer_id == Customer.id)
    query = permission_service.scope_query(principal, Resource.FITTING, query, access)

    if tailor_id and access == Access.ALLOW:
        query = query.filter(Fitting.tailor_id == tailor_id)
    if search:
        term = f"%{search.strip()}%"
        query = query.filter(Customer.name.ilike(term) | Customer.phone.ilike(term))
    if status:
        query = query.filter(Fitting.status == status)
    if from_date:
        query = query.filter(Fitting.scheduled_at >= parse_datetime_field(from_date, "fromDate"))
    if to_date:
        query = query.filter(Fitting.scheduled_at <= parse_datetime_field(to_date, "toDate", end_of_day=True))
    if branch:
        query = query.filter(Fitting.branch == branch)

    query = query.order_by(Fitting.scheduled_at.asc(), Fitting.id.asc())
    return paginate(query, page, limit)


def get_fitting(principal, access, fitting_id: int) -> Fitting:
    fitting = _base_query().filter(Fitting.id == fitting_id).first()
    if not fitting:
        raise NotFoundError("Fitting not found")
    permission_service.ensure_row_access(principal, Resource.FITTING, fitting, access)
    return fitting


def create_fitting(principal, data: dict) -> Fitting:
    scheduled_at = parse_datetime_field(data.get("scheduled_at"), "scheduled_at")
    if scheduled_at is None:
        raise ValidationError("scheduled_at is required")
    if scheduled_at <= utcnow():
        raise ValidationError("scheduled_at must be in the future")

    measurement = None
    if data.get("measurement_id"):
        measurement = db.session.get(Measurement, data.get("measurement_id"))
        if not measurement:
            raise NotFoundError("Measurement not found")

    customer_id = data.get("customer_id") or (measurement.customer_id if measurement else None)
    if not customer_id:
        raise ValidationError("customer_id or measurement_id is required")
    if not db.session.get(Customer, customer_id):
        raise NotFoundError("Customer not found")

    tailor_id = data.get("tailor_id")
    if principal.role == "tailor":
        tailor_id = tailor_id or principal.id
        if str(tailor_id) != str(principal.id):
            raise ValidationError("Tailors can only schedule their own fittings")
    if not tailor_id:
        raise ValidationError("tailor_id is required")
    _resolve_tailor(tailor_id)

    status = data.get("status") or "scheduled"
    _check_status(status)

    branch = data.get("branch")
    if not branch:
        actor = db.session.get(User, principal.id)
        branch = actor.branch if actor else None

    fitting = Fitting(
        measurement_id=measurement.id if measurement else None,
        customer_id=customer_id,
        tailor_id=tailor_id,
        scheduled_at=scheduled_at,
        status=status,
        notes=data.get("notes") or None,
        branch=branch or None,
        created_by=principal.id,
    )
    db.session.add(fitting)
    db.session.commit()
    return fitting


def update_fitting(principal, access, fitting_id: int, data: dict) -> Fitting:
    fitting = get_fitting(principal, access, fitting_id)

    status = data.get("status", fitting.status)
    _check_status(status)

    if "scheduled_at" in data:
        scheduled_at = parse_datetime_field(data.get("scheduled_at"), "scheduled_at")
        if scheduled_at is None:
            raise ValidationError("scheduled_at cannot be empty")
        if scheduled_at <= utcnow() and status not in CLOSED_STATUSES:
            raise ValidationError("scheduled_at must be in the future")
        fitting.scheduled_at = scheduled_at

    if "tailor_id" in data and str(data.get("tailor_id")) != str(fitting.tailor_id):
        if access == Access.SELF:
            raise ValidationError("Tailors cannot reassign fittings")
        fitting.tailor_id = _resolve_tailor(data.get("tailor_id")).id

    fitting.status = status
    if "notes" in data:
        fitting.notes = None if is_blank(data.get("notes")) else data["notes"]
    if "branch" in data:
        fitting.branch = None if is_blank(data.get("branch")) else data["branch"]

    db.session.commit()
    return fitting


def delete_fitting(principal, access, fitting_id: int) -> None:
    fitting = get_fitting(principal, access, fitting_id)
    db.session.delete(fitting)
    db.session.commit()
