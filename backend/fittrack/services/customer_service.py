# Overview: Service-layer operations for customers; encapsulates business logic and database work.

from __future__ import annotations

from sqlalchemy import func

from ..errors import ConflictError, NotFoundError, ValidationError
from ..extensions import db
from ..models import Customer, Fitting, Measurement, Order
from ..pagination import paginate
from ..permissions import Resource
from ..time_utils import to_utc_z, utcnow
from ..validation import is_blank, validate_email
from . import permission_service

SORTABLE_COLUMNS = {
    "name": Customer.name,
    "phone": Customer.phone,
    "email": Customer.email,
    "created_at": Customer.created_at,
    "updated_at": Customer.updated_at,
}
DETAIL_ROWS = 10


def _clean(value):
    if is_blank(value):
        return None
    return str(value).strip()


def _check_duplicates(phone: str | None, email: str | None, exclude_id: int | None = None) -> None:
    if phone:
        query = db.session.query(Customer.id).filter(Customer.phone == phone)
        if exclude_id:
            query = query.filter(Customer.id != exclude_id)
        if query.first():
            raise ConflictError("A customer with this phone number already exists")
    if email:
        query = db.session.query(Customer.id).filter(func.lower(Customer.email) == email.lower())
        if exclude_id:
            query = query.filter(Customer.id != exclude_id)
        if query.first():
            raise ConflictError("A customer with this email already exists")


def _measurement_stats(customer_ids: list[int]) -> dict[int, tuple[int, object]]:
    if not customer_ids:
        return {}
    rows = (
        db.session.query(
            Measurement.customer_id,
            func.count(Measurement.id),
            func.max(Measurement.created_at),
        )
        .filter(Measurement.customer_id.in_(customer_ids))
        .group_by(Measurement.customer_id)
        .all()
    )
    return {customer_id: (count, last) for customer_id, count, last in rows}


def list_customers(principal, access, *, search=None, sort_by=None, sort_order=None, page=1, limit=20) -> dict:
    query = db.session.query(Customer)
    query = permission_service.scope_query(principal, Resource.CUSTOMER, query, access)

    if search:
        term = f"%{search.strip()}%"
        query = query.filter(
            Customer.name.ilike(term) | Customer.phone.ilike(term) | Customer.email.ilike(term)
        )

    column = SORTABLE_COLUMNS.get(sort_by or "", Customer.created_at)
    direction = column.asc() if (sort_order or "").lower() == "asc" else column.desc()
    query = query.order_by(direction, Customer.id.desc())

    result = paginate(query, page, limit)
    stats = _measurement_stats([row["id"] for row in result["data"]])
    for row in result["data"]:
        count, last = stats.get(row["id"], (0, None))
        row["measurement_count"] = count
        row["last_measurement_date"] = to_utc_z(last) if last else None
    return result


def get_customer(customer_id: int) -> Customer:
    customer = db.session.get(Customer, customer_id)
    if not customer:
        raise NotFoundError("Customer not found")
    return customer


def get_customer_detail(principal, access, customer_id: int) -> dict:
    customer = get_customer(customer_id)
    permission_service.ensure_row_access(principal, Resource.CUSTOMER, customer, access)

    measurements = (
        db.session.query(Measurement)
        .filter(Measurement.customer_id == customer.id)
        .order_by(Measurement.created_at.desc(), Measurement.id.desc())
    )
    orders = (
        db.session.query(Order)
        .filter(Order.customer_id == customer.id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(DETAIL_ROWS)
        .all()
    )
    fittings = (
        db.session.query(Fitting)
        .filter(Fitting.customer_id == customer.id, Fitting.status == "scheduled", Fitting.scheduled_at >= utcnow())
        .order_by(Fitting.scheduled_at.asc())
        .limit(DETAIL_ROWS)
        .all()
    )

    data = customer.to_dict()
    data["measurement_count"] = measurements.count()
    data["measurements"] = [m.to_dict() for m in measurements.limit(DETAIL_ROWS).all()]
    data["orders"] = [o.to_dict() for o in orders]
    data["upcoming_fittings"] = [f.to_dict() for f in fittings]
    return data


def create_customer(data: dict) -> Customer:
    name = _clean(data.get("name"))
    if not name:
        raise ValidationError("Name is required")
    phone = _clean(data.get("phone"))
    email = _clean(data.get("email"))
    if email and not validate_email(email):
        raise ValidationError("Invalid email address")

    _check_duplicates(phone, email)

    customer = Customer(name=name, phone=phone, email=email, address=_clean(data.get("address")))
    db.session.add(customer)
    db.session.commit()
    return customer


def update_customer(principal, access, customer_id: int, data: dict) -> Customer:
    customer = get_customer(customer_id)
    permission_service.ensure_row_access(principal, Resource.CUSTOMER, customer, access)

    if "name" in data:
        name = _clean(data.get("name"))
        if not name:
            raise ValidationError("Name cannot be empty")
        customer.name = name

    phone = _clean(data.get("phone")) if "phone" in data else None
    email = _clean(data.get("email")) if "email" in data else None
    if email and not validate_email(email):
        raise ValidationError("Invalid email address")
    _check_duplicates(phone, email, exclude_id=customer.id)

    if "phone" in data:
        customer.phone = phone
    if "email" in data:
        customer.email = email
    if "address" in data:
        customer.address = _clean(data.get("address"))

    db.session.commit()
    return customer


def delete_customer(customer_id: int) -> dict:
    customer = get_customer(customer_id)
    has_measurements = db.session.query(Measurement.id).filter_by(customer_id=customer.id).first()
    has_orders = db.session.query(Order.id).filter_by(customer_id=customer.id).first()
    if has_measurements or has_orders:
        raise ConflictError("Cannot delete a customer with existing measurements or orders")

    for fitting in db.session.query(Fitting).filter_by(customer_id=customer.id).all():
        db.session.delete(fitting)
    summary = {"id": customer.id, "name": customer.name}
    db.session.delete(customer)
    db.session.commit()
    return summary


def find_or_create(name, phone, email, address) -> Customer:
    """
    Match a walk-in by phone, then email; create the customer if neither matches.

    A match has its name/email/address refreshed from the non-empty values
    given. Does not commit.
    """
    name, phone, email, address = _clean(name), _clean(phone), _clean(email), _clean(address)

    customer = None
    if phone:
        customer = db.session.query(Customer).filter(Customer.phone == phone).first()
    if customer is None and email:
        customer = db.session.query(Customer).filter(func.lower(Customer.email) == email.lower()).first()

    if customer is None:
        customer = Customer(name=name or "Unknown", phone=phone, email=email, address=address)
        db.session.add(customer)
        db.session.flush()
        return customer

    if name:
        customer.name = name
    if email and not customer.email:
        customer.email = email
    if address:
        customer.address = address
    return customer
