# Overview: Service-layer operations for garment orders.

from __future__ import annotations

from sqlalchemy.orm import joinedload

from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..models import Customer, Measurement, Order, ORDER_STATUSES
from ..pagination import paginate
from ..time_utils import parse_iso_date
from ..validation import is_blank


def _parse_delivery_date(value):
    try:
        return parse_iso_date(value)
    except (TypeError, ValueError):
        raise ValidationError("Invalid delivery_date: expected YYYY-MM-DD")


def _check_status(status):
    if status not in ORDER_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(ORDER_STATUSES)}")


def _base_query():
    return db.session.query(Order).options(joinedload(Order.customer), joinedload(Order.measurement))


def list_orders(*, search=None, status=None, page=1, limit=20) -> dict:
    query = (
        _base_query()
        .outerjoin(Customer, Order.customer_id == Customer.id)
        .outerjoin(Measurement, Order.measurement_id == Measurement.id)
    )
    if search:
        term = f"%{search.strip()}%"
        query = query.filter(Customer.name.ilike(term) | Measurement.entry_id.ilike(term))
    if status:
        query = query.filter(Order.status == status)
    query = query.order_by(Order.created_at.desc(), Order.id.desc())
    return paginate(query, page, limit)


def get_order(order_id: int) -> Order:
    order = _base_query().filter(Order.id == order_id).first()
    if not order:
        raise NotFoundError("Order not found")
    return order


def create_order(principal, data: dict) -> Order:
    measurement = None
    if data.get("measurement_id"):
        measurement = db.session.get(Measurement, data.get("measurement_id"))
        if not measurement:
            raise NotFoundError("Measurement not found")

    customer_id = data.get("customer_id") or (measurement.customer_id if measurement else None)
    if not customer_id:
        raise ValidationError("measurement_id or customer_id is required")
    if not db.session.get(Customer, customer_id):
        raise NotFoundError("Customer not found")

    status = data.get("status") or "raw"
    _check_status(status)

    order = Order(
        measurement_id=measurement.id if measurement else None,
        customer_id=customer_id,
        fabric=data.get("fabric") or None,
        status=status,
        delivery_date=_parse_delivery_date(data.get("delivery_date")),
        notes=data.get("notes") or None,
        created_by=principal.id,
    )
    db.session.add(order)
    db.session.commit()
    return order


def update_order(order_id: int, data: dict) -> Order:
    order = get_order(order_id)

    if "status" in data:
        _check_status(data.get("status"))
        order.status = data["status"]
    if "fabric" in data:
        order.fabric = None if is_blank(data.get("fabric")) else data["fabric"]
    if "delivery_date" in data:
        order.delivery_date = _parse_delivery_date(data.get("delivery_date"))
    if "notes" in data:
        order.notes = None if is_blank(data.get("notes")) else data["notes"]
    if "measurement_id" in data and data.get("measurement_id"):
        measurement = db.session.get(Measurement, data["measurement_id"])
        if not measurement:
            raise NotFoundError("Measurement not found")
        order.measurement_id = measurement.id

    db.session.commit()
    return order


def delete_order(order_id: int) -> None:
    order = get_order(order_id)
    db.session.delete(order)
    db.session.commit()
