# Overview: Global search across measurements, customers and orders.

from __future__ import annotations

from ..extensions import db
from ..models import Customer, Measurement, Order
from ..permissions import Access, Resource
from . import permission_service

MIN_QUERY_LENGTH = 2
MAX_RESULTS = 20
PER_TYPE = 10


def search(principal, access, q: str | None) -> list[dict]:
    q = (q or "").strip()
    if len(q) < MIN_QUERY_LENGTH:
        return []
    term = f"%{q}%"
    results = []

    measurements = (
        db.session.query(Measurement)
        .join(Customer, Measurement.customer_id == Customer.id)
        .filter(Measurement.entry_id.ilike(term) | Customer.name.ilike(term) | Customer.phone.ilike(term))
    )
    measurements = permission_service.scope_query(principal, Resource.MEASUREMENT, measurements, access)
    for m in measurements.order_by(Measurement.created_at.desc()).limit(PER_TYPE).all():
        results.append({
            "type": "measurement",
            "id": m.id,
            "title": m.entry_id,
            "subtitle": m.customer.name if m.customer else None,
        })

    customers = db.session.query(Customer).filter(
        Customer.name.ilike(term) | Customer.phone.ilike(term) | Customer.email.ilike(term)
    )
    customers = permission_service.scope_query(principal, Resource.CUSTOMER, customers, access)
    for c in customers.order_by(Customer.name).limit(PER_TYPE).all():
        results.append({"type": "customer", "id": c.id, "title": c.name, "subtitle": c.phone or c.email})

    orders = (
        db.session.query(Order)
        .join(Customer, Order.customer_id == Customer.id)
        .outerjoin(Measurement, Order.measurement_id == Measurement.id)
        .filter(Customer.name.ilike(term) | Measurement.entry_id.ilike(term) | Order.fabric.ilike(term))
    )
    if access == Access.SELF:
        orders = orders.filter(Measurement.created_by == principal.id)
    for o in orders.order_by(Order.created_at.desc()).limit(PER_TYPE).all():
        results.append({
            "type": "order",
            "id": o.id,
            "title": f"Order #{o.id}",
            "subtitle": f"{o.customer.name if o.customer else ''} - {o.status}",
        })

    return results[:MAX_RESULTS]
