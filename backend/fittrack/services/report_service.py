# Overview: Dashboard summary figures, scoped to the tailor's own work for tailors.

from __future__ import annotations

from datetime import timedelta

from sqlalchemy import func

from ..extensions import db
from ..models import Customer, Fitting, Measurement
from ..permissions import Access, Resource
from ..time_utils import utcnow
from . import permission_service

NEW_ENTRIES_DAYS = 30
RECENT_ACTIVITY_DAYS = 7


def summary(principal, access) -> dict:
    now = utcnow()

    def scoped(resource, query):
        return permission_service.scope_query(principal, resource, query, access)

    measurements = scoped(Resource.MEASUREMENT, db.session.query(func.count(Measurement.id)))
    customers = scoped(Resource.CUSTOMER, db.session.query(func.count(Customer.id)))
    fittings = scoped(Resource.FITTING, db.session.query(func.count(Fitting.id)))

    return {
        "totalCustomers": customers.scalar() or 0,
        "totalMeasurements": measurements.scalar() or 0,
        "newEntries": measurements.filter(
            Measurement.created_at >= now - timedelta(days=NEW_ENTRIES_DAYS)
        ).scalar() or 0,
        "pendingFittings": fittings.filter(Fitting.status == "scheduled").scalar() or 0,
        "recentActivity": measurements.filter(
            Measurement.updated_at >= now - timedelta(days=RECENT_ACTIVITY_DAYS)
        ).scalar() or 0,
        "expiredMeasurements": measurements.filter(Measurement.is_expired.is_(True)).scalar() or 0,
        "scope": "own" if access == Access.SELF else "all",
    }
