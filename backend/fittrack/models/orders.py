from __future__ import annotations

from ..extensions import db
from ..time_utils import to_iso_date, to_utc_z, utcnow

ORDER_STATUSES = ("raw", "in-progress", "ready", "delivered")
FITTING_STATUSES = ("scheduled", "completed", "cancelled")


class Order(db.Model):
    __tablename__ = "orders"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    measurement_id = db.Column(db.Integer, db.ForeignKey("measurements.id"), nullable=True, index=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False, index=True)
    fabric = db.Column(db.String(255), nullable=True)
    status = db.Column(db.String(32), nullable=False, default="raw", index=True)
    delivery_date = db.Column(db.Date, nullable=True)
    notes = db.Column(db.Text, nullable=True)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now(), onupdate=utcnow)

    customer = db.relationship("Customer", backref=db.backref("orders", lazy=True))
    measurement = db.relationship("Measurement")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "measurement_id": self.measurement_id,
            "customer_id": self.customer_id,
            "customer_name": self.customer.name if self.customer else None,
            "measurement_entry_id": self.measurement.entry_id if self.measurement else None,
            "fabric": self.fabric,
            "status": self.status,
            "delivery_date": to_iso_date(self.delivery_date),
            "notes": self.notes,
            "created_by": self.created_by,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Fitting(db.Model):
    """
    A fitting appointment.

    tailor_id must point at a user whose role is "tailor"; the fitting
    service checks that on create and update.
    """
    __tablename__ = "fittings"
    __table_args__ = (
        db.Index("ix_fittings_tailor_scheduled", "tailor_id", "scheduled_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    measurement_id = db.Column(db.Integer, db.ForeignKey("measurements.id"), nullable=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False, index=True)
    tailor_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    scheduled_at = db.Column(db.DateTime(timezone=True), nullable=False)
    status = db.Column(db.String(32), nullable=False, default="scheduled", index=True)
    notes = db.Column(db.Text, nullable=True)
    branch = db.Column(db.String(128), nullable=True)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now(), onupdate=utcnow)

    customer = db.relationship("Customer", backref=db.backref("fittings", lazy=True))
    measurement = db.relationship("Measurement")
    tailor = db.relationship("User", foreign_keys=[tailor_id])

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "measurement_id": self.measurement_id,
            "customer_id": self.customer_id,
            "customer_name": self.customer.name if self.customer else None,
            "customer_phone": self.customer.phone if self.customer else None,
            "measurement_entry_id": self.measurement.entry_id if self.measurement else None,
            "tailor_id": self.tailor_id,
            "tailor_name": self.tailor.name if self.tailor else None,
            "scheduled_at": to_utc_z(self.scheduled_at),
            "status": self.status,
            "notes": self.notes,
            "branch": self.branch,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
