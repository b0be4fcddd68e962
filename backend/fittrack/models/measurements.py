from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow
from ..validation import MEASUREMENT_FIELDS


class Measurement(db.Model):
    """
    One set of body measurements for a customer.

    `version` starts at 1 and is bumped on every update; each change also
    appends a MeasurementHistory row. `is_expired` is set by the expiry sweep.
    """
    __tablename__ = "measurements"
    __table_args__ = (
        db.Index("ix_measurements_customer_id", "customer_id"),
        db.Index("ix_measurements_created_by", "created_by"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    entry_id = db.Column(db.String(64), nullable=False, unique=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False)
    units = db.Column(db.String(8), nullable=False, default="cm")

    across_back = db.Column(db.Float, nullable=True)
    chest = db.Column(db.Float, nullable=True)
    sleeve_length = db.Column(db.Float, nullable=True)
    around_arm = db.Column(db.Float, nullable=True)
    neck = db.Column(db.Float, nullable=True)
    top_length = db.Column(db.Float, nullable=True)
    wrist = db.Column(db.Float, nullable=True)
    trouser_waist = db.Column(db.Float, nullable=True)
    trouser_thigh = db.Column(db.Float, nullable=True)
    trouser_knee = db.Column(db.Float, nullable=True)
    trouser_length = db.Column(db.Float, nullable=True)
    trouser_bars = db.Column(db.Float, nullable=True)

    fit_preference = db.Column(db.String(64), nullable=True)
    additional_info = db.Column(db.Text, nullable=True)

    version = db.Column(db.Integer, nullable=False, default=1)
    is_expired = db.Column(db.Boolean, nullable=False, default=False, index=True)
    expires_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    branch = db.Column(db.String(128), nullable=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now(), onupdate=utcnow)

    customer = db.relationship("Customer", backref=db.backref("measurements", lazy=True))
    creator = db.relationship("User", foreign_keys=[created_by])

    def field_values(self) -> dict:
        return {name: getattr(self, name) for name in MEASUREMENT_FIELDS}

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "entry_id": self.entry_id,
            "customer_id": self.customer_id,
            "units": self.units,
            **self.field_values(),
            "fit_preference": self.fit_preference,
            "additional_info": self.additional_info,
            "version": self.version,
            "is_expired": self.is_expired,
            "expires_at": to_utc_z(self.expires_at),
            "created_by": self.created_by,
            "branch": self.branch,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if self.customer is not None:
            data["customer_name"] = self.customer.name
            data["customer_phone"] = self.customer.phone
            data["customer_email"] = self.customer.email
        if self.creator is not None:
            data["created_by_name"] = self.creator.name
        return data


class MeasurementHistory(db.Model):
    """
    Append-only change log for a measurement.

    measurement_id carries no foreign key; rows remain after their
    measurement is deleted. Rows are inserted, never updated or deleted.
    """
    __tablename__ = "measurement_history"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    measurement_id = db.Column(db.Integer, nullable=False, index=True)
    version = db.Column(db.Integer, nullable=False)
    action = db.Column(db.String(16), nullable=False)
    changes = db.Column(db.JSON, nullable=True)
    changed_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    user = db.relationship("User")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "measurement_id": self.measurement_id,
            "version": self.version,
            "action": self.action,
            "changes": self.changes or {},
            "changed_by": self.changed_by,
            "changed_by_name": self.user.name if self.user else None,
            "created_at": to_utc_z(self.created_at),
        }


class MeasurementProfile(db.Model):
    """Named grouping of a customer's measurements ("wedding", "seasonal", ...)."""
    __tablename__ = "measurement_profiles"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    profile_type = db.Column(db.String(32), nullable=False, default="custom")
    notes = db.Column(db.Text, nullable=True)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "name": self.name,
            "profile_type": self.profile_type,
            "notes": self.notes,
            "created_by": self.created_by,
            "created_at": to_utc_z(self.created_at),
        }


class MeasurementTemplate(db.Model):
    """Preset of default values and expected ranges for a garment type or region."""
    __tablename__ = "measurement_templates"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    template_type = db.Column(db.String(32), nullable=False, default="custom")
    region = db.Column(db.String(64), nullable=False, default="")
    units = db.Column(db.String(8), nullable=False, default="cm")
    defaults = db.Column(db.JSON, nullable=True)
    field_ranges = db.Column(db.JSON, nullable=True)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now(), onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "template_type": self.template_type,
            "region": self.region,
            "units": self.units,
            "defaults": self.defaults or {},
            "field_ranges": self.field_ranges or {},
            "created_by": self.created_by,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class ExpiryRule(db.Model):
    __tablename__ = "measurement_expiry_rules"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    days_since_created = db.Column(db.Integer, nullable=True)
    days_since_updated = db.Column(db.Integer, nullable=True)
    action = db.Column(db.String(32), nullable=False, default="mark_expired")
    branch = db.Column(db.String(128), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "days_since_created": self.days_since_created,
            "days_since_updated": self.days_since_updated,
            "action": self.action,
            "branch": self.branch,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }


class ValidationRule(db.Model):
    """
    Configurable comparison between two measurement fields.

    `impossible` rules block a save; any other rule_type only warns.
    """
    __tablename__ = "validation_rules"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    rule_key = db.Column(db.String(128), nullable=False, unique=True)
    rule_type = db.Column(db.String(32), nullable=False, default="warning")
    field_a = db.Column(db.String(64), nullable=False)
    field_b = db.Column(db.String(64), nullable=False)
    operator = db.Column(db.String(4), nullable=False)
    message_template = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "rule_key": self.rule_key,
            "rule_type": self.rule_type,
            "field_a": self.field_a,
            "field_b": self.field_b,
            "operator": self.operator,
            "message_template": self.message_template,
            "is_active": self.is_active,
        }


class GarmentFeedback(db.Model):
    __tablename__ = "garment_feedback"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    measurement_id = db.Column(db.Integer, db.ForeignKey("measurements.id"), nullable=False, index=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=True)
    garment_type = db.Column(db.String(64), nullable=True)
    fit_feedback = db.Column(db.String(32), nullable=False)
    notes = db.Column(db.Text, nullable=True)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "measurement_id": self.measurement_id,
            "order_id": self.order_id,
            "garment_type": self.garment_type,
            "fit_feedback": self.fit_feedback,
            "notes": self.notes,
            "created_by": self.created_by,
            "created_at": to_utc_z(self.created_at),
        }
