from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow

REMINDER_STATUSES = ("pending", "sent", "snoozed", "cancelled")
TASK_STATUSES = ("pending", "in_progress", "completed", "cancelled")


class Reminder(db.Model):
    """Follow-up for a customer, e.g. a periodic re-measure."""
    __tablename__ = "measurement_reminders"
    __table_args__ = (
        db.Index("ix_reminders_status_due", "status", "due_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False, index=True)
    measurement_id = db.Column(db.Integer, db.ForeignKey("measurements.id"), nullable=True)
    reminder_type = db.Column(db.String(32), nullable=False, default="periodic")
    due_at = db.Column(db.DateTime(timezone=True), nullable=True)
    status = db.Column(db.String(16), nullable=False, default="pending")
    channel = db.Column(db.String(16), nullable=False, default="in_app")
    sent_at = db.Column(db.DateTime(timezone=True), nullable=True)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    customer = db.relationship("Customer")
    measurement = db.relationship("Measurement")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "customer_name": self.customer.name if self.customer else None,
            "measurement_id": self.measurement_id,
            "measurement_entry_id": self.measurement.entry_id if self.measurement else None,
            "reminder_type": self.reminder_type,
            "due_at": to_utc_z(self.due_at),
            "status": self.status,
            "channel": self.channel,
            "sent_at": to_utc_z(self.sent_at),
            "created_by": self.created_by,
            "created_at": to_utc_z(self.created_at),
        }


class TaskAssignment(db.Model):
    """
    Work item assigned to a staff member.

    resource_type + resource_id is a polymorphic reference (measurement,
    order, fitting, ...) and carries no foreign key.
    """
    __tablename__ = "task_assignments"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    assignee_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    task_type = db.Column(db.String(64), nullable=False)
    resource_type = db.Column(db.String(32), nullable=False)
    resource_id = db.Column(db.Integer, nullable=True)
    due_at = db.Column(db.DateTime(timezone=True), nullable=True)
    status = db.Column(db.String(16), nullable=False, default="pending", index=True)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    assignee = db.relationship("User", foreign_keys=[assignee_id])

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "assignee_id": self.assignee_id,
            "assignee_name": self.assignee.name if self.assignee else None,
            "task_type": self.task_type,
            "resource_type": self.resource_type,
            "resource_id": self.resource_id,
            "due_at": to_utc_z(self.due_at),
            "status": self.status,
            "created_by": self.created_by,
            "completed_at": to_utc_z(self.completed_at),
            "created_at": to_utc_z(self.created_at),
        }


class Notification(db.Model):
    """In-app notification. read_at is NULL while unread."""
    __tablename__ = "notifications"
    __table_args__ = (
        db.Index("ix_notifications_user_read", "user_id", "read_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    type = db.Column(db.String(64), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    body = db.Column(db.Text, nullable=True)
    resource_type = db.Column(db.String(32), nullable=True)
    resource_id = db.Column(db.Integer, nullable=True)
    read_at = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "type": self.type,
            "title": self.title,
            "body": self.body,
            "resource_type": self.resource_type,
            "resource_id": self.resource_id,
            "read_at": to_utc_z(self.read_at),
            "created_at": to_utc_z(self.created_at),
        }
