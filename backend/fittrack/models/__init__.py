# Overview: Re-exports all models so `from fittrack.models import X` works and Alembic sees every table.

from .users import User, ROLES
from .customers import Customer
from .measurements import (
    Measurement,
    MeasurementHistory,
    MeasurementProfile,
    MeasurementTemplate,
    ExpiryRule,
    ValidationRule,
    GarmentFeedback,
)
from .orders import Order, Fitting, ORDER_STATUSES, FITTING_STATUSES
from .workflow import Reminder, TaskAssignment, Notification, REMINDER_STATUSES, TASK_STATUSES
from .system import Permission, AuditLog, BackupLog, SystemSetting

__all__ = [
    "User",
    "ROLES",
    "Customer",
    "Measurement",
    "MeasurementHistory",
    "MeasurementProfile",
    "MeasurementTemplate",
    "ExpiryRule",
    "ValidationRule",
    "GarmentFeedback",
    "Order",
    "Fitting",
    "ORDER_STATUSES",
    "FITTING_STATUSES",
    "Reminder",
    "TaskAssignment",
    "Notification",
    "REMINDER_STATUSES",
    "TASK_STATUSES",
    "Permission",
    "AuditLog",
    "BackupLog",
    "SystemSetting",
]
