# Overview: Full JSON data export with a tracked backup-log row.

from __future__ import annotations

from flask import current_app

from ..database import has_table
from ..extensions import db
from ..models import BackupLog, Customer, Fitting, Measurement, Order, User
from ..time_utils import to_utc_z, utcnow

MAX_ERROR_LENGTH = 500


def _start_log(user_id: int) -> BackupLog | None:
    if not has_table(BackupLog.__tablename__):
        return None
    log = BackupLog(backup_type="full", status="running", created_by=user_id)
    db.session.add(log)
    db.session.commit()
    return log


def _finish_log(log: BackupLog | None, status: str, error: str | None = None) -> None:
    if log is None:
        return
    log.status = status
    log.completed_at = utcnow()
    log.error_message = error[:MAX_ERROR_LENGTH] if error else None
    db.session.commit()


def _rows(model, order_column) -> list[dict]:
    return [row.to_dict() for row in db.session.query(model).order_by(order_column).all()]


def build_export(principal) -> dict:
    """
    Snapshot customers, measurements, users (public fields), orders and fittings.

    The backup log moves running -> completed, or -> failed with the error
    message (truncated) before the exception is re-raised.
    """
    log = _start_log(principal.id)
    try:
        document = {
            "exported_at": to_utc_z(utcnow()),
            "exported_by": principal.id,
            "customers": _rows(Customer, Customer.id),
            "measurements": _rows(Measurement, Measurement.id),
            "users": _rows(User, User.id),
            "orders": _rows(Order, Order.id),
            "fittings": _rows(Fitting, Fitting.id),
        }
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Failed to build data export")
        _finish_log(log, "failed", str(e))
        raise

    _finish_log(log, "completed")
    return document


def export_filename() -> str:
    return f"fittrack-export-{utcnow().date().isoformat()}.json"
