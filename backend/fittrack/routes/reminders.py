# Overview: Flask API routes for customer reminders.

from flask import Blueprint, g, jsonify, request

from ..database import optional_feature
from ..decorators import current_principal, require_access, require_auth
from ..permissions import Action, Resource
from ..services import reminder_service
from ..services.audit_service import record_audit

reminders_bp = Blueprint("reminders", __name__, url_prefix="/api/reminders")


@reminders_bp.get("")
@require_auth
@require_access(Resource.REMINDER, Action.VIEW)
@optional_feature("measurement_reminders", empty={"reminders": []})
def list_reminders():
    reminders = reminder_service.list_reminders(
        current_principal(),
        g.access,
        customer_id=request.args.get("customer_id", type=int),
        status=request.args.get("status"),
        limit=request.args.get("limit", 50, type=int),
    )
    return jsonify({"reminders": [r.to_dict() for r in reminders]})


@reminders_bp.post("")
@require_auth
@require_access(Resource.REMINDER, Action.CREATE)
def create_reminder():
    principal = current_principal()
    reminder = reminder_service.create_reminder(principal, request.get_json(silent=True) or {})
    record_audit(principal.id, "create", "reminder", reminder.id, {"customer_id": reminder.customer_id})
    return jsonify(reminder.to_dict()), 201


@reminders_bp.route("/<int:reminder_id>", methods=["PUT", "PATCH"])
@require_auth
@require_access(Resource.REMINDER, Action.UPDATE)
def update_reminder(reminder_id: int):
    principal = current_principal()
    reminder = reminder_service.update_reminder(reminder_id, request.get_json(silent=True) or {})
    record_audit(principal.id, "update", "reminder", reminder.id, {"status": reminder.status})
    return jsonify(reminder.to_dict())
