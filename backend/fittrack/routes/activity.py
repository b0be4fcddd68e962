# Overview: Flask API routes for the activity (audit) log.

from flask import Blueprint, jsonify, request

from ..decorators import require_access, require_auth
from ..pagination import page_params
from ..permissions import Action, Resource
from ..services import activity_service

activity_bp = Blueprint("activity_logs", __name__, url_prefix="/api/activity-logs")


@activity_bp.get("")
@require_auth
@require_access(Resource.AUDIT_LOG, Action.VIEW)
def list_activity():
    """Query params: page, limit (default 50), action, resource_type, user_id, fromDate, toDate."""
    page, limit = page_params(default_limit=50)
    result = activity_service.list_activity(
        action=request.args.get("action"),
        resource_type=request.args.get("resource_type"),
        user_id=request.args.get("user_id", type=int),
        from_date=request.args.get("fromDate"),
        to_date=request.args.get("toDate"),
        page=page,
        limit=limit,
    )
    return jsonify(result)
