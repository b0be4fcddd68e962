# Overview: Flask API routes for the caller's in-app notifications.

from flask import Blueprint, jsonify, request

from ..database import optional_feature
from ..decorators import current_principal, require_access, require_auth
from ..permissions import Action, Resource
from ..services import notification_service

notifications_bp = Blueprint("notifications", __name__, url_prefix="/api/notifications")


@notifications_bp.get("")
@require_auth
@require_access(Resource.NOTIFICATION, Action.VIEW)
@optional_feature("notifications", empty={"notifications": [], "unreadCount": 0})
def list_notifications():
    limit = request.args.get("limit", 50, type=int)
    return jsonify(notification_service.list_notifications(current_principal(), limit))


@notifications_bp.route("/<int:notification_id>/read", methods=["PUT", "PATCH", "POST"])
@require_auth
@require_access(Resource.NOTIFICATION, Action.UPDATE)
def mark_read(notification_id: int):
    notification = notification_service.mark_read(current_principal(), notification_id)
    return jsonify({"message": "Marked as read", "notification": notification.to_dict()})


@notifications_bp.post("/read-all")
@require_auth
@require_access(Resource.NOTIFICATION, Action.UPDATE)
def mark_all_read():
    count = notification_service.mark_all_read(current_principal())
    return jsonify({"message": "All notifications marked as read", "updated": count})
