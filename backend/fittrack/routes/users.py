# Overview: Flask API routes for listing staff and customer accounts.

from flask import Blueprint, jsonify, request

from ..decorators import require_access, require_auth
from ..permissions import Action, Resource
from ..services import auth_service

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("")
@require_auth
@require_access(Resource.USER, Action.VIEW)
def list_users():
    """?role=tailor narrows to one role (used to populate tailor pickers)."""
    users = auth_service.list_users(request.args.get("role"))
    return jsonify({"users": [u.to_dict() for u in users], "count": len(users)})
