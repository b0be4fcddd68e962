# Overview: Flask API route exposing the caller's granted actions.

from flask import Blueprint, jsonify

from ..decorators import current_principal, require_access, require_auth
from ..errors import SchemaNotReadyError
from ..permissions import Action, Resource
from ..services import permission_service

permissions_bp = Blueprint("permissions", __name__, url_prefix="/api/permissions")


@permissions_bp.get("/me")
@require_auth
@require_access(Resource.PERMISSION, Action.VIEW)
def my_permissions():
    """Response: {permissions: {resource: [actions]}, role}. Empty until the permissions table exists."""
    role = current_principal().role
    try:
        permissions = permission_service.permissions_for_role(role)
    except SchemaNotReadyError:
        permissions = {}
    return jsonify({"permissions": permissions, "role": role})
