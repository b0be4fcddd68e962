# Overview: Flask API routes for login and the current user.

from flask import Blueprint, jsonify, request

from ..decorators import current_principal, require_auth
from ..errors import NotFoundError
from ..services import auth_service
from ..services.audit_service import record_audit

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/login")
def login():
    """
    Exchange email + password for a bearer token.

    Request body: {email, password}
    Response: {token, user: {id, email, name, role, branch}}
    """
    data = request.get_json(silent=True) or {}
    result = auth_service.authenticate(data.get("email"), data.get("password"))
    record_audit(result["user"]["id"], "login", "user", result["user"]["id"])
    return jsonify(result)


@auth_bp.get("/me")
@require_auth
def me():
    user = auth_service.get_user(current_principal().id)
    if not user:
        raise NotFoundError("User not found")
    return jsonify({"user": user.to_dict()})
