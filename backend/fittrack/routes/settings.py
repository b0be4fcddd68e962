# Overview: Flask API routes for application settings.

from flask import Blueprint, jsonify, request

from ..decorators import current_principal, require_access, require_auth
from ..permissions import Action, Resource
from ..services import settings_service
from ..services.audit_service import record_audit

settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")


@settings_bp.get("")
@require_auth
@require_access(Resource.SETTING, Action.VIEW)
def get_settings():
    return jsonify(settings_service.get_settings())


@settings_bp.put("")
@require_auth
@require_access(Resource.SETTING, Action.UPDATE)
def update_settings():
    principal = current_principal()
    data = request.get_json(silent=True) or {}
    settings = settings_service.update_settings(principal, data)
    record_audit(principal.id, "update", "settings", None, {"keys": sorted(data)})
    return jsonify(settings)
