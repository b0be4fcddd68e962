# Overview: Flask API routes for configurable measurement validation rules.

from flask import Blueprint, jsonify, request

from ..database import optional_feature
from ..decorators import require_access, require_auth
from ..permissions import Action, Resource
from ..services import rule_service

rules_bp = Blueprint("validation", __name__, url_prefix="/api/validation")


@rules_bp.get("/rules")
@require_auth
@require_access(Resource.VALIDATION_RULE, Action.VIEW)
@optional_feature("validation_rules", empty={"rules": []})
def list_rules():
    return jsonify({"rules": [r.to_dict() for r in rule_service.active_rules()]})


@rules_bp.post("/check")
@require_auth
@require_access(Resource.VALIDATION_RULE, Action.CHECK)
@optional_feature("validation_rules", empty={"valid": True, "errors": [], "warnings": []})
def check():
    """Body: {measurement: {...}} or the measurement fields directly."""
    body = request.get_json(silent=True) or {}
    measurement = body.get("measurement") if isinstance(body.get("measurement"), dict) else body
    return jsonify(rule_service.check_against_active_rules(measurement))
