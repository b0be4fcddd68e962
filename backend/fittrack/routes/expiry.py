# Overview: Flask API routes for expiry rules and the expiry sweep.

from flask import Blueprint, jsonify, request

from ..database import optional_feature
from ..decorators import current_principal, require_access, require_auth
from ..permissions import Action, Resource
from ..services import expiry_service
from ..services.audit_service import record_audit

expiry_bp = Blueprint("expiry_rules", __name__, url_prefix="/api/expiry-rules")


@expiry_bp.get("")
@require_auth
@require_access(Resource.EXPIRY_RULE, Action.VIEW)
@optional_feature("measurement_expiry_rules", empty={"rules": []})
def list_rules():
    return jsonify({"rules": [r.to_dict() for r in expiry_service.list_rules()]})


@expiry_bp.post("")
@require_auth
@require_access(Resource.EXPIRY_RULE, Action.CREATE)
def create_rule():
    principal = current_principal()
    rule = expiry_service.create_rule(request.get_json(silent=True) or {})
    record_audit(principal.id, "create", "expiry_rule", rule.id, {"name": rule.name, "action": rule.action})
    return jsonify(rule.to_dict()), 201


@expiry_bp.post("/run")
@require_auth
@require_access(Resource.EXPIRY_RULE, Action.RUN)
def run_sweep():
    principal = current_principal()
    result = expiry_service.run_sweep()
    record_audit(principal.id, "run", "expiry_rule", None, {"marked": result["marked"], "reminded": result["reminded"]})
    return jsonify(result)
