# Overview: Flask API routes for measurement profiles.

from flask import Blueprint, jsonify, request

from ..database import optional_feature
from ..decorators import current_principal, require_access, require_auth
from ..permissions import Action, Resource
from ..services import profile_service
from ..services.audit_service import record_audit

profiles_bp = Blueprint("measurement_profiles", __name__, url_prefix="/api/measurement-profiles")


@profiles_bp.get("")
@require_auth
@require_access(Resource.MEASUREMENT_PROFILE, Action.VIEW)
@optional_feature("measurement_profiles", empty={"profiles": []})
def list_profiles():
    profiles = profile_service.list_profiles(request.args.get("customer_id", type=int))
    return jsonify({"profiles": [p.to_dict() for p in profiles]})


@profiles_bp.post("")
@require_auth
@require_access(Resource.MEASUREMENT_PROFILE, Action.CREATE)
def create_profile():
    principal = current_principal()
    profile = profile_service.create_profile(principal, request.get_json(silent=True) or {})
    record_audit(principal.id, "create", "measurement_profile", profile.id, {"customer_id": profile.customer_id})
    return jsonify(profile.to_dict()), 201
