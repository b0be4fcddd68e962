# Overview: Flask API routes for garment fit feedback.

from flask import Blueprint, jsonify, request

from ..database import optional_feature
from ..decorators import current_principal, require_access, require_auth
from ..permissions import Action, Resource
from ..services import profile_service
from ..services.audit_service import record_audit

feedback_bp = Blueprint("garment_feedback", __name__, url_prefix="/api/garment-feedback")


@feedback_bp.get("")
@require_auth
@require_access(Resource.GARMENT_FEEDBACK, Action.VIEW)
@optional_feature("garment_feedback", empty={"feedback": []})
def list_feedback():
    rows = profile_service.list_feedback(request.args.get("measurement_id", type=int))
    return jsonify({"feedback": [f.to_dict() for f in rows]})


@feedback_bp.post("")
@require_auth
@require_access(Resource.GARMENT_FEEDBACK, Action.CREATE)
def create_feedback():
    principal = current_principal()
    feedback = profile_service.create_feedback(principal, request.get_json(silent=True) or {})
    record_audit(principal.id, "create", "garment_feedback", feedback.id, {
        "measurement_id": feedback.measurement_id,
        "fit_feedback": feedback.fit_feedback,
    })
    return jsonify(feedback.to_dict()), 201
