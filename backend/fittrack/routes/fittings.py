# Overview: Flask API routes for fitting appointments.

from flask import Blueprint, g, jsonify, request

from ..decorators import current_principal, require_access, require_auth
from ..pagination import page_params
from ..permissions import Action, Resource
from ..services import fitting_service
from ..services.audit_service import notify, record_audit
from ..time_utils import to_utc_z

fittings_bp = Blueprint("fittings", __name__, url_prefix="/api/fittings")


@fittings_bp.get("")
@require_auth
@require_access(Resource.FITTING, Action.VIEW)
def list_fittings():
    """
    Query params: page, limit (default 50), search, status, tailor_id,
    fromDate, toDate, branch. Tailors always get only their own fittings.
    """
    page, limit = page_params(default_limit=fitting_service.DEFAULT_LIMIT)
    result = fitting_service.list_fittings(
        current_principal(),
        g.access,
        search=request.args.get("search"),
        status=request.args.get("status"),
        tailor_id=request.args.get("tailor_id", type=int),
        from_date=request.args.get("fromDate"),
        to_date=request.args.get("toDate"),
        branch=request.args.get("branch"),
        page=page,
        limit=limit,
    )
    return jsonify(result)


@fittings_bp.post("")
@require_auth
@require_access(Resource.FITTING, Action.CREATE)
def create_fitting():
    principal = current_principal()
    fitting = fitting_service.create_fitting(principal, request.get_json(silent=True) or {})
    record_audit(principal.id, "create", "fitting", fitting.id, {
        "customer_id": fitting.customer_id,
        "tailor_id": fitting.tailor_id,
    })
    if fitting.tailor_id and fitting.tailor_id != principal.id:
        notify(
            fitting.tailor_id,
            "fitting_scheduled",
            "New fitting scheduled",
            f"Fitting scheduled for {to_utc_z(fitting.scheduled_at)}",
            "fitting",
            fitting.id,
        )
    return jsonify(fitting.to_dict()), 201


@fittings_bp.get("/<int:fitting_id>")
@require_auth
@require_access(Resource.FITTING, Action.VIEW)
def get_fitting(fitting_id: int):
    return jsonify(fitting_service.get_fitting(current_principal(), g.access, fitting_id).to_dict())


@fittings_bp.route("/<int:fitting_id>", methods=["PUT", "PATCH"])
@require_auth
@require_access(Resource.FITTING, Action.UPDATE)
def update_fitting(fitting_id: int):
    principal = current_principal()
    data = request.get_json(silent=True) or {}
    fitting = fitting_service.update_fitting(principal, g.access, fitting_id, data)
    record_audit(principal.id, "update", "fitting", fitting.id, {"fields": sorted(data)})
    return jsonify(fitting.to_dict())


@fittings_bp.delete("/<int:fitting_id>")
@require_auth
@require_access(Resource.FITTING, Action.DELETE)
def delete_fitting(fitting_id: int):
    principal = current_principal()
    fitting_service.delete_fitting(principal, g.access, fitting_id)
    record_audit(principal.id, "delete", "fitting", fitting_id)
    return jsonify({"message": "Fitting deleted successfully"})
