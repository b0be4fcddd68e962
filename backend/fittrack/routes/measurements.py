# Overview: Flask API routes for measurements, their history and side-by-side comparison.

from flask import Blueprint, g, jsonify, request

from ..decorators import current_principal, require_access, require_auth
from ..pagination import page_params
from ..permissions import Action, Resource
from ..services import measurement_service
from ..services.audit_service import record_audit

measurements_bp = Blueprint("measurements", __name__, url_prefix="/api/measurements")


@measurements_bp.get("")
@require_auth
@require_access(Resource.MEASUREMENT, Action.VIEW)
def list_measurements():
    """
    Query params:
    - page, limit
    - search: customer name/phone or entry_id
    - branch, unit, tailor (creator user id)
    - fromDate, toDate: ISO dates on created_at (toDate inclusive)
    """
    page, limit = page_params()
    result = measurement_service.list_measurements(
        current_principal(),
        g.access,
        search=request.args.get("search"),
        branch=request.args.get("branch"),
        unit=request.args.get("unit"),
        tailor=request.args.get("tailor", type=int),
        from_date=request.args.get("fromDate"),
        to_date=request.args.get("toDate"),
        page=page,
        limit=limit,
    )
    return jsonify(result)


@measurements_bp.post("")
@require_auth
@require_access(Resource.MEASUREMENT, Action.CREATE)
def create_measurement():
    principal = current_principal()
    measurement = measurement_service.create_measurement(principal, request.get_json(silent=True) or {})
    record_audit(principal.id, "create", "measurement", measurement.id, {"entry_id": measurement.entry_id})
    return jsonify({
        "id": measurement.id,
        "entry_id": measurement.entry_id,
        "message": "Measurement created successfully",
    }), 201


@measurements_bp.get("/compare")
@require_auth
@require_access(Resource.MEASUREMENT, Action.VIEW)
def compare_measurements():
    """?ids=1,2,ENT-... (2 to 5 ids or entry ids)"""
    ids = (request.args.get("ids") or "").split(",")
    rows = measurement_service.compare(current_principal(), g.access, ids)
    return jsonify({"comparison": [m.to_dict() for m in rows]})


@measurements_bp.get("/<identifier>")
@require_auth
@require_access(Resource.MEASUREMENT, Action.VIEW)
def get_measurement(identifier: str):
    measurement = measurement_service.get_measurement(current_principal(), g.access, identifier)
    return jsonify(measurement.to_dict())


@measurements_bp.route("/<int:measurement_id>", methods=["PUT", "PATCH"])
@require_auth
@require_access(Resource.MEASUREMENT, Action.UPDATE)
def update_measurement(measurement_id: int):
    principal = current_principal()
    measurement, changes = measurement_service.update_measurement(
        principal, g.access, measurement_id, request.get_json(silent=True) or {}
    )
    if changes:
        record_audit(principal.id, "update", "measurement", measurement.id, {
            "entry_id": measurement.entry_id,
            "version": measurement.version,
            "fields": sorted(changes),
        })
    return jsonify({
        "id": measurement.id,
        "version": measurement.version,
        "changes": changes,
        "message": "Measurement updated successfully" if changes else "No changes",
    })


@measurements_bp.delete("/<int:measurement_id>")
@require_auth
@require_access(Resource.MEASUREMENT, Action.DELETE)
def delete_measurement(measurement_id: int):
    principal = current_principal()
    deleted = measurement_service.delete_measurement(principal, measurement_id)
    record_audit(principal.id, "delete", "measurement", measurement_id, {"entry_id": deleted["entry_id"]})
    return jsonify({"message": "Measurement deleted successfully"})


@measurements_bp.get("/<int:measurement_id>/history")
@require_auth
@require_access(Resource.MEASUREMENT, Action.VIEW)
def measurement_history(measurement_id: int):
    rows = measurement_service.get_history(current_principal(), g.access, measurement_id)
    return jsonify({"measurementId": measurement_id, "history": [h.to_dict() for h in rows]})
