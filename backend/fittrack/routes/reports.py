# Overview: Flask API routes for dashboard reports.

from flask import Blueprint, g, jsonify

from ..decorators import current_principal, require_access, require_auth
from ..permissions import Action, Resource
from ..services import report_service

reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/summary")
@require_auth
@require_access(Resource.REPORT, Action.VIEW)
def summary():
    return jsonify(report_service.summary(current_principal(), g.access))
