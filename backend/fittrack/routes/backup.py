# Overview: Flask API route for the full JSON data export.

import json

from flask import Blueprint, Response

from ..decorators import current_principal, require_access, require_auth
from ..permissions import Action, Resource
from ..services import export_service
from ..services.audit_service import record_audit

backup_bp = Blueprint("backup", __name__, url_prefix="/api/backup")


@backup_bp.post("/export")
@require_auth
@require_access(Resource.BACKUP, Action.EXPORT)
def export():
    principal = current_principal()
    document = export_service.build_export(principal)
    record_audit(principal.id, "export", "backup", None, {
        "customers": len(document["customers"]),
        "measurements": len(document["measurements"]),
        "orders": len(document["orders"]),
        "fittings": len(document["fittings"]),
    })
    return Response(
        json.dumps(document, indent=2),
        mimetype="application/json",
        headers={"Content-Disposition": f'attachment; filename="{export_service.export_filename()}"'},
    )
