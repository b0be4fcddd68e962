# Overview: Flask API routes for measurement templates.

from flask import Blueprint, jsonify, request

from ..decorators import current_principal, require_access, require_auth
from ..permissions import Action, Resource
from ..services import template_service
from ..services.audit_service import record_audit

templates_bp = Blueprint("templates", __name__, url_prefix="/api/templates")


@templates_bp.get("")
@require_auth
@require_access(Resource.TEMPLATE, Action.VIEW)
def list_templates():
    templates = template_service.list_templates(request.args.get("type"), request.args.get("region"))
    return jsonify({"templates": [t.to_dict() for t in templates]})


@templates_bp.get("/<int:template_id>")
@require_auth
@require_access(Resource.TEMPLATE, Action.VIEW)
def get_template(template_id: int):
    return jsonify(template_service.get_template(template_id).to_dict())


@templates_bp.post("")
@require_auth
@require_access(Resource.TEMPLATE, Action.CREATE)
def create_template():
    principal = current_principal()
    template = template_service.create_template(principal, request.get_json(silent=True) or {})
    record_audit(principal.id, "create", "template", template.id, {"name": template.name})
    return jsonify(template.to_dict()), 201
