# Overview: Flask API routes for customers; parses input and returns JSON responses.

from flask import Blueprint, g, jsonify, request

from ..decorators import current_principal, require_access, require_auth
from ..pagination import page_params
from ..permissions import Action, Resource
from ..services import customer_service
from ..services.audit_service import record_audit

customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.get("")
@require_auth
@require_access(Resource.CUSTOMER, Action.VIEW)
def list_customers():
    """
    Query params:
    - page, limit
    - search: substring of name, phone or email (case-insensitive)
    - sortBy: name | phone | email | created_at | updated_at
    - sortOrder: asc | desc (default desc)
    """
    page, limit = page_params()
    result = customer_service.list_customers(
        current_principal(),
        g.access,
        search=request.args.get("search"),
        sort_by=request.args.get("sortBy"),
        sort_order=request.args.get("sortOrder"),
        page=page,
        limit=limit,
    )
    return jsonify(result)


@customers_bp.post("")
@require_auth
@require_access(Resource.CUSTOMER, Action.CREATE)
def create_customer():
    principal = current_principal()
    customer = customer_service.create_customer(request.get_json(silent=True) or {})
    record_audit(principal.id, "create", "customer", customer.id, {"name": customer.name})
    return jsonify(customer.to_dict()), 201


@customers_bp.get("/<int:customer_id>")
@require_auth
@require_access(Resource.CUSTOMER, Action.VIEW)
def get_customer(customer_id: int):
    return jsonify(customer_service.get_customer_detail(current_principal(), g.access, customer_id))


@customers_bp.route("/<int:customer_id>", methods=["PUT", "PATCH"])
@require_auth
@require_access(Resource.CUSTOMER, Action.UPDATE)
def update_customer(customer_id: int):
    principal = current_principal()
    data = request.get_json(silent=True) or {}
    customer = customer_service.update_customer(principal, g.access, customer_id, data)
    record_audit(principal.id, "update", "customer", customer.id, {"fields": sorted(data)})
    return jsonify(customer.to_dict())


@customers_bp.delete("/<int:customer_id>")
@require_auth
@require_access(Resource.CUSTOMER, Action.DELETE)
def delete_customer(customer_id: int):
    principal = current_principal()
    deleted = customer_service.delete_customer(customer_id)
    record_audit(principal.id, "delete", "customer", customer_id, {"name": deleted["name"]})
    return jsonify({"message": "Customer deleted successfully"})
