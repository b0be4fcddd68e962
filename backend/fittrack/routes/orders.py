# Overview: Flask API routes for orders; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request

from ..decorators import current_principal, require_access, require_auth
from ..pagination import page_params
from ..permissions import Action, Resource
from ..services import order_service
from ..services.audit_service import record_audit

orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


@orders_bp.get("")
@require_auth
@require_access(Resource.ORDER, Action.VIEW)
def list_orders():
    page, limit = page_params()
    result = order_service.list_orders(
        search=request.args.get("search"),
        status=request.args.get("status"),
        page=page,
        limit=limit,
    )
    return jsonify(result)


@orders_bp.post("")
@require_auth
@require_access(Resource.ORDER, Action.CREATE)
def create_order():
    principal = current_principal()
    order = order_service.create_order(principal, request.get_json(silent=True) or {})
    record_audit(principal.id, "create", "order", order.id, {"customer_id": order.customer_id, "status": order.status})
    return jsonify(order.to_dict()), 201


@orders_bp.get("/<int:order_id>")
@require_auth
@require_access(Resource.ORDER, Action.VIEW)
def get_order(order_id: int):
    return jsonify(order_service.get_order(order_id).to_dict())


@orders_bp.route("/<int:order_id>", methods=["PUT", "PATCH"])
@require_auth
@require_access(Resource.ORDER, Action.UPDATE)
def update_order(order_id: int):
    principal = current_principal()
    data = request.get_json(silent=True) or {}
    order = order_service.update_order(order_id, data)
    record_audit(principal.id, "update", "order", order.id, {"fields": sorted(data)})
    return jsonify(order.to_dict())


@orders_bp.delete("/<int:order_id>")
@require_auth
@require_access(Resource.ORDER, Action.DELETE)
def delete_order(order_id: int):
    principal = current_principal()
    order_service.delete_order(order_id)
    record_audit(principal.id, "delete", "order", order_id)
    return jsonify({"message": "Order deleted successfully"})
