# Overview: Flask API routes for task assignments.

from flask import Blueprint, g, jsonify, request

from ..database import optional_feature
from ..decorators import current_principal, require_access, require_auth
from ..permissions import Action, Resource
from ..services import task_service
from ..services.audit_service import notify, record_audit

tasks_bp = Blueprint("tasks", __name__, url_prefix="/api/tasks")


@tasks_bp.get("")
@require_auth
@require_access(Resource.TASK, Action.VIEW)
@optional_feature("task_assignments", empty={"tasks": []})
def list_tasks():
    tasks = task_service.list_tasks(
        current_principal(),
        g.access,
        assignee_id=request.args.get("assignee_id", type=int),
        status=request.args.get("status"),
        limit=request.args.get("limit", 50, type=int),
    )
    return jsonify({"tasks": [t.to_dict() for t in tasks]})


@tasks_bp.post("")
@require_auth
@require_access(Resource.TASK, Action.CREATE)
def create_task():
    principal = current_principal()
    task = task_service.create_task(principal, request.get_json(silent=True) or {})
    record_audit(principal.id, "create", "task", task.id, {"assignee_id": task.assignee_id, "task_type": task.task_type})
    notify(
        task.assignee_id,
        "task_assigned",
        "New task assigned",
        f"You have been assigned: {task.task_type}",
        "task",
        task.id,
    )
    return jsonify(task.to_dict()), 201


@tasks_bp.get("/<int:task_id>")
@require_auth
@require_access(Resource.TASK, Action.VIEW)
def get_task(task_id: int):
    return jsonify(task_service.get_task(current_principal(), g.access, task_id).to_dict())


@tasks_bp.route("/<int:task_id>", methods=["PUT", "PATCH"])
@require_auth
@require_access(Resource.TASK, Action.UPDATE)
def update_task(task_id: int):
    principal = current_principal()
    task = task_service.update_task(principal, g.access, task_id, request.get_json(silent=True) or {})
    record_audit(principal.id, "update", "task", task.id, {"status": task.status})
    return jsonify(task.to_dict())


@tasks_bp.delete("/<int:task_id>")
@require_auth
@require_access(Resource.TASK, Action.DELETE)
def delete_task(task_id: int):
    principal = current_principal()
    task_service.delete_task(principal, g.access, task_id)
    record_audit(principal.id, "delete", "task", task_id)
    return jsonify({"message": "Task deleted successfully"})
