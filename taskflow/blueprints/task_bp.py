"""
Taskflow
Task blueprint — task listing, creation and workflow transitions.

Endpoints summary:
    TASKS   /api/v1/tasks                         GET, POST
            /api/v1/tasks/state/<state>           GET
            /api/v1/tasks/<name>                  GET, PATCH
            /api/v1/tasks/<name>/notes            GET, POST
            /api/v1/tasks/<name>/promote          POST   (Doing → Done)

PATCH body: {"plan"?: str|null, "state"?: str, "note"?: str}
Service layer owns all business logic, commits and rollbacks; errors are
rendered by the app-level handlers in taskflow.utils.errors.
"""

import logging

from flask import Blueprint, jsonify, request

from taskflow.auth import current_username, require_auth
from taskflow.blueprints import query_filters
from taskflow.services import task_lifecycle as lifecycle
from taskflow.services.note_ledger import parse_entries

logger = logging.getLogger(__name__)

task_bp = Blueprint("tasks", __name__, url_prefix="/api/v1")


@task_bp.route("/tasks", methods=["GET"])
@require_auth
def list_tasks():
    filters = query_filters("app", "state", "plan")
    tasks = lifecycle.list_tasks(**filters)
    return jsonify([t.to_dict() for t in tasks])


@task_bp.route("/tasks", methods=["POST"])
@require_auth
def create_task():
    data = request.get_json(silent=True) or {}
    task = lifecycle.create_task(
        current_username(),
        data.get("name"),
        data.get("description"),
        data.get("app_acronym"),
        plan=data.get("plan"),
        owner=data.get("owner"),
        initial_note=data.get("notes"),
    )
    return jsonify(task.to_dict()), 201


@task_bp.route("/tasks/state/<state>", methods=["GET"])
@require_auth
def list_tasks_by_state(state):
    filters = query_filters("app", "plan")
    tasks = lifecycle.get_tasks_by_state(state, **filters)
    return jsonify([t.to_dict() for t in tasks])


@task_bp.route("/tasks/<task_name>", methods=["GET"])
@require_auth
def get_task(task_name):
    task = lifecycle.get_task(task_name)
    d = task.to_dict()
    d["available_transitions"] = lifecycle.get_available_transitions(task.state)
    return jsonify(d)


@task_bp.route("/tasks/<task_name>/notes", methods=["GET"])
@require_auth
def list_notes(task_name):
    task = lifecycle.get_task(task_name)
    return jsonify([e.to_dict() for e in parse_entries(task.notes)])


@task_bp.route("/tasks/<task_name>/notes", methods=["POST"])
@require_auth
def append_note(task_name):
    data = request.get_json(silent=True) or {}
    lifecycle.append_note(current_username(), task_name, data.get("entry"))
    return jsonify({"ok": True})


@task_bp.route("/tasks/<task_name>", methods=["PATCH"])
@require_auth
def update_task(task_name):
    data = request.get_json(silent=True) or {}
    update = lifecycle.TaskUpdate.from_payload(data)
    task = lifecycle.update_task(current_username(), task_name, update)
    return jsonify(task.to_dict())


@task_bp.route("/tasks/<task_name>/promote", methods=["POST"])
@require_auth
def promote_task(task_name):
    task = lifecycle.promote_to_done(current_username(), task_name)
    return jsonify(task.to_dict())
