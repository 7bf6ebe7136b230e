"""
Taskflow
Plan blueprint.

Endpoints:
    /api/v1/plans      GET (?app=<acronym>), POST
"""

from flask import Blueprint, jsonify, request

from taskflow.auth import require_auth
from taskflow.blueprints import query_filters
from taskflow.services import plan_service

plan_bp = Blueprint("plans", __name__, url_prefix="/api/v1")


@plan_bp.route("/plans", methods=["GET"])
@require_auth
def list_plans():
    plans = plan_service.list_plans(**query_filters("app"))
    return jsonify([p.to_dict() for p in plans])


@plan_bp.route("/plans", methods=["POST"])
@require_auth
def create_plan():
    data = request.get_json(silent=True) or {}
    plan = plan_service.create_plan(data)
    return jsonify(plan.to_dict()), 201
