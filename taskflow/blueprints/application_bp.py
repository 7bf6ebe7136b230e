"""
Taskflow
Application blueprint.

Endpoints:
    /api/v1/applications               GET, POST
    /api/v1/applications/<acronym>     GET, PUT

Body: {acronym, description?, start_date?, end_date?,
       permits?: {create, open, todo, doing, done}: [group, ...]}
"""

from flask import Blueprint, jsonify, request

from taskflow.auth import require_auth
from taskflow.services import application_service

application_bp = Blueprint("applications", __name__, url_prefix="/api/v1")


@application_bp.route("/applications", methods=["GET"])
@require_auth
def list_applications():
    return jsonify([a.to_dict() for a in application_service.list_applications()])


@application_bp.route("/applications", methods=["POST"])
@require_auth
def create_application():
    data = request.get_json(silent=True) or {}
    application = application_service.create_application(data)
    return jsonify(application.to_dict()), 201


@application_bp.route("/applications/<acronym>", methods=["GET"])
@require_auth
def get_application(acronym):
    return jsonify(application_service.get_application(acronym).to_dict())


@application_bp.route("/applications/<acronym>", methods=["PUT"])
@require_auth
def update_application(acronym):
    data = request.get_json(silent=True) or {}
    application = application_service.update_application(acronym, data)
    return jsonify(application.to_dict())
