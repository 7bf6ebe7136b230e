"""
Taskflow
Account & group blueprint.

Endpoints:
    /api/v1/accounts                 GET, POST       (Admin group)
    /api/v1/accounts/<username>      PUT             (Admin group)
    /api/v1/accounts/me              GET
    /api/v1/groups                   GET, POST       (POST: Admin group)
    /api/v1/groups/check             POST  {username, group} → bool
"""

from flask import Blueprint, g, jsonify, request

from taskflow.auth import require_auth, require_group
from taskflow.models.account import ADMIN_GROUP
from taskflow.services import account_service

account_bp = Blueprint("accounts", __name__, url_prefix="/api/v1")


@account_bp.route("/accounts", methods=["GET"])
@require_auth
@require_group(ADMIN_GROUP)
def list_accounts():
    return jsonify([a.to_dict() for a in account_service.list_accounts()])


@account_bp.route("/accounts", methods=["POST"])
@require_auth
@require_group(ADMIN_GROUP)
def create_account():
    data = request.get_json(silent=True) or {}
    account = account_service.create_account(data)
    return jsonify(account.to_dict()), 201


@account_bp.route("/accounts/me", methods=["GET"])
@require_auth
def get_me():
    return jsonify(g.account.to_dict())


@account_bp.route("/accounts/<username>", methods=["PUT"])
@require_auth
@require_group(ADMIN_GROUP)
def update_account(username):
    data = request.get_json(silent=True) or {}
    account = account_service.update_account(username, data)
    return jsonify(account.to_dict())


@account_bp.route("/groups", methods=["GET"])
@require_auth
def list_groups():
    return jsonify(account_service.list_groups())


@account_bp.route("/groups", methods=["POST"])
@require_auth
@require_group(ADMIN_GROUP)
def create_group():
    data = request.get_json(silent=True) or {}
    group = account_service.create_group(data.get("name"))
    return jsonify(group.to_dict()), 201


@account_bp.route("/groups/check", methods=["POST"])
@require_auth
def check_group():
    data = request.get_json(silent=True) or {}
    return jsonify(account_service.check_group(data.get("username"), data.get("group")))
