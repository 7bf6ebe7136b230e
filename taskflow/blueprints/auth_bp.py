"""
Taskflow
Auth blueprint — login, token refresh, identity check.

Endpoints:
    POST /api/v1/auth/login     {username, password} → token pair
    POST /api/v1/auth/refresh   {refresh_token}      → new access token
    GET  /api/v1/auth/check     → {ok, user}
"""

import logging

import jwt as pyjwt
from flask import Blueprint, g, jsonify, request

from taskflow.auth import require_auth
from taskflow.models import db
from taskflow.models.account import Account
from taskflow.services.jwt_service import (
    decode_refresh_token,
    generate_access_token,
    generate_token_pair,
)
from taskflow.utils.crypto import verify_password
from taskflow.utils.errors import E, api_error

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__, url_prefix="/api/v1/auth")

_BAD_LOGIN = "Invalid Username and/or Password"


@auth_bp.route("/login", methods=["POST"])
def login():
    data = request.get_json(silent=True) or {}
    username = str(data.get("username") or "").strip().lower()
    password = data.get("password") or ""
    if not username or not password:
        return api_error(E.VALIDATION_REQUIRED, _BAD_LOGIN)

    account = db.session.get(Account, username)
    if account is None or not verify_password(password, account.password_hash):
        logger.info("Failed login for %s", username)
        return api_error(E.UNAUTHENTICATED, _BAD_LOGIN)
    if not account.active:
        return api_error(E.UNAUTHENTICATED, "Inactive account")

    tokens = generate_token_pair(account.username)
    return jsonify({"ok": True, "user": {"username": account.username}, **tokens})


@auth_bp.route("/refresh", methods=["POST"])
def refresh():
    data = request.get_json(silent=True) or {}
    token = data.get("refresh_token")
    if not token:
        return api_error(E.UNAUTHENTICATED, "Missing refresh token")
    try:
        payload = decode_refresh_token(token)
    except pyjwt.InvalidTokenError:
        return api_error(E.UNAUTHENTICATED, "Invalid or expired refresh token")

    account = db.session.get(Account, payload.get("sub"))
    if account is None or not account.active:
        return api_error(E.UNAUTHENTICATED, "Invalid or expired refresh token")
    return jsonify({"ok": True, "access_token": generate_access_token(account.username)})


@auth_bp.route("/check", methods=["GET"])
@require_auth
def check():
    return jsonify({"ok": True, "user": {"username": g.account.username}})
