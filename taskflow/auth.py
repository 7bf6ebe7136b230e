"""
Taskflow
Authentication & Authorization decorators.

Provides:
    - require_auth: the caller must carry a valid access token for an
      existing, active account (sets g.account)
    - require_group: the caller must belong to a named group

Identity itself is parsed by taskflow.middleware.jwt_auth into g.username.
"""

import functools
import logging

from flask import g, request

from taskflow.models import db
from taskflow.models.account import Account
from taskflow.services.membership import is_member
from taskflow.utils.errors import E, api_error

logger = logging.getLogger(__name__)


def current_username() -> str | None:
    return getattr(g, "username", None)


def require_auth(f):
    """
    Decorator: require an authenticated, active account.

    401 without a token or for an unknown account, 403 for a disabled one.
    """
    @functools.wraps(f)
    def decorated(*args, **kwargs):
        username = current_username()
        if not username:
            return api_error(E.UNAUTHENTICATED, "Missing or invalid Authorization Bearer token")

        account = db.session.get(Account, username)
        if account is None:
            return api_error(E.UNAUTHENTICATED, "Unknown user")
        if not account.active:
            logger.warning("Disabled account %s tried %s %s", username, request.method, request.path)
            return api_error(
                E.ACCOUNT_DISABLED,
                "Not permitted. Your account has been disabled.",
            )

        g.account = account
        return f(*args, **kwargs)

    return decorated


def require_group(group_name: str):
    """
    Decorator: require membership of ``group_name``.

    Usage:
        @require_auth
        @require_group("Admin")
        def create_account(): ...
    """
    def decorator(f):
        @functools.wraps(f)
        def decorated(*args, **kwargs):
            username = current_username()
            if not username or not is_member(username, group_name):
                logger.warning(
                    "Access denied: %s is not in '%s' for %s",
                    username, group_name, request.path,
                )
                return api_error(E.FORBIDDEN, "Insufficient permissions")
            return f(*args, **kwargs)
        return decorated
    return decorator
