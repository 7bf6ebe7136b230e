"""
Taskflow
Account Service — accounts, group catalogue, membership checks.

Usernames are stored lower-cased. Group assignments must name groups that
exist in the catalogue. The built-in ``admin`` account cannot be disabled,
renamed, or stripped of the Admin group.
"""

import logging
import re

from email_validator import EmailNotValidError, validate_email

from taskflow.core.exceptions import ConflictError, NotFoundError, ValidationError
from taskflow.models import db
from taskflow.models.account import ADMIN_GROUP, Account, UserGroup
from taskflow.services.membership import is_member
from taskflow.utils.crypto import hash_password
from taskflow.utils.helpers import split_groups

logger = logging.getLogger(__name__)

NAME_MAX = 50
_PASSWORD_RULES = (
    (re.compile(r"[A-Za-z]"), "a letter"),
    (re.compile(r"\d"), "a digit"),
    (re.compile(r"[^A-Za-z0-9]"), "a special character"),
)


def _normalise_email(raw) -> str | None:
    email = str(raw or "").strip()
    if not email:
        return None
    try:
        valid = validate_email(email, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValidationError(f"Invalid email: {e}", details={"email": "invalid"})
    return valid.normalized.lower()


def _check_password(password) -> str:
    if not isinstance(password, str) or not 8 <= len(password) <= 10:
        raise ValidationError("Password must be 8-10 characters", details={"password": "length"})
    for pattern, label in _PASSWORD_RULES:
        if not pattern.search(password):
            raise ValidationError(f"Password must contain {label}", details={"password": "complexity"})
    return password


def _check_groups(groups) -> list[str]:
    names = split_groups(groups)
    if not names:
        return []
    known = {g.name.casefold(): g.name for g in UserGroup.query.all()}
    out = []
    for name in names:
        canonical = known.get(name.casefold())
        if canonical is None:
            raise ValidationError(f"Unknown group: {name}", details={"groups": name})
        out.append(canonical)
    return out


def _ensure_email_free(email: str | None, username: str | None = None) -> None:
    if not email:
        return
    existing = Account.query.filter(db.func.lower(Account.email) == email).first()
    if existing is not None and existing.username != username:
        raise ConflictError("Account", "email", email)


def _commit():
    try:
        db.session.commit()
    except Exception:
        logger.exception("Database commit failed")
        db.session.rollback()
        raise


# ── Accounts ─────────────────────────────────────────────────────────────────


def list_accounts() -> list[Account]:
    return Account.query.order_by(Account.username.asc()).all()


def get_account(username: str) -> Account:
    account = db.session.get(Account, str(username or "").strip().lower())
    if account is None:
        raise NotFoundError("Account", username)
    return account


def create_account(data: dict) -> Account:
    username = str(data.get("username") or "").strip().lower()
    if not username:
        raise ValidationError("username is required", details={"username": "required"})
    if len(username) > NAME_MAX:
        raise ValidationError(f"username must be at most {NAME_MAX} characters", details={"username": "too long"})
    if db.session.get(Account, username) is not None:
        raise ConflictError("Account", "username", username)

    password = _check_password(data.get("password"))
    email = _normalise_email(data.get("email"))
    _ensure_email_free(email)
    groups = _check_groups(data.get("groups"))

    account = Account(
        username=username,
        email=email,
        password_hash=hash_password(password),
        active=bool(data.get("active", True)),
    )
    account.groups = groups
    db.session.add(account)
    _commit()
    logger.info("Account %s created groups=%s", username, groups)
    return account


def update_account(username: str, data: dict) -> Account:
    account = get_account(username)

    if "username" in data and str(data["username"] or "").strip().lower() != account.username:
        raise ValidationError("username cannot be changed", details={"username": "immutable"})

    if account.is_builtin_admin:
        if "active" in data and not data["active"]:
            raise ValidationError('The "admin" account cannot be disabled', details={"active": "admin"})
        if "groups" in data:
            wanted = {g.casefold() for g in split_groups(data["groups"])}
            if ADMIN_GROUP.casefold() not in wanted:
                raise ValidationError('The "admin" account must keep the Admin group', details={"groups": "admin"})

    email = _normalise_email(data.get("email")) if "email" in data else account.email
    _ensure_email_free(email, account.username)
    password = _check_password(data["password"]) if data.get("password") else None
    groups = _check_groups(data["groups"]) if "groups" in data else None

    account.email = email
    if password:
        account.password_hash = hash_password(password)
    if "active" in data:
        account.active = bool(data["active"])
    if groups is not None:
        account.groups = groups

    _commit()
    return account


# ── Groups ───────────────────────────────────────────────────────────────────


def list_groups() -> list[str]:
    return [g.name for g in UserGroup.query.order_by(UserGroup.name.asc()).all()]


def create_group(name: str) -> UserGroup:
    name = str(name or "").strip()
    if not name:
        raise ValidationError("Name is required", details={"name": "required"})
    if len(name) > NAME_MAX or "," in name:
        raise ValidationError("Invalid group name", details={"name": "invalid"})
    if db.session.get(UserGroup, name) is not None:
        raise ConflictError("UserGroup", "name", name)
    group = UserGroup(name=name)
    db.session.add(group)
    _commit()
    return group


def check_group(username: str, group_name: str) -> bool:
    """Membership check exposed to the API; unknown accounts are NotFound."""
    get_account(username)
    return is_member(username, group_name)
