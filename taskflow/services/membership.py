"""
Group Membership Resolver.

Answers "is this user in group G?" from the account's stored group list.
Both sides are trimmed and case-folded before comparison. An unknown
username is simply not a member of anything.

Usage:
    from taskflow.services.membership import is_member, is_member_of_any

    if is_member_of_any("alice", application.permit_groups("open")):
        ...
"""

from taskflow.models import db
from taskflow.models.account import Account


def _normalise(name) -> str:
    return str(name or "").strip().casefold()


def get_user_groups(username: str) -> set[str]:
    """Normalised group set for a user; empty when the account is unknown."""
    uname = str(username or "").strip().lower()
    if not uname:
        return set()
    account = db.session.get(Account, uname)
    if account is None:
        return set()
    return {_normalise(g) for g in account.groups}


def is_member(username: str, group_name: str) -> bool:
    wanted = _normalise(group_name)
    if not wanted:
        return False
    return wanted in get_user_groups(username)


def is_member_of_any(username: str, group_names) -> bool:
    """True iff the user belongs to at least one of ``group_names``.

    An empty list permits nobody. There is no administrator override.
    """
    wanted = {_normalise(g) for g in (group_names or [])} - {""}
    if not wanted:
        return False
    return not wanted.isdisjoint(get_user_groups(username))
