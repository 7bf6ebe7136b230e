"""
Permission Gate — per-application, per-transition group checks.

Only four permit categories gate the workflow even though it has six
edges:

    create → task creation
    open   → release (Open → ToDo), plan change while Open
    todo   → take (ToDo → Doing), drop (Doing → ToDo), review (Doing → Done)
    done   → approve (Done → Closed), reject (Done → Doing), plan change while Done

Usage:
    from taskflow.services.permission import check_transition, can_transition

    check_transition("alice", application, "open", action="release")
"""

from taskflow.core.exceptions import PermissionDenied
from taskflow.models.application import Application
from taskflow.services.membership import is_member_of_any

WORKFLOW_CATEGORIES = ("create", "open", "todo", "done")


def can_transition(username: str, application: Application, category: str) -> bool:
    """Whether ``username`` holds the given permit on ``application``."""
    if category not in WORKFLOW_CATEGORIES:
        raise ValueError(f"Unknown permit category: {category}")
    return is_member_of_any(username, application.permit_groups(category))


def check_transition(
    username: str,
    application: Application,
    category: str,
    *,
    action: str | None = None,
) -> None:
    """Assert the permit; raise PermissionDenied if it is missing."""
    if not can_transition(username, application, category):
        raise PermissionDenied(
            username, action or category, f"application {application.acronym}",
        )
