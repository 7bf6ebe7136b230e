"""
Taskflow
Notification Trigger — review notifications after Doing → Done.

The workflow engine hands a ``ReviewNotification`` to the dispatcher only
after its transaction has committed. Delivery is attempted at most once
and is best-effort: failures are logged and never reach the caller.

Dispatch modes (config ``NOTIFY_ASYNC``):
    True   daemon thread with its own app context (request returns at once)
    False  inline, right after commit (testing)
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from flask import current_app

from taskflow.models.account import Account
from taskflow.services.email_service import EmailService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewNotification:
    task_id: str
    task_name: str
    app_acronym: str
    reviewer: str
    groups: tuple[str, ...]

    @property
    def subject(self) -> str:
        return f"[{self.app_acronym}] Task ready for review: {self.task_name}"

    @property
    def body(self) -> str:
        return (
            f"Task {self.task_name} ({self.task_id}) in application {self.app_acronym} "
            f"was submitted for review by {self.reviewer}.\n\n"
            "It is now in state Done and awaits approval or rejection."
        )


def resolve_emails_for_groups(group_names) -> list[str]:
    """Distinct e-mail addresses of active accounts in any of ``group_names``."""
    wanted = {str(g or "").strip().casefold() for g in (group_names or [])} - {""}
    if not wanted:
        return []

    accounts = (
        Account.query
        .filter(Account.email.isnot(None), Account.active.is_(True))
        .order_by(Account.username)
        .all()
    )
    out: list[str] = []
    for account in accounts:
        have = {g.casefold() for g in account.groups}
        email = (account.email or "").strip()
        if email and not wanted.isdisjoint(have) and email not in out:
            out.append(email)
    return out


def deliver_review_notification(job: ReviewNotification) -> dict:
    """Resolve recipients and send one message. No recipients → no-op."""
    recipients = resolve_emails_for_groups(job.groups)
    if not recipients:
        logger.info(
            "Review notification skipped: no recipients for task=%s groups=%s",
            job.task_id, list(job.groups),
        )
        return {"status": "skipped", "recipients": []}
    return EmailService.send(to=recipients, subject=job.subject, body=job.body)


class NotificationDispatcher:
    """Hands post-commit notifications off the request path."""

    def submit(self, job: ReviewNotification) -> None:
        app = current_app._get_current_object()
        if not app.config.get("NOTIFY_ASYNC", True):
            self._run(job)
            return

        t = threading.Thread(
            target=self._execute_in_background,
            args=(app, job),
            name=f"notify-{job.task_id}",
            daemon=True,
        )
        t.start()

    def _execute_in_background(self, app, job: ReviewNotification) -> None:
        with app.app_context():
            self._run(job)

    @staticmethod
    def _run(job: ReviewNotification) -> None:
        try:
            result = deliver_review_notification(job)
            logger.info(
                "Review notification %s: task=%s recipients=%d",
                result["status"], job.task_id, len(result["recipients"]),
            )
        except Exception:
            logger.exception("Review notification failed for task=%s", job.task_id)


dispatcher = NotificationDispatcher()
