"""
Taskflow
Email Service.

Plain-text SMTP delivery. When MAIL_SERVER is not configured, messages
are logged but not sent (dev/test mode).

Configuration (env vars):
    MAIL_SERVER     SMTP host (default: None → log-only mode)
    MAIL_PORT       SMTP port (default: 587)
    MAIL_USE_TLS    Use TLS (default: true)
    MAIL_USERNAME   SMTP username
    MAIL_PASSWORD   SMTP password
    MAIL_DEFAULT_SENDER  Default from address
"""

from __future__ import annotations

import logging
import smtplib
from email.mime.text import MIMEText

from flask import current_app

logger = logging.getLogger(__name__)


class EmailService:
    """SMTP sender with a log-only fallback."""

    @staticmethod
    def is_configured() -> bool:
        """Check if SMTP is configured."""
        return bool(current_app.config.get("MAIL_SERVER"))

    @classmethod
    def send(cls, *, to: list[str], subject: str, body: str) -> dict:
        """
        Send one message to all recipients.

        Returns:
            {"status": "sent" | "logged" | "skipped", "recipients": [...]}

        Raises:
            smtplib.SMTPException / OSError on delivery failure.
        """
        recipients = [addr for addr in to if addr]
        if not recipients:
            return {"status": "skipped", "recipients": []}

        if not cls.is_configured():
            logger.info(
                "Email (dev mode): to=%s subject='%s'", ", ".join(recipients), subject,
            )
            return {"status": "logged", "recipients": recipients}

        cls._send_smtp(to=recipients, subject=subject, body=body)
        logger.info("Email sent: to=%s subject='%s'", ", ".join(recipients), subject)
        return {"status": "sent", "recipients": recipients}

    @staticmethod
    def _send_smtp(*, to: list[str], subject: str, body: str) -> None:
        """Actually send via SMTP."""
        cfg = current_app.config
        server = cfg.get("MAIL_SERVER")
        port = cfg.get("MAIL_PORT", 587)
        use_tls = cfg.get("MAIL_USE_TLS", True)
        username = cfg.get("MAIL_USERNAME")
        password = cfg.get("MAIL_PASSWORD")
        sender = cfg.get("MAIL_DEFAULT_SENDER", f"noreply@{server}")

        msg = MIMEText(body, "plain", "utf-8")
        msg["Subject"] = subject
        msg["From"] = sender
        msg["To"] = ", ".join(to)

        with smtplib.SMTP(server, port, timeout=30) as smtp:
            if use_tls:
                smtp.starttls()
            if username and password:
                smtp.login(username, password)
            smtp.send_message(msg)
