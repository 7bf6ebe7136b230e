"""
Taskflow
Application model — owner of tasks and of the per-transition permit lists.

Permit categories:
    create  — may create tasks
    open    — may release Open tasks and re-plan them
    todo    — may take, drop and submit tasks for review
    doing   — stored for completeness, no workflow edge reads it
    done    — may approve/reject reviewed tasks and re-plan them
"""

from datetime import datetime, timezone

from taskflow.models import db
from taskflow.utils.helpers import join_groups, split_groups

PERMIT_CATEGORIES = ("create", "open", "todo", "doing", "done")


class Application(db.Model):
    __tablename__ = "applications"

    acronym = db.Column(db.String(50), primary_key=True)
    description = db.Column(db.Text, default="")
    r_number = db.Column(db.Integer, nullable=False, default=0, comment="Revision counter for task ids")
    start_date = db.Column(db.Date, nullable=True)
    end_date = db.Column(db.Date, nullable=True)

    permit_create = db.Column(db.Text, default="")
    permit_open = db.Column(db.Text, default="")
    permit_todo = db.Column(db.Text, default="")
    permit_doing = db.Column(db.Text, default="")
    permit_done = db.Column(db.Text, default="")

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    tasks = db.relationship("Task", back_populates="application", lazy="dynamic")

    def permit_groups(self, category: str) -> list[str]:
        """Parsed group list for one permit category."""
        if category not in PERMIT_CATEGORIES:
            raise KeyError(f"Unknown permit category: {category}")
        return split_groups(getattr(self, f"permit_{category}"))

    def set_permit_groups(self, category: str, groups) -> None:
        if category not in PERMIT_CATEGORIES:
            raise KeyError(f"Unknown permit category: {category}")
        setattr(self, f"permit_{category}", join_groups(groups))

    def to_dict(self):
        return {
            "acronym": self.acronym,
            "description": self.description,
            "r_number": self.r_number,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "permits": {c: self.permit_groups(c) for c in PERMIT_CATEGORIES},
            "task_count": self.tasks.count(),
        }

    def __repr__(self):
        return f"<Application {self.acronym}>"
