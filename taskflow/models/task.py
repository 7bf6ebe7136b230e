"""
Taskflow
Task model — the unit of work moved through the workflow.

States:
    Open → ToDo → Doing → Done → Closed
The transition table lives in taskflow.services.task_lifecycle.
"""

from datetime import date

from taskflow.models import db

TASK_STATES = ("Open", "ToDo", "Doing", "Done", "Closed")
TASK_NAME_MAX = 50


class Task(db.Model):
    __tablename__ = "tasks"

    task_id = db.Column(db.String(80), primary_key=True, comment="{acronym}_{revision}")
    name = db.Column(db.String(TASK_NAME_MAX), unique=True, nullable=False)
    description = db.Column(db.Text, nullable=True)
    notes = db.Column(db.Text, nullable=True, comment="Append-only audit ledger")
    plan = db.Column(db.String(50), nullable=True, index=True)
    app_acronym = db.Column(
        db.String(50), db.ForeignKey("applications.acronym"), nullable=False, index=True,
    )
    state = db.Column(db.String(10), nullable=False, default="Open", index=True)
    creator = db.Column(db.String(50), nullable=False)
    owner = db.Column(db.String(50), nullable=True)
    create_date = db.Column(db.Date, nullable=False, default=date.today)

    application = db.relationship("Application", back_populates="tasks")

    def to_dict(self, include_notes=True):
        d = {
            "task_id": self.task_id,
            "name": self.name,
            "description": self.description,
            "plan": self.plan,
            "app_acronym": self.app_acronym,
            "state": self.state,
            "creator": self.creator,
            "owner": self.owner,
            "create_date": self.create_date.isoformat() if self.create_date else None,
        }
        if include_notes:
            d["notes"] = self.notes or ""
        return d

    def __repr__(self):
        return f"<Task {self.task_id}: {self.name} [{self.state}]>"
