"""
Taskflow
Plan model — a named delivery window, optionally bound to one application.

Tasks reference plans by name without a foreign key; existence is checked
by the workflow engine when a plan is assigned.
"""

from taskflow.models import db


class Plan(db.Model):
    __tablename__ = "plans"

    name = db.Column(db.String(50), primary_key=True)
    app_acronym = db.Column(
        db.String(50), db.ForeignKey("applications.acronym"), nullable=True, index=True,
    )
    start_date = db.Column(db.Date, nullable=True)
    end_date = db.Column(db.Date, nullable=True)

    def to_dict(self):
        return {
            "name": self.name,
            "app_acronym": self.app_acronym,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
        }
