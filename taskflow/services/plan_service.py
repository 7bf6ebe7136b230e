"""
Taskflow
Plan Service.

A plan bound to an application must fit inside the application's
start/end window (inclusive).
"""

import logging

from taskflow.core.exceptions import ConflictError, NotFoundError, ValidationError
from taskflow.models import db
from taskflow.models.application import Application
from taskflow.models.plan import Plan
from taskflow.utils.helpers import parse_date

logger = logging.getLogger(__name__)


def list_plans(app: str | None = None) -> list[Plan]:
    q = Plan.query
    if app:
        q = q.filter(Plan.app_acronym == app)
    return q.order_by(Plan.name.asc()).all()


def create_plan(data: dict) -> Plan:
    name = str(data.get("name") or "").strip()
    acronym = str(data.get("app_acronym") or "").strip() or None
    start = parse_date(data.get("start_date"))
    end = parse_date(data.get("end_date"))

    if not name:
        raise ValidationError("Plan name is required", details={"name": "required"})
    if len(name) > 50:
        raise ValidationError("Plan name must be at most 50 characters", details={"name": "too long"})
    if not start or not end:
        raise ValidationError("Plan start and end dates are required",
                              details={"start_date": "required", "end_date": "required"})
    if end < start:
        raise ValidationError("End date cannot be before start date", details={"end_date": "before start"})

    if acronym:
        application = db.session.get(Application, acronym)
        if application is None:
            raise NotFoundError("Application", acronym)
        if application.start_date and application.end_date:
            if start < application.start_date or end > application.end_date:
                raise ValidationError(
                    "Plan dates must lie within the application's start and end date",
                    details={"window": [application.start_date.isoformat(), application.end_date.isoformat()]},
                )

    if db.session.get(Plan, name) is not None:
        raise ConflictError("Plan", "name", name)

    plan = Plan(name=name, app_acronym=acronym, start_date=start, end_date=end)
    db.session.add(plan)
    try:
        db.session.commit()
    except Exception:
        logger.exception("Database commit failed")
        db.session.rollback()
        raise
    return plan
