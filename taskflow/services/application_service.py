"""
Taskflow
Application Service — create/update applications and their permit lists.

The acronym is the primary key and never changes. Permit lists arrive as
arrays (or comma-joined strings) and are stored normalised.
"""

import logging

from taskflow.core.exceptions import ConflictError, NotFoundError, ValidationError
from taskflow.models import db
from taskflow.models.application import PERMIT_CATEGORIES, Application
from taskflow.utils.helpers import parse_date

logger = logging.getLogger(__name__)


def _apply_dates(application: Application, data: dict) -> None:
    for field in ("start_date", "end_date"):
        if field in data:
            value = data.get(field)
            parsed = parse_date(value)
            if value and parsed is None:
                raise ValidationError(f"Invalid {field}", details={field: "invalid date"})
            setattr(application, field, parsed)
    if application.start_date and application.end_date and application.end_date < application.start_date:
        raise ValidationError("End date cannot be before start date", details={"end_date": "before start"})


def _apply_permits(application: Application, permits: dict) -> None:
    for category in PERMIT_CATEGORIES:
        if category in permits:
            application.set_permit_groups(category, permits.get(category))


def list_applications() -> list[Application]:
    return Application.query.order_by(Application.acronym.asc()).all()


def get_application(acronym: str) -> Application:
    application = db.session.get(Application, str(acronym or "").strip())
    if application is None:
        raise NotFoundError("Application", acronym)
    return application


def create_application(data: dict) -> Application:
    acronym = str(data.get("acronym") or "").strip()
    if not acronym:
        raise ValidationError("acronym is required", details={"acronym": "required"})
    if len(acronym) > 50:
        raise ValidationError("acronym must be at most 50 characters", details={"acronym": "too long"})
    if db.session.get(Application, acronym) is not None:
        raise ConflictError("Application", "acronym", acronym)

    application = Application(acronym=acronym, description=data.get("description") or "", r_number=0)
    _apply_dates(application, data)
    _apply_permits(application, data.get("permits") or {})

    db.session.add(application)
    try:
        db.session.commit()
    except Exception:
        logger.exception("Database commit failed")
        db.session.rollback()
        raise
    logger.info("Application %s created", acronym)
    return application


def update_application(acronym: str, data: dict) -> Application:
    application = get_application(acronym)
    if "acronym" in data and str(data["acronym"]).strip() != application.acronym:
        raise ValidationError("acronym cannot be changed", details={"acronym": "immutable"})

    try:
        if "description" in data:
            application.description = data.get("description") or ""
        _apply_dates(application, data)
        _apply_permits(application, data.get("permits") or {})
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return application
