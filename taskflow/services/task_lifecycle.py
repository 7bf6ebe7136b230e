"""
Taskflow
Task Lifecycle Service — the task workflow engine.

Manages task creation and state transitions with:
  - Transition validation against a fixed edge table
  - Group-based permission checks per edge (see services.permission)
  - Row locking plus a guarded UPDATE ... WHERE state = <expected>
  - Audit entries appended to the task's notes ledger
  - Review notification dispatched after commit

6 valid transitions:
  release, drop, take, review, approve, reject

Usage:
    from taskflow.services.task_lifecycle import TaskUpdate, update_task

    task = update_task("alice", "Login form", TaskUpdate(target_state="ToDo"))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError

from taskflow.core.exceptions import (
    AuthenticationRequired,
    ConflictError,
    NotFoundError,
    TransitionConflict,
    ValidationError,
)
from taskflow.models import db
from taskflow.models.application import Application
from taskflow.models.plan import Plan
from taskflow.models.task import TASK_NAME_MAX, TASK_STATES, Task
from taskflow.services.note_ledger import make_entry
from taskflow.services.notification import ReviewNotification, dispatcher
from taskflow.services.permission import check_transition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transition:
    trigger: str
    source: str
    target: str
    permit: str
    message: str


# (current state, requested state) → edge
TASK_TRANSITIONS: dict[tuple[str, str], Transition] = {
    ("Open", "ToDo"): Transition(
        "release", "Open", "ToDo", "open", 'Task released: "Open" → "ToDo"'),
    ("Doing", "ToDo"): Transition(
        "drop", "Doing", "ToDo", "todo", 'Task dropped by {user}: "Doing" → "ToDo"'),
    ("ToDo", "Doing"): Transition(
        "take", "ToDo", "Doing", "todo", 'Task taken by {user}: "ToDo" → "Doing"'),
    ("Doing", "Done"): Transition(
        "review", "Doing", "Done", "todo", 'Task reviewed: "Doing" → "Done", awaiting approval'),
    ("Done", "Closed"): Transition(
        "approve", "Done", "Closed", "done", 'Task approved: "Done" → "Closed"'),
    ("Done", "Doing"): Transition(
        "reject", "Done", "Doing", "done", 'Task rejected: "Done" → "Doing"'),
}

# Plan may only be reassigned in these states, under these permits
PLAN_PERMITS = {"Open": "open", "Done": "done"}

_STATE_LOOKUP = {s.casefold(): s for s in TASK_STATES}
_STATE_LOOKUP.update({"to-do": "ToDo", "to_do": "ToDo", "to do": "ToDo"})


def normalise_state(value) -> str | None:
    """Canonical state name for ``value``, or None if unrecognised.

    Matching is case-insensitive; "to-do", "to_do" and "to do" mean ToDo.
    """
    return _STATE_LOOKUP.get(str(value or "").strip().casefold())


def get_available_transitions(state: str) -> list[str]:
    """Triggers that are valid from ``state``."""
    return [t.trigger for (src, _), t in TASK_TRANSITIONS.items() if src == state]


# ═══════════════════════════════════════════════════════════════════════════
#  Update requests
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class PlanChange:
    plan: str | None  # None clears the plan


@dataclass(frozen=True)
class TaskUpdate:
    """One update request: any combination of plan change, state change and note."""

    plan_change: PlanChange | None = None
    target_state: str | None = None
    note: str | None = None

    @classmethod
    def from_payload(cls, data: dict | None) -> TaskUpdate:
        """Build an update from a JSON body ({plan?, state?, note?}).

        A present ``plan`` key is a plan change even when its value is
        null or blank (that clears the plan).
        """
        data = data or {}

        plan_change = None
        if "plan" in data:
            raw = data.get("plan")
            plan = str(raw).strip() if raw is not None else ""
            plan_change = PlanChange(plan or None)

        target_state = None
        raw_state = data.get("state")
        if raw_state is not None and str(raw_state).strip():
            target_state = str(raw_state).strip()
            if target_state not in TASK_STATES:
                raise ValidationError(
                    f"Invalid state: {target_state}",
                    details={"state": f"must be one of {', '.join(TASK_STATES)}"},
                )

        note = str(data.get("note") or "").strip() or None

        update = cls(plan_change=plan_change, target_state=target_state, note=note)
        if update.is_empty:
            raise ValidationError("No update fields: supply plan, state or note")
        return update

    @property
    def is_empty(self) -> bool:
        return self.plan_change is None and self.target_state is None and not self.note


# ═══════════════════════════════════════════════════════════════════════════
#  Helpers
# ═══════════════════════════════════════════════════════════════════════════


def _require_caller(username) -> str:
    uname = str(username or "").strip()
    if not uname:
        raise AuthenticationRequired()
    return uname


def _require_task_name(task_name) -> str:
    name = str(task_name or "").strip()
    if not name:
        raise ValidationError("Task name is required", details={"name": "required"})
    return name


def _task_lock_query(task_name: str):
    return Task.query.filter_by(name=task_name).with_for_update().populate_existing()


def _application_lock_query(acronym: str):
    """SELECT ... FOR UPDATE on the application; serialises revision allocation."""
    return Application.query.filter_by(acronym=acronym).with_for_update().populate_existing()


def _lock_task(task_name: str) -> Task:
    """Read the task row with a write lock held until commit/rollback."""
    task = _task_lock_query(task_name).first()
    if task is None:
        raise NotFoundError("Task", task_name)
    return task


def _append_notes_expr(ledger: str):
    return sa.func.coalesce(Task.notes, "") + ledger


def _guarded_update(task: Task, expected_state: str, values: dict) -> None:
    """UPDATE the task only if it is still in ``expected_state``.

    The row lock already serialises writers; the predicate catches lost
    updates when the database runs at a weaker isolation level.
    """
    stmt = (
        sa.update(Task)
        .where(Task.task_id == task.task_id, Task.state == expected_state)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    result = db.session.execute(stmt)
    if result.rowcount != 1:
        raise TransitionConflict(
            task.name, expected_state, "the task was changed by another request",
        )


def _plan_message(plan: str | None) -> str:
    return f'Plan changed to "{plan}"' if plan else "Plan cleared"


# ═══════════════════════════════════════════════════════════════════════════
#  Queries
# ═══════════════════════════════════════════════════════════════════════════


def list_tasks(app: str | None = None, state: str | None = None, plan: str | None = None) -> list[Task]:
    """Tasks matching the filters, newest first, then by name."""
    q = Task.query
    if app:
        q = q.filter(Task.app_acronym == app)
    if state:
        q = q.filter(Task.state == state)
    if plan:
        q = q.filter(Task.plan == plan)
    return q.order_by(Task.create_date.desc(), Task.name.asc()).all()


def get_tasks_by_state(state, app: str | None = None, plan: str | None = None) -> list[Task]:
    canonical = normalise_state(state)
    if canonical is None:
        raise ValidationError(
            f"Invalid state: {state}",
            details={"state": f"must be one of {', '.join(TASK_STATES)}"},
        )
    return list_tasks(app=app, state=canonical, plan=plan)


def get_task(task_name) -> Task:
    name = _require_task_name(task_name)
    task = Task.query.filter_by(name=name).first()
    if task is None:
        raise NotFoundError("Task", name)
    return task


# ═══════════════════════════════════════════════════════════════════════════
#  Commands
# ═══════════════════════════════════════════════════════════════════════════


def create_task(
    username: str,
    name: str,
    description: str | None,
    app_acronym: str,
    plan: str | None = None,
    owner: str | None = None,
    initial_note: str | None = None,
) -> Task:
    """
    Create a task in state Open under the application's next revision.

    The application row is locked for the whole transaction, so concurrent
    creations for one application get consecutive ids ACR_N, ACR_N+1.

    Raises:
        AuthenticationRequired, ValidationError, NotFoundError,
        PermissionDenied, ConflictError
    """
    username = _require_caller(username)
    name = str(name or "").strip()
    acronym = str(app_acronym or "").strip()
    plan = str(plan).strip() if plan else None

    if not name:
        raise ValidationError("Task name is required", details={"name": "required"})
    if len(name) > TASK_NAME_MAX:
        raise ValidationError(
            f"Task name must be at most {TASK_NAME_MAX} characters",
            details={"name": "too long"},
        )
    if not acronym:
        raise ValidationError("Application is required", details={"app_acronym": "required"})
    if owner:
        logger.debug("create_task: owner %r ignored, owner is assigned on take", owner)

    task_id = None
    try:
        application = _application_lock_query(acronym).first()
        if application is None:
            raise NotFoundError("Application", acronym)

        check_transition(username, application, "create", action="create tasks")

        if plan and db.session.get(Plan, plan) is None:
            raise NotFoundError("Plan", plan)
        if Task.query.filter_by(name=name).first() is not None:
            raise ConflictError("Task", "name", name)

        application.r_number = (application.r_number or 0) + 1
        task_id = f"{acronym}_{application.r_number}"

        notes = make_entry(username, "Task created", "Open") + make_entry(username, initial_note, "Open")
        task = Task(
            task_id=task_id,
            name=name,
            description=description or None,
            notes=notes,
            plan=plan,
            app_acronym=acronym,
            state="Open",
            creator=username,
            owner=None,
            create_date=date.today(),
        )
        db.session.add(task)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        logger.warning(
            "create_task: unique constraint hit for name=%s task_id=%s", name, task_id,
            extra={"task_id": task_id},
        )
        if Task.query.filter_by(name=name).first() is not None:
            raise ConflictError("Task", "name", name)
        raise ConflictError("Task", "task_id", task_id)
    except Exception:
        db.session.rollback()
        raise

    logger.info("Task %s created: name=%s by %s", task_id, name, username, extra={"task_id": task_id})
    return db.session.get(Task, task_id)


def append_note(username: str, task_name: str, text: str) -> Task:
    """Append a free-form entry stamped with the task's current state."""
    username = _require_caller(username)
    name = _require_task_name(task_name)
    body = str(text or "").strip()
    if not body:
        raise ValidationError("Note text is required", details={"entry": "required"})

    try:
        task = _lock_task(name)
        db.session.execute(
            sa.update(Task)
            .where(Task.task_id == task.task_id)
            .values(notes=_append_notes_expr(make_entry(username, body, task.state)))
            .execution_options(synchronize_session=False)
        )
        task_id = task.task_id
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    return db.session.get(Task, task_id)


def update_task(username: str, task_name: str, update: TaskUpdate) -> Task:
    """
    Apply a plan change, a state transition and/or a note in one transaction.

    Steps:
        1. lock the task row, load its application
        2. plan change: only in Open (open permit) or Done (done permit)
        3. state change: (current, target) must be an edge; check its permit
        4. one guarded UPDATE carrying state, owner, plan and ledger entries
        5. commit, then dispatch the review notification for Doing → Done

    Raises:
        AuthenticationRequired, ValidationError, NotFoundError,
        PermissionDenied, TransitionConflict
    """
    username = _require_caller(username)
    name = _require_task_name(task_name)
    if update is None or update.is_empty:
        raise ValidationError("No update fields: supply plan, state or note")

    transition = None
    try:
        task = _lock_task(name)
        application = db.session.get(Application, task.app_acronym)
        if application is None:
            raise NotFoundError("Application", task.app_acronym)

        current = task.state
        effective = current
        values: dict = {}
        entries: list[str] = []

        if update.plan_change is not None:
            category = PLAN_PERMITS.get(current)
            if category is None:
                raise TransitionConflict(
                    name, current, "the plan can only be changed while the task is Open or Done",
                )
            check_transition(username, application, category, action="change the plan")
            new_plan = update.plan_change.plan
            if new_plan and db.session.get(Plan, new_plan) is None:
                raise NotFoundError("Plan", new_plan)
            values["plan"] = new_plan
            if update.target_state is not None:
                entries.append(make_entry(username, _plan_message(new_plan), current))

        if update.target_state is not None:
            transition = TASK_TRANSITIONS.get((current, update.target_state))
            if transition is None:
                raise TransitionConflict(
                    name, current, f'no transition from "{current}" to "{update.target_state}"',
                )
            check_transition(username, application, transition.permit, action=transition.trigger)

            values["state"] = transition.target
            if transition.trigger == "take":
                values["owner"] = username
            elif transition.trigger == "drop":
                values["owner"] = None
            effective = transition.target
            entries.append(make_entry(username, transition.message.format(user=username), effective))

        if update.note:
            entries.append(make_entry(username, update.note, effective))

        ledger = "".join(entries)
        if ledger:
            values["notes"] = _append_notes_expr(ledger)

        _guarded_update(task, current, values)

        task_id = task.task_id
        job = None
        if transition is not None and transition.trigger == "review":
            job = ReviewNotification(
                task_id=task_id,
                task_name=task.name,
                app_acronym=application.acronym,
                reviewer=username,
                groups=tuple(application.permit_groups("done")),
            )
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    if transition is not None:
        logger.info(
            "Task %s %s: %s → %s by %s",
            task_id, transition.trigger, transition.source, transition.target, username,
            extra={"task_id": task_id},
        )
    if job is not None:
        dispatcher.submit(job)

    return db.session.get(Task, task_id)


def promote_to_done(username: str, task_name: str) -> Task:
    """Doing → Done only; any other current state is a bad request."""
    username = _require_caller(username)
    task = get_task(task_name)
    if task.state != "Doing":
        raise ValidationError(
            f"Task {task.name!r} is not in Doing (state={task.state})",
            details={"state": task.state},
        )
    return update_task(username, task.name, TaskUpdate(target_state="Done"))
