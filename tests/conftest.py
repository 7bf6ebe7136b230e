"""
Shared pytest fixtures for the Taskflow test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - make_account / make_application / make_plan: direct-DB factories
    - auth_headers: Bearer header for a username
"""

import functools

import pytest

from taskflow import create_app
from taskflow.models import db as _db
from taskflow.models.account import Account, UserGroup
from taskflow.models.application import Application
from taskflow.models.plan import Plan
from taskflow.services.jwt_service import generate_access_token
from taskflow.utils.crypto import hash_password

DEFAULT_PASSWORD = "Passw0rd!"
DEFAULT_PERMITS = {
    "create": ["Dev"],
    "open": ["Dev"],
    "todo": ["Dev"],
    "doing": ["Dev"],
    "done": ["Lead"],
}


@functools.lru_cache(maxsize=None)
def _password_hash(password: str) -> str:
    return hash_password(password)


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    return create_app("testing")


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── Factories ────────────────────────────────────────────────────────────


@pytest.fixture()
def make_account():
    def _make(username, groups=(), *, email=None, active=True, password=DEFAULT_PASSWORD):
        for name in groups:
            if _db.session.get(UserGroup, name) is None:
                _db.session.add(UserGroup(name=name))
        account = Account(
            username=username,
            email=email,
            password_hash=_password_hash(password),
            active=active,
        )
        account.groups = list(groups)
        _db.session.add(account)
        _db.session.commit()
        return account
    return _make


@pytest.fixture()
def make_application():
    def _make(acronym="APP1", permits=None, *, start_date=None, end_date=None):
        application = Application(
            acronym=acronym, description=f"{acronym} application", r_number=0,
            start_date=start_date, end_date=end_date,
        )
        for category, groups in {**DEFAULT_PERMITS, **(permits or {})}.items():
            application.set_permit_groups(category, groups)
        _db.session.add(application)
        _db.session.commit()
        return application
    return _make


@pytest.fixture()
def make_plan():
    def _make(name="Sprint 1", app_acronym=None):
        plan = Plan(name=name, app_acronym=app_acronym)
        _db.session.add(plan)
        _db.session.commit()
        return plan
    return _make


@pytest.fixture()
def auth_headers():
    def _headers(username):
        return {"Authorization": f"Bearer {generate_access_token(username)}"}
    return _headers
