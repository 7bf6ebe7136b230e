"""
Taskflow
Tests — task HTTP surface (/api/v1/tasks).
"""

import pytest

from taskflow.models import db
from taskflow.models.task import Task
from taskflow.services import task_lifecycle

BASE = "/api/v1/tasks"


@pytest.fixture()
def team(make_account, make_application):
    make_account("alice", ["Dev"])
    make_account("carol", ["Dev"])
    make_account("bob", ["QA"])
    make_account("dave", ["Lead"], email="dave@example.com")
    return make_application("APP1")


@pytest.fixture()
def as_user(client, auth_headers):
    """Issue a request as a given user: as_user("alice").get(url)."""

    class _Caller:
        def __init__(self, username):
            self.headers = auth_headers(username)

        def get(self, url, **kw):
            return client.get(url, headers=self.headers, **kw)

        def post(self, url, json=None):
            return client.post(url, json=json, headers=self.headers)

        def patch(self, url, json=None):
            return client.patch(url, json=json, headers=self.headers)

    return _Caller


def _create(as_user, name="login-form", **extra):
    res = as_user("alice").post(BASE, json={"name": name, "app_acronym": "APP1", **extra})
    assert res.status_code == 201, res.get_json()
    return res.get_json()


def _force_state(name, state, owner=None):
    task = Task.query.filter_by(name=name).one()
    task.state = state
    task.owner = owner
    db.session.commit()


# ── Authentication ───────────────────────────────────────────────────────


class TestAuthRequired:
    def test_no_token(self, client, team):
        res = client.get(BASE)
        assert res.status_code == 401
        assert res.get_json()["code"] == "ERR_UNAUTHENTICATED"

    def test_garbage_token(self, client, team):
        res = client.get(BASE, headers={"Authorization": "Bearer not-a-jwt"})
        assert res.status_code == 401

    def test_unknown_account(self, as_user, team):
        assert as_user("ghost").get(BASE).status_code == 401

    def test_disabled_account(self, as_user, make_account, team):
        make_account("eve", ["Dev"], active=False)
        res = as_user("eve").get(BASE)
        assert res.status_code == 403
        assert res.get_json()["code"] == "ERR_ACCOUNT_DISABLED"

    def test_health_is_public(self, client):
        res = client.get("/api/v1/health")
        assert res.status_code == 200
        assert res.get_json()["status"] == "ok"


# ── Create / read ────────────────────────────────────────────────────────


class TestCreateAndRead:
    def test_create(self, as_user, team):
        body = _create(as_user, description="Build it", notes="first thoughts")
        assert body["task_id"] == "APP1_1"
        assert body["state"] == "Open"
        assert body["creator"] == "alice"
        assert "first thoughts" in body["notes"]

    def test_create_missing_name(self, as_user, team):
        res = as_user("alice").post(BASE, json={"app_acronym": "APP1"})
        assert res.status_code == 400
        body = res.get_json()
        assert body["code"] == "ERR_VALIDATION_INVALID"
        assert body["details"] == {"name": "required"}

    def test_create_unknown_app(self, as_user, team):
        res = as_user("alice").post(BASE, json={"name": "x", "app_acronym": "NOPE"})
        assert res.status_code == 404
        assert res.get_json()["code"] == "ERR_NOT_FOUND"

    def test_create_forbidden(self, as_user, team):
        res = as_user("bob").post(BASE, json={"name": "x", "app_acronym": "APP1"})
        assert res.status_code == 403
        assert res.get_json()["code"] == "ERR_FORBIDDEN"

    def test_create_duplicate(self, as_user, team):
        _create(as_user)
        res = as_user("alice").post(BASE, json={"name": "login-form", "app_acronym": "APP1"})
        assert res.status_code == 409
        assert res.get_json()["code"] == "ERR_CONFLICT_DUPLICATE"

    def test_get_with_available_transitions(self, as_user, team):
        _create(as_user)
        res = as_user("bob").get(f"{BASE}/login-form")
        assert res.status_code == 200
        assert res.get_json()["available_transitions"] == ["release"]

    def test_get_unknown(self, as_user, team):
        assert as_user("bob").get(f"{BASE}/ghost").status_code == 404

    def test_list_with_filters(self, as_user, team, make_application):
        make_application("APP2")
        _create(as_user, "b-task")
        _create(as_user, "a-task")
        as_user("alice").post(BASE, json={"name": "c-task", "app_acronym": "APP2"})

        names = [t["name"] for t in as_user("bob").get(BASE).get_json()]
        assert names == ["a-task", "b-task", "c-task"]
        names = [t["name"] for t in as_user("bob").get(f"{BASE}?app=APP2").get_json()]
        assert names == ["c-task"]

    @pytest.mark.parametrize("spelling", ["todo", "to-do", "TO_DO", "ToDo"])
    def test_by_state(self, as_user, team, spelling):
        _create(as_user)
        _create(as_user, "other")
        as_user("alice").patch(f"{BASE}/login-form", json={"state": "ToDo"})
        res = as_user("bob").get(f"{BASE}/state/{spelling}")
        assert res.status_code == 200
        assert [t["name"] for t in res.get_json()] == ["login-form"]

    def test_by_unknown_state(self, as_user, team):
        res = as_user("bob").get(f"{BASE}/state/archived")
        assert res.status_code == 400


# ── Transitions ──────────────────────────────────────────────────────────


class TestPatch:
    def test_release(self, as_user, team):
        _create(as_user)
        res = as_user("alice").patch(f"{BASE}/login-form", json={"state": "ToDo"})
        assert res.status_code == 200
        assert res.get_json()["state"] == "ToDo"
        assert res.get_json()["owner"] is None

    def test_illegal_edge_is_conflict(self, as_user, team):
        _create(as_user)
        res = as_user("alice").patch(f"{BASE}/login-form", json={"state": "Doing"})
        assert res.status_code == 409
        body = res.get_json()
        assert body["code"] == "ERR_CONFLICT_STATE"
        assert body["details"] == {"current_state": "Open", "reload": True}
        assert "Reload" in body["error"]

    def test_take_forbidden(self, as_user, team):
        _create(as_user)
        _force_state("login-form", "ToDo")
        res = as_user("bob").patch(f"{BASE}/login-form", json={"state": "Doing"})
        assert res.status_code == 403
        assert Task.query.filter_by(name="login-form").one().state == "ToDo"

    def test_take_then_review(self, as_user, team, monkeypatch):
        jobs = []
        monkeypatch.setattr(task_lifecycle.dispatcher, "submit", jobs.append)
        _create(as_user)
        _force_state("login-form", "ToDo")

        res = as_user("carol").patch(f"{BASE}/login-form", json={"state": "Doing"})
        assert res.get_json()["owner"] == "carol"
        res = as_user("carol").patch(f"{BASE}/login-form", json={"state": "Done", "note": "ready"})
        assert res.status_code == 200
        assert res.get_json()["state"] == "Done"
        assert [j.task_id for j in jobs] == ["APP1_1"]

    def test_unknown_state_value(self, as_user, team):
        _create(as_user)
        res = as_user("alice").patch(f"{BASE}/login-form", json={"state": "Archived"})
        assert res.status_code == 400

    def test_empty_body(self, as_user, team):
        _create(as_user)
        assert as_user("alice").patch(f"{BASE}/login-form", json={}).status_code == 400

    def test_silent_plan_change(self, as_user, team, make_plan):
        make_plan("NewPlan", "APP1")
        _create(as_user)
        _force_state("login-form", "Done", owner="carol")
        before = as_user("dave").get(f"{BASE}/login-form").get_json()["notes"]

        res = as_user("dave").patch(f"{BASE}/login-form", json={"plan": "NewPlan"})
        assert res.status_code == 200
        assert res.get_json()["plan"] == "NewPlan"
        assert res.get_json()["notes"] == before


class TestPromote:
    def test_promote(self, as_user, team, monkeypatch):
        monkeypatch.setattr(task_lifecycle.dispatcher, "submit", lambda job: None)
        _create(as_user)
        _force_state("login-form", "Doing", owner="carol")
        res = as_user("carol").post(f"{BASE}/login-form/promote")
        assert res.status_code == 200
        assert res.get_json()["state"] == "Done"

    def test_promote_not_doing(self, as_user, team):
        _create(as_user)
        res = as_user("carol").post(f"{BASE}/login-form/promote")
        assert res.status_code == 400
        assert res.get_json()["details"] == {"state": "Open"}


# ── Notes ────────────────────────────────────────────────────────────────


class TestNotes:
    def test_append_and_list(self, as_user, team):
        _create(as_user)
        res = as_user("bob").post(f"{BASE}/login-form/notes", json={"entry": "looks good"})
        assert res.status_code == 200
        assert res.get_json() == {"ok": True}

        entries = as_user("bob").get(f"{BASE}/login-form/notes").get_json()
        assert len(entries) == 2
        assert entries[0]["body"] == "looks good"
        assert entries[0]["header"].endswith("Open - bob")
        assert entries[1]["body"] == "Task created"

    def test_append_blank(self, as_user, team):
        _create(as_user)
        res = as_user("bob").post(f"{BASE}/login-form/notes", json={"entry": "  "})
        assert res.status_code == 400

    def test_append_unknown_task(self, as_user, team):
        res = as_user("bob").post(f"{BASE}/ghost/notes", json={"entry": "hi"})
        assert res.status_code == 404
