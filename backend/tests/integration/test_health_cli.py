"""Health endpoint and Flask CLI commands."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from sqlalchemy.exc import OperationalError

from samplecat.core.extensions import db
from samplecat.models import RefreshToken, Role, User
from tests.factories.refresh_token import RefreshTokenFactory
from tests.factories.user import UserFactory


def test_health_ok(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok", "db": True}


def test_health_degraded(client, session):
    broken = MagicMock()
    broken.execute.side_effect = OperationalError("SELECT 1", {}, Exception("down"))
    with patch.object(db, "session", broken):
        resp = client.get("/api/health")
    assert resp.status_code == 503
    assert resp.get_json() == {"status": "degraded", "db": False}


def test_unknown_route_is_problem_json(client):
    resp = client.get("/api/nowhere")
    assert resp.status_code == 404
    assert resp.mimetype == "application/problem+json"
    assert resp.get_json()["request_id"]


def _reload(session, user_id):
    session.expire_all()
    return session.get(User, user_id)


def test_cli_unlock(app, session):
    user = UserFactory(username="vic", failed_login_attempts=5, account_locked=True)
    result = app.test_cli_runner().invoke(args=["users", "unlock", "vic"])
    assert result.exit_code == 0
    assert "Unlocked vic" in result.output
    reloaded = _reload(session, user.id)
    assert reloaded.account_locked is False
    assert reloaded.failed_login_attempts == 0


def test_cli_set_role(app, session):
    user = UserFactory(username="wes")
    result = app.test_cli_runner().invoke(args=["users", "set-role", "wes", "moderator"])
    assert result.exit_code == 0
    assert _reload(session, user.id).role is Role.MODERATOR


def test_cli_disable_enable(app, session):
    user = UserFactory(username="xena")
    runner = app.test_cli_runner()
    assert runner.invoke(args=["users", "disable", "xena"]).exit_code == 0
    assert _reload(session, user.id).enabled is False
    assert runner.invoke(args=["users", "enable", "xena"]).exit_code == 0
    assert _reload(session, user.id).enabled is True


def test_cli_unknown_user(app, session):
    result = app.test_cli_runner().invoke(args=["users", "unlock", "ghost"])
    assert result.exit_code != 0
    assert "not found" in result.output


def test_cli_purge_expired_tokens(app, session):
    RefreshTokenFactory(expired=True)
    live = RefreshTokenFactory().token
    result = app.test_cli_runner().invoke(args=["tokens", "purge-expired"])
    assert result.exit_code == 0
    assert "Purged 1 expired refresh token(s)" in result.output
    assert [t.token for t in session.query(RefreshToken).all()] == [live]
