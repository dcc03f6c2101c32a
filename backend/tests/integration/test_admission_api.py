"""Request admission through the full stack: rate limits first, then bearer tokens."""

from __future__ import annotations

from freezegun import freeze_time

from tests.helpers.utils import bearer


def _login(client, **kwargs):
    return client.post(
        "/api/auth/login", json={"usernameOrEmail": "nobody", "password": "x"}, **kwargs
    )


def test_auth_bucket_allows_ten_then_429(client):
    codes = [_login(client).status_code for _ in range(10)]
    assert set(codes) == {401}

    blocked = _login(client)
    assert blocked.status_code == 429
    assert blocked.headers["Retry-After"] == "6"
    body = blocked.get_json()
    assert body["status"] == 429
    assert body["message"] == "Too many requests. Please try again later."
    assert "timestamp" in body
    assert blocked.headers["X-Request-ID"]


def test_auth_and_standard_buckets_are_separate(client, tight_policies):
    for _ in range(2):
        _login(client)
    assert _login(client).status_code == 429
    assert client.get("/api/health").status_code == 200


def test_clients_are_keyed_by_forwarded_for(client, tight_policies):
    first = {"X-Forwarded-For": "203.0.113.1"}
    second = {"X-Forwarded-For": "203.0.113.2, 10.0.0.1"}
    for _ in range(2):
        client.get("/api/health", headers=first)
    assert client.get("/api/health", headers=first).status_code == 429
    assert client.get("/api/health", headers=second).status_code == 200


def test_rate_limit_runs_before_token_check(client, tight_policies):
    headers = bearer("not-a-jwt")
    assert client.get("/api/health", headers=headers).status_code == 401
    assert client.get("/api/health", headers=headers).status_code == 401
    # Third attempt is rejected by the bucket even though the token is bad too.
    assert client.get("/api/health", headers=headers).status_code == 429


def test_invalid_bearer_rejected_on_public_route(client):
    resp = client.get("/api/health", headers=bearer("garbage"))
    assert resp.status_code == 401
    assert resp.get_json()["detail"] == "Invalid token"
    assert resp.mimetype == "application/problem+json"


def test_expired_bearer(client, user, issue_token):
    with freeze_time("2020-01-01 00:00:00"):
        token = issue_token(user)
    resp = client.get("/api/health", headers=bearer(token))
    assert resp.status_code == 401
    assert resp.get_json()["detail"] == "Token has expired"


def test_non_bearer_scheme_is_anonymous(client):
    resp = client.get("/api/health", headers={"Authorization": "Basic dXNlcjpwYXNz"})
    assert resp.status_code == 200


def test_anonymous_on_protected_route(client):
    resp = client.get("/api/samples")
    assert resp.status_code == 401


def test_token_for_deleted_user(client, user, issue_token, session):
    token = issue_token(user)
    session.delete(user)
    session.commit()
    resp = client.get("/api/users/me", headers=bearer(token))
    assert resp.status_code == 401
    assert resp.get_json()["detail"] == "Invalid token"


def test_preflight_skips_admission(client, tight_policies):
    for _ in range(5):
        resp = client.options(
            "/api/samples",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "GET",
                "Authorization": "Bearer garbage",
            },
        )
        assert resp.status_code == 200


def test_disabled_limiter(client, app, tight_policies):
    app.config["RATE_LIMIT_ENABLED"] = False
    try:
        codes = {client.get("/api/health").status_code for _ in range(5)}
    finally:
        app.config["RATE_LIMIT_ENABLED"] = True
    assert codes == {200}
