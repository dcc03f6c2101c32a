"""HTTP tests for /api/users."""

from __future__ import annotations

import io

from samplecat.models import Sample, User
from tests.factories.sample import SampleFactory
from tests.factories.user import DEFAULT_PASSWORD, UserFactory


def test_get_me(client, user, auth_headers):
    resp = client.get("/api/users/me", headers=auth_headers)
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["message"] == "User profile retrieved"
    data = body["data"]
    assert data["id"] == user.id
    assert data["email"] == user.email
    assert set(data) >= {"fullName", "profileImageUrl", "role", "createdAt", "lastLogin"}
    assert "passwordHash" not in data and "password_hash" not in data


def test_get_profile(client, auth_headers):
    UserFactory(username="uma")
    ok = client.get("/api/users/profile/uma", headers=auth_headers)
    assert ok.status_code == 200
    assert ok.get_json()["data"]["username"] == "uma"

    missing = client.get("/api/users/profile/nobody", headers=auth_headers)
    assert missing.status_code == 404
    assert missing.get_json()["detail"] == "User not found"


def test_patch_me_with_image(client, auth_headers, image_store, user):
    resp = client.patch(
        "/api/users/me",
        headers=auth_headers,
        data={"fullName": "Updated Name", "profileImage": (io.BytesIO(b"png-bytes"), "me.png")},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["fullName"] == "Updated Name"
    assert data["profileImageUrl"].startswith("memory://images/samplecat/profiles/")
    assert list(image_store.objects.values()) == [b"png-bytes"]

    # A second upload replaces and deletes the first.
    first_key = next(iter(image_store.objects))
    again = client.patch(
        "/api/users/me",
        headers=auth_headers,
        data={"profileImage": (io.BytesIO(b"other"), "me2.png")},
        content_type="multipart/form-data",
    )
    assert again.status_code == 200
    assert again.get_json()["data"]["fullName"] == "Updated Name"
    assert image_store.deleted == [first_key]


def test_change_password(client, auth_headers, user, session):
    wrong = client.post(
        "/api/users/me/change-password",
        headers=auth_headers,
        json={"currentPassword": "bad", "newPassword": "newpassword1"},
    )
    assert wrong.status_code == 401
    assert wrong.get_json()["detail"] == "Current password is incorrect"

    ok = client.post(
        "/api/users/me/change-password",
        headers=auth_headers,
        json={"currentPassword": DEFAULT_PASSWORD, "newPassword": "newpassword1"},
    )
    assert ok.status_code == 200
    assert ok.get_json()["message"] == "Password updated successfully"
    session.expire_all()
    assert session.get(User, user.id).verify_password("newpassword1")


def test_change_password_validation(client, auth_headers):
    resp = client.post(
        "/api/users/me/change-password",
        headers=auth_headers,
        json={"currentPassword": DEFAULT_PASSWORD, "newPassword": "short"},
    )
    assert resp.status_code == 400
    assert "newPassword" in resp.get_json()["details"]["errors"]


def test_delete_me(client, auth_headers, user, session, image_store):
    user_id = user.id
    SampleFactory(owner=user, image_id="samplecat/x")

    resp = client.delete("/api/users/me", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.get_json()["message"] == "Account deleted successfully"

    session.expire_all()
    assert session.get(User, user_id) is None
    assert session.query(Sample).filter_by(user_id=user_id).count() == 0
    assert image_store.deleted == ["samplecat/x"]

    # The old access token no longer resolves to anyone.
    assert client.get("/api/users/me", headers=auth_headers).status_code == 401
