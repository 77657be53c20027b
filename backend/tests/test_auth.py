"""Registration, login and bearer-token resolution."""
from datetime import timedelta

import pytest

from fittrack.auth import create_access_token, get_password_hash, verify_password


@pytest.mark.unit
def test_password_hash_roundtrip():
    hashed = get_password_hash("hunter22")

    assert hashed != "hunter22"
    assert verify_password("hunter22", hashed)
    assert not verify_password("hunter23", hashed)


@pytest.mark.integration
class TestAuthRoutes:

    def test_register_login_me(self, client):
        resp = client.post("/api/auth/register", json={"email": "new@example.com", "password": "pw1234"})
        assert resp.status_code == 201
        assert resp.json()["email"] == "new@example.com"

        resp = client.post("/api/auth/login", data={"username": "new@example.com", "password": "pw1234"})
        assert resp.status_code == 200
        token = resp.json()["access_token"]

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["email"] == "new@example.com"

    def test_duplicate_email_rejected(self, client, user):
        resp = client.post("/api/auth/register", json={"email": user.email, "password": "pw1234"})

        assert resp.status_code == 400

    def test_wrong_password(self, client, user):
        resp = client.post("/api/auth/login", data={"username": user.email, "password": "nope"})

        assert resp.status_code == 401

    def test_expired_token(self, client, user):
        token = create_access_token({"sub": str(user.id)}, expires_delta=timedelta(minutes=-1))

        resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert resp.status_code == 401

    def test_token_for_unknown_user(self, client):
        token = create_access_token({"sub": "9999"})

        assert client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"}).status_code == 401


@pytest.mark.integration
def test_root_and_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
    assert client.get("/").json()["status"] == "healthy"
