"""HTTP tests for /auth and session handling."""
from datetime import timedelta

import pytest

from streamline.api.auth import services
from streamline.core.security import (
    RESET_PASSWORD_PURPOSE,
    VERIFY_EMAIL_PURPOSE,
    create_email_token,
    create_session_token,
)
from streamline.core.timeutils import utcnow
from streamline.db.models.auth_session import AuthSession

PASSWORD = "Str0ng!pass"


def link_token(message) -> str:
    return message.text.split("token=")[1].split()[0]


def login(client, email, password=PASSWORD):
    return client.post("/auth/login", json={"email": email, "password": password})


class TestRegistration:
    def test_register_verify_and_sign_in(self, client, outbox):
        response = client.post("/auth/register", json={
            "name": "Linus", "email": "linus@acme.dev", "password": PASSWORD
        })
        assert response.status_code == 200
        assert login(client, "linus@acme.dev").status_code == 403

        assert len(outbox) == 1
        assert outbox[0].to == "linus@acme.dev"
        verified = client.get("/auth/verify-email", params={"token": link_token(outbox[0])})

        assert verified.status_code == 200
        token = verified.json()["access_token"]
        session = client.get("/auth/session", headers={"Authorization": f"Bearer {token}"})
        assert session.json()["user"]["email"] == "linus@acme.dev"
        assert session.json()["active_organization_id"] is None
        assert login(client, "linus@acme.dev").status_code == 200

    def test_duplicate_email(self, client, owner):
        response = client.post("/auth/register", json={"name": "Ada", "email": owner.email, "password": PASSWORD})

        assert response.status_code == 400
        assert response.json()["detail"] == "Email already registered"

    def test_concurrent_duplicate_is_conflict(self, client, owner, outbox, monkeypatch):
        # The other sign-up commits between our lookup and our insert
        monkeypatch.setattr(services, "get_user_by_email", lambda db, email: None)

        response = client.post("/auth/register", json={"name": "Ada", "email": owner.email, "password": PASSWORD})

        assert response.status_code == 409
        assert response.json()["detail"] == "Email already registered"
        assert outbox == []

    @pytest.mark.parametrize("password", ["short1!", "alllowercase1!", "NoDigitsHere!", "NoSpecial123"])
    def test_weak_passwords_rejected(self, client, password):
        response = client.post("/auth/register", json={"name": "X", "email": "x@acme.dev", "password": password})

        assert response.status_code == 422

    def test_bogus_verification_token(self, client):
        response = client.get("/auth/verify-email", params={"token": "not-a-token"})

        assert response.status_code == 400


class TestLogin:
    def test_login_activates_first_organization(self, client, owner, org):
        token = login(client, owner.email).json()["access_token"]

        session = client.get("/auth/session", headers={"Authorization": f"Bearer {token}"}).json()

        assert session["active_organization_id"] == org.id

    def test_wrong_password(self, client, owner):
        response = login(client, owner.email, "Wr0ng!pass")

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid credentials"

    def test_unknown_email(self, client):
        assert login(client, "nobody@acme.dev").status_code == 401

    def test_logout_revokes_token(self, client, headers):
        assert client.post("/auth/logout", headers=headers).status_code == 200

        assert client.get("/auth/session", headers=headers).status_code == 401

    def test_expired_session_rejected(self, db, client, owner, open_session):
        auth_session = open_session(owner)
        auth_session.expires_at = utcnow() - timedelta(minutes=1)
        db.commit()
        token = create_session_token(auth_session, owner.email)

        response = client.get("/auth/session", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_email_token_is_not_a_session(self, client, owner):
        token = create_email_token(owner.email, RESET_PASSWORD_PURPOSE, timedelta(minutes=5))

        response = client.get("/auth/session", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401


class TestPasswordReset:
    def test_unknown_email_answers_the_same(self, client, outbox):
        response = client.post("/auth/forgot-password", json={"email": "nobody@acme.dev"})

        assert response.status_code == 200
        assert outbox == []

    def test_reset_changes_password_and_revokes_sessions(self, client, owner, headers, outbox):
        client.post("/auth/forgot-password", json={"email": owner.email})
        token = link_token(outbox[0])

        response = client.post("/auth/reset-password", json={"token": token, "password": "N3w!password"})

        assert response.status_code == 200
        assert client.get("/auth/session", headers=headers).status_code == 401
        assert login(client, owner.email).status_code == 401
        assert login(client, owner.email, "N3w!password").status_code == 200

    def test_reset_link_works_only_once(self, client, owner, outbox):
        client.post("/auth/forgot-password", json={"email": owner.email})
        token = link_token(outbox[0])

        first = client.post("/auth/reset-password", json={"token": token, "password": "N3w!password"})
        replay = client.post("/auth/reset-password", json={"token": token, "password": "0ther!password"})

        assert first.status_code == 200
        assert replay.status_code == 400
        assert replay.json()["detail"] == "Invalid or expired token"
        assert login(client, owner.email, "N3w!password").status_code == 200
        assert login(client, owner.email, "0ther!password").status_code == 401

    def test_fresh_link_works_after_a_reset(self, client, owner, outbox):
        client.post("/auth/forgot-password", json={"email": owner.email})
        client.post("/auth/reset-password", json={"token": link_token(outbox[0]), "password": "N3w!password"})
        client.post("/auth/forgot-password", json={"email": owner.email})

        response = client.post("/auth/reset-password",
                               json={"token": link_token(outbox[1]), "password": "0ther!password"})

        assert response.status_code == 200
        assert login(client, owner.email, "0ther!password").status_code == 200

    def test_verification_token_cannot_reset(self, client, owner):
        token = create_email_token(owner.email, VERIFY_EMAIL_PURPOSE, timedelta(minutes=5))

        response = client.post("/auth/reset-password", json={"token": token, "password": "N3w!password"})

        assert response.status_code == 400


class TestPurgeExpiredSessions:
    def test_deletes_only_expired(self, db, owner, open_session):
        stale = open_session(owner)
        stale.expires_at = utcnow() - timedelta(days=1)
        live = open_session(owner)
        db.commit()

        assert services.purge_expired_sessions(db) == 1
        assert db.query(AuthSession).filter(AuthSession.id == live.id).count() == 1
