"""HTTP tests for /organizations and /invitations."""
from datetime import timedelta

import pytest

from streamline.api.organizations import services
from streamline.core.timeutils import utcnow
from streamline.db.models.auth_session import AuthSession
from streamline.db.models.organization import Invitation, InvitationStatus, Member, MemberRole


@pytest.fixture()
def bob(make_user):
    return make_user("Bob")


def invite(client, headers, email, role="member"):
    response = client.post("/organizations/active/invitations", json={"email": email, "role": role},
                           headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


class TestOrganizations:
    def test_create_makes_caller_owner_and_activates(self, db, client, auth_headers, owner):
        headers = auth_headers(owner)

        response = client.post("/organizations/", json={"name": "Acme", "slug": "acme"}, headers=headers)

        assert response.status_code == 200
        member = db.query(Member).filter(Member.user_id == owner.id).one()
        assert member.role == MemberRole.OWNER
        session = client.get("/auth/session", headers=headers).json()
        assert session["active_organization_id"] == response.json()["id"]

    def test_duplicate_slug_is_conflict(self, client, headers, org):
        response = client.post("/organizations/", json={"name": "Other", "slug": org.slug}, headers=headers)

        assert response.status_code == 409

    def test_invalid_slug(self, client, headers):
        response = client.post("/organizations/", json={"name": "Bad", "slug": "-bad-"}, headers=headers)

        assert response.status_code == 422

    def test_lists_only_own_organizations(self, client, headers, make_user, make_org):
        grace = make_user("Grace")
        make_org(grace, "globex")

        response = client.get("/organizations/", headers=headers)

        assert [o["slug"] for o in response.json()] == ["acme"]

    def test_switch_active_organization(self, client, headers, make_user, make_org, add_member, owner):
        grace = make_user("Grace")
        globex = make_org(grace, "globex")

        denied = client.put("/auth/session/active-organization", json={"organization_id": globex.id},
                            headers=headers)
        add_member(globex, owner)
        allowed = client.put("/auth/session/active-organization", json={"organization_id": globex.id},
                             headers=headers)

        assert denied.status_code == 404
        assert allowed.json()["active_organization_id"] == globex.id


class TestMembersPage:
    def test_rows_are_tagged_with_allowed_actions(self, client, headers, org, bob, add_member):
        add_member(org, bob)
        invite(client, headers, "carol@acme.dev")

        body = client.get("/organizations/active", headers=headers).json()
        rows = {(row["kind"], row.get("email") or row["user"]["email"]): row["allowed_actions"]
                for row in body["rows"]}

        assert body["role"] == "owner"
        assert rows == {
            ("member", "ada@acme.dev"): [],
            ("member", "bob@acme.dev"): ["remove_member"],
            ("invitation", "carol@acme.dev"): ["cancel_invitation"],
        }

    def test_plain_member_sees_only_leave(self, client, org, bob, add_member, auth_headers):
        add_member(org, bob)

        body = client.get("/organizations/active", headers=auth_headers(bob, org)).json()
        actions = {row["user"]["name"]: row["allowed_actions"] for row in body["rows"] if row["kind"] == "member"}

        assert actions == {"Ada": [], "Bob": ["leave"]}

    def test_remove_member_detaches_sessions(self, db, client, headers, org, bob, add_member, open_session):
        member = add_member(org, bob)
        bob_session = open_session(bob, org)

        response = client.delete(f"/organizations/active/members/{member.id}", headers=headers)

        assert response.status_code == 200
        db.expire_all()
        assert db.get(AuthSession, bob_session.id).active_organization_id is None
        assert db.query(Member).filter(Member.user_id == bob.id).count() == 0

    def test_member_cannot_remove_others(self, client, org, bob, add_member, auth_headers, owner, db):
        add_member(org, bob)
        owner_row = db.query(Member).filter(Member.user_id == owner.id).one()

        response = client.delete(f"/organizations/active/members/{owner_row.id}", headers=auth_headers(bob, org))

        assert response.status_code == 403

    def test_owner_cannot_leave(self, client, headers):
        response = client.post("/organizations/active/leave", headers=headers)

        assert response.status_code == 403

    def test_member_leaves_and_falls_back(self, client, org, bob, add_member, make_org, auth_headers):
        add_member(org, bob)
        own = make_org(bob, "bobco")
        headers = auth_headers(bob, org)

        response = client.post("/organizations/active/leave", headers=headers)

        assert response.status_code == 200
        assert client.get("/auth/session", headers=headers).json()["active_organization_id"] == own.id


class TestInvitations:
    def test_invite_sends_email(self, client, headers, outbox):
        invitation = invite(client, headers, "Bob@Acme.dev", role="admin")

        assert invitation["email"] == "bob@acme.dev"
        assert invitation["role"] == "admin"
        assert invitation["organization"]["slug"] == "acme"
        assert invitation["inviter"]["name"] == "Ada"
        assert len(outbox) == 1
        assert outbox[0].to == "bob@acme.dev"
        assert f"accept-invitation?invite={invitation['id']}" in outbox[0].html

    def test_cannot_invite_as_owner(self, client, headers):
        response = client.post("/organizations/active/invitations", json={"email": "x@acme.dev", "role": "owner"},
                               headers=headers)

        assert response.status_code == 422

    def test_duplicate_invitation_and_existing_member(self, client, headers, org, bob, add_member):
        invite(client, headers, "carol@acme.dev")
        add_member(org, bob)

        again = client.post("/organizations/active/invitations", json={"email": "carol@acme.dev"}, headers=headers)
        member = client.post("/organizations/active/invitations", json={"email": "bob@acme.dev"}, headers=headers)

        assert again.status_code == 409
        assert member.status_code == 409

    def test_members_cannot_invite(self, client, org, bob, add_member, auth_headers):
        add_member(org, bob)

        response = client.post("/organizations/active/invitations", json={"email": "carol@acme.dev"},
                               headers=auth_headers(bob, org))

        assert response.status_code == 403

    def test_accept_joins_and_activates(self, db, client, headers, org, bob, auth_headers):
        invitation = invite(client, headers, "bob@acme.dev", role="admin")
        bob_headers = auth_headers(bob)

        response = client.post(f"/invitations/{invitation['id']}/accept", headers=bob_headers)

        assert response.status_code == 200
        assert response.json()["status"] == "accepted"
        member = db.query(Member).filter(Member.user_id == bob.id, Member.organization_id == org.id).one()
        assert member.role == MemberRole.ADMIN
        assert client.get("/auth/session", headers=bob_headers).json()["active_organization_id"] == org.id

    def test_invitation_hidden_from_other_addresses(self, client, headers, make_user, auth_headers):
        invitation = invite(client, headers, "bob@acme.dev")
        eve = make_user("Eve")

        response = client.get(f"/invitations/{invitation['id']}", headers=auth_headers(eve))

        assert response.status_code == 404

    def test_unverified_user_cannot_accept(self, client, headers, make_user, auth_headers):
        invitation = invite(client, headers, "dan@acme.dev")
        dan = make_user("Dan", verified=False)

        response = client.post(f"/invitations/{invitation['id']}/accept", headers=auth_headers(dan))

        assert response.status_code == 403

    def test_reject(self, client, headers, bob, auth_headers):
        invitation = invite(client, headers, "bob@acme.dev")

        response = client.post(f"/invitations/{invitation['id']}/reject", headers=auth_headers(bob))
        again = client.post(f"/invitations/{invitation['id']}/accept", headers=auth_headers(bob))

        assert response.json()["status"] == "rejected"
        assert again.status_code == 400

    def test_cancel(self, client, headers, bob, auth_headers):
        invitation = invite(client, headers, "bob@acme.dev")

        cancelled = client.delete(f"/organizations/active/invitations/{invitation['id']}", headers=headers)
        accept = client.post(f"/invitations/{invitation['id']}/accept", headers=auth_headers(bob))

        assert cancelled.json()["status"] == "canceled"
        assert accept.status_code == 400

    def test_expired_invitation_cannot_be_accepted(self, db, client, headers, bob, auth_headers):
        invitation = invite(client, headers, "bob@acme.dev")
        row = db.get(Invitation, invitation["id"])
        row.expires_at = utcnow() - timedelta(minutes=1)
        db.commit()

        response = client.post(f"/invitations/{invitation['id']}/accept", headers=auth_headers(bob))

        assert response.status_code == 400
        db.expire_all()
        assert db.get(Invitation, invitation["id"]).status == InvitationStatus.EXPIRED


class TestExpireInvitations:
    def test_marks_only_overdue_pending(self, db, org, owner):
        overdue = Invitation(organization_id=org.id, email="a@acme.dev", inviter_id=owner.id,
                             expires_at=utcnow() - timedelta(hours=1))
        fresh = Invitation(organization_id=org.id, email="b@acme.dev", inviter_id=owner.id,
                           expires_at=utcnow() + timedelta(hours=1))
        db.add_all([overdue, fresh])
        db.commit()

        assert services.expire_invitations(db) == 1
        db.refresh(overdue)
        db.refresh(fresh)
        assert overdue.status == InvitationStatus.EXPIRED
        assert fresh.status == InvitationStatus.PENDING
