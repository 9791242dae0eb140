"""Shared fixtures: in-memory database, API client, users and workspaces.

Settings are read at import time, so the environment is prepared before
anything from ``streamline`` is imported.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["REQUIRE_EMAIL_VERIFICATION"] = "true"
os.environ["RESEND_API_KEY"] = ""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import streamline.db.models  # noqa: F401
from streamline.api.board.task import services as task_services
from streamline.api.board.task.schemas import TaskCreate
from streamline.core.context import OrgContext
from streamline.core.hashing import Hasher
from streamline.core.security import create_session_token
from streamline.core.timeutils import utcnow
from streamline.db.models.auth_session import AuthSession
from streamline.db.models.board.project import Project
from streamline.db.models.organization import Member, MemberRole, Organization
from streamline.db.models.user import User
from streamline.db.session import Base, get_db
from streamline.main import app

PASSWORD = "Str0ng!pass"


# ---------------------------------------------------------------------------
# Database and client
# ---------------------------------------------------------------------------


@pytest.fixture()
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def client(db):
    """API client sharing the test's database session.

    Not used as a context manager so the lifespan (and the scheduler) never runs.
    """
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def outbox(monkeypatch):
    """Capture outgoing emails instead of calling the provider."""
    sent = []

    def fake_send(message):
        sent.append(message)
        return f"email-{len(sent)}"

    monkeypatch.setattr("streamline.core.mailer.send_email", fake_send)
    return sent


@pytest.fixture(scope="session")
def password_hash():
    # bcrypt is slow; hash once for every user the fixtures create
    return Hasher.hash_password(PASSWORD)


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_user(db, password_hash):
    def _make(name="Ada", email=None, verified=True):
        user = User(
            name=name,
            email=email or f"{name.lower()}@acme.dev",
            hashed_password=password_hash,
            email_verified=verified,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture()
def make_org(db):
    def _make(owner, slug="acme", name=None):
        organization = Organization(name=name or slug.title(), slug=slug)
        organization.members.append(Member(user_id=owner.id, role=MemberRole.OWNER))
        db.add(organization)
        db.commit()
        db.refresh(organization)
        return organization

    return _make


@pytest.fixture()
def add_member(db):
    def _add(organization, user, role=MemberRole.MEMBER):
        member = Member(organization_id=organization.id, user_id=user.id, role=role)
        db.add(member)
        db.commit()
        db.refresh(member)
        return member

    return _add


@pytest.fixture()
def open_session(db):
    def _open(user, organization=None):
        auth_session = AuthSession(
            user_id=user.id,
            active_organization_id=organization.id if organization else None,
            expires_at=utcnow() + timedelta(days=1),
        )
        db.add(auth_session)
        db.commit()
        db.refresh(auth_session)
        return auth_session

    return _open


@pytest.fixture()
def auth_headers(open_session):
    """Bearer headers for a fresh session of ``user`` scoped to ``organization``."""
    def _headers(user, organization=None):
        auth_session = open_session(user, organization)
        return {"Authorization": f"Bearer {create_session_token(auth_session, user.email)}"}

    return _headers


@pytest.fixture()
def make_project(db):
    def _make(organization, slug="website", name=None, created_by=None):
        project = Project(
            name=name or slug.title(),
            slug=slug,
            organization_id=organization.id,
            created_by_id=created_by.id if created_by else None,
        )
        db.add(project)
        db.commit()
        db.refresh(project)
        return project

    return _make


# ---------------------------------------------------------------------------
# Default workspace: Ada owns "acme" with one project
# ---------------------------------------------------------------------------


@pytest.fixture()
def owner(make_user):
    return make_user("Ada")


@pytest.fixture()
def org(make_org, owner):
    return make_org(owner, "acme")


@pytest.fixture()
def project(make_project, org, owner):
    return make_project(org, "website", created_by=owner)


@pytest.fixture()
def headers(auth_headers, owner, org):
    return auth_headers(owner, org)


@pytest.fixture()
def ctx(open_session, owner, org):
    return OrgContext(user=owner, session=open_session(owner, org), organization_id=org.id)


@pytest.fixture()
def make_task(db, ctx, project):
    """Create a task through the service so it is appended to its column."""
    def _make(title, status=None, target=None, context=None):
        payload = TaskCreate(title=title, status=status, project_id=(target or project).id)
        return task_services.create_task(db, context or ctx, payload)

    return _make
