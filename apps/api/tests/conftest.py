"""
Shared fixtures: an in-memory SQLite database per test, the FastAPI app
wired to it, and helpers for organizations, users and bearer tokens.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SERVER_TIMEZONE", "Europe/London")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from carestaff.access.catalog import SystemRole
from carestaff.core.database import Base, get_db
from carestaff.main import app
from carestaff.models import registry  # noqa: F401
from carestaff.models.organization import LegacyOrganizationType, Organization, OrganizationCategory
from carestaff.models.user import User
from carestaff.routers.auth import create_access_token, get_password_hash
from carestaff.services.permissions import seed_access_control


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    # no context manager: startup seeding would hit the real engine
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def system_roles(db):
    return seed_access_control(db)


@pytest.fixture
def make_organization(db):
    def _make(name="St Mary's", category=OrganizationCategory.hospital, legacy_type=None, settings=None, timezone="Europe/London"):
        org = Organization(
            name=name,
            legacy_type=LegacyOrganizationType(legacy_type) if legacy_type else None,
            settings=settings or {},
            timezone=timezone,
        )
        # no category: the column default derives it from legacy_type
        if category is not None:
            org.category = category
        db.add(org)
        db.commit()
        db.refresh(org)
        return org

    return _make


@pytest.fixture
def make_user(db, system_roles):
    counter = {"n": 0}

    def _make(organization, role=SystemRole.admin, first_name="Alex", last_name="Taylor", timezone="Europe/London", email=None):
        counter["n"] += 1
        user = User(
            organization_id=organization.organization_id,
            first_name=first_name,
            last_name=last_name,
            email=email or f"user{counter['n']}@example.com",
            password_hash=get_password_hash("correct-horse"),
            timezone=timezone,
        )
        if role is not None:
            user.roles = [system_roles[role]]
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def organization(make_organization):
    return make_organization()


@pytest.fixture
def admin(make_user, organization):
    return make_user(organization, SystemRole.admin, first_name="Ada", last_name="Admin")


def auth_headers(user) -> dict:
    token = create_access_token({"sub": str(user.user_id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def headers_for():
    return auth_headers
