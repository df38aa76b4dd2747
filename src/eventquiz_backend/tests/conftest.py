"""
Pytest configuration and fixtures for all tests.

Tests run against an in-memory SQLite database. The authorization core is
evaluated in the application, so SQLite exercises the same decisions as
PostgreSQL; the row level security DDL is tested as rendered text.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from eventquiz_backend.model import Base
from eventquiz_backend.model.role import AppRole
from eventquiz_backend.services.identity import IdentityService
from eventquiz_backend.services.roles import RoleService
from eventquiz_backend.settings import settings
from eventquiz_backend.tests.fixtures import TEST_IDENTITY_SECRET, TEST_JWT_SECRET


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    monkeypatch.setattr(settings, "JWT_SECRET", TEST_JWT_SECRET)
    monkeypatch.setattr(settings, "JWT_AUDIENCE", None)
    monkeypatch.setattr(settings, "IDENTITY_WEBHOOK_SECRET", TEST_IDENTITY_SECRET)
    return settings


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def db(engine):
    """Create a new database session for a test."""
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def identity(db):
    return IdentityService(db)


@pytest.fixture
def admin_user(db, identity):
    user = identity.create_principal("admin@example.com", {"display_name": "Admin"})
    RoleService(db).seed_role(user.id, AppRole.admin)
    return user


@pytest.fixture
def member_user(identity):
    return identity.create_principal("member@example.com")


@pytest.fixture
def other_user(identity):
    return identity.create_principal("other@example.com", {"display_name": "Other"})


@pytest.fixture
def client(db):
    from eventquiz_backend.database import get_db
    from eventquiz_backend.server import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
