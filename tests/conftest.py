"""Pytest fixtures for the task tracker API."""

import os

# Set env vars before importing anything from the app
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ALGORITHM", "HS256")
os.environ.setdefault("ACCESS_TOKEN_EXPIRE_MINUTES", "30")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models  # noqa: F401
from config import Settings, get_settings
from database import Base, get_db
from repository import UserRepository
from security import TokenService
from users import UserDirectory

TEST_SETTINGS = Settings(secret_key="test-secret-key", algorithm="HS256", access_token_expire_minutes=30)

# In-memory SQLite for tests
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestSession()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = TestSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def settings():
    return TEST_SETTINGS


@pytest.fixture
def token_service(settings):
    return TokenService(settings)


@pytest.fixture
def client():
    from main import app

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: TEST_SETTINGS
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def user(db):
    return UserDirectory(UserRepository(db)).sign_up("alice", "pw1")


@pytest.fixture
def other_user(db):
    return UserDirectory(UserRepository(db)).sign_up("bob", "pw2")


@pytest.fixture
def auth_headers(user, token_service):
    token = token_service.issue(user.username)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_auth_headers(other_user, token_service):
    token = token_service.issue(other_user.username)
    return {"Authorization": f"Bearer {token}"}
