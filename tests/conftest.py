"""Shared fixtures: a fresh app over an in-memory SQLite store per test."""
import pytest
from fastapi.testclient import TestClient

from config import Settings
from main import create_app

DEFAULT_PASSWORD = "Abcde1"


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        SECRET_KEY="test-secret",
        DATABASE_URL="sqlite://",
        BCRYPT_ROUNDS=4,
        LOGIN_MAX_ATTEMPTS=3,
        LOGIN_WINDOW_SECONDS=60,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db_session(app):
    session = app.state.session_factory()
    yield session
    session.close()


@pytest.fixture
def signup(client):
    """Register an account and return the response."""

    def _signup(email="user@example.com", password=DEFAULT_PASSWORD, **fields):
        return client.post("/api/user/signup", json={"email": email, "password": password, **fields})

    return _signup


@pytest.fixture
def login(client):
    """Log in and return the parsed body of a successful response."""

    def _login(email="user@example.com", password=DEFAULT_PASSWORD):
        response = client.post("/api/user/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        return response.json()

    return _login


@pytest.fixture
def auth_headers(signup, login):
    """Register user@example.com and return bearer headers for it."""
    assert signup(fname="Ada", lname="Lovelace").status_code == 201
    token = login()["token"]
    return {"Authorization": f"Bearer {token}"}
