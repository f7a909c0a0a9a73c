"""Shared pytest fixtures for the application tests."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable

import pytest
from flask import Flask
from flask.testing import FlaskClient

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app import create_app  # noqa: E402
from config import Config  # noqa: E402
from models import db  # noqa: E402
from models.statuses import UserRole  # noqa: E402
from models.user import User  # noqa: E402
from utils.auth import issue_token  # noqa: E402

DEFAULT_PASSWORD = "secret123"


class _BaseTestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    RATE_LIMIT = "1000 per minute"
    AUTH_RATE_LIMIT = "1000 per minute"
    UPLOAD_RATE_LIMIT = "1000 per minute"
    APPLICATION_RATE_LIMIT = "1000 per minute"
    MESSAGE_RATE_LIMIT = "1000 per minute"
    RATELIMIT_KEY_PREFIX = ""
    SMTP_HOST = None


class FakeSocket:
    """Stand-in for a WebSocket connection that records what it is sent."""

    def __init__(self, fail: bool = False):
        self.sent: list[str] = []
        self.closed = False
        self.fail = fail

    def send(self, data: str) -> None:
        if self.fail:
            raise ConnectionError("socket gone")
        self.sent.append(data)

    def close(self, *args, **kwargs) -> None:
        self.closed = True


@pytest.fixture()
def app(tmp_path) -> Flask:
    """Create a Flask application instance for tests."""

    upload_dir = tmp_path / "uploads"

    class TestConfig(_BaseTestConfig):
        UPLOAD_DIR = str(upload_dir)

    application = create_app(TestConfig)

    with application.app_context():
        db.create_all()

    yield application

    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Return a test client for the Flask app."""

    return app.test_client()


@pytest.fixture()
def create_user(app: Flask) -> Callable[..., str]:
    """Return a factory that persists a user and returns its id."""

    def _create(
        email: str = "applicant@example.com",
        *,
        role: str = UserRole.APPLICANT,
        full_name: str = "JANE APPLICANT",
        verified: bool = True,
        password: str = DEFAULT_PASSWORD,
    ) -> str:
        with app.app_context():
            user = User(
                email=email,
                full_name=full_name,
                role=role,
                email_verified=verified,
                verification_token=None if verified else f"token-{email}",
            )
            user.set_password(password)
            db.session.add(user)
            db.session.commit()
            return user.id

    return _create


@pytest.fixture()
def auth_headers(app: Flask) -> Callable[[str], dict[str, str]]:
    """Return a factory building bearer headers for a user id."""

    def _headers(user_id: str) -> dict[str, str]:
        with app.app_context():
            user = db.session.get(User, user_id)
            token = issue_token(user)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture()
def applicant_id(create_user) -> str:
    return create_user("applicant@example.com")


@pytest.fixture()
def admin_id(create_user) -> str:
    return create_user("admin@example.com", role=UserRole.ADMIN, full_name="STAFF ADMIN")


@pytest.fixture()
def make_socket() -> type[FakeSocket]:
    """Return the fake connection class so tests can build handles."""

    return FakeSocket
