"""Pytest configuration and fixtures."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("TOKEN_SWEEP_ENABLED", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import smtplib  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from accounts.database import Base, get_db  # noqa: E402
from accounts.models.token import Token  # noqa: E402, F401
from accounts.models.user import User  # noqa: E402
from accounts.security import hash_password  # noqa: E402
from accounts.services.email import get_email_service  # noqa: E402

PASSWORD = "P4ssword"


@pytest.fixture(name="db_session")
def db_session_fixture():
    """Create an in-memory SQLite database for tests."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="outbox")
def outbox_fixture():
    """Capture outgoing e-mails instead of talking to an SMTP server."""
    sent = []
    service = get_email_service()
    original = service.transport
    service.transport = sent.append
    yield sent
    service.transport = original


@pytest.fixture(name="failing_mail")
def failing_mail_fixture():
    """Make every e-mail send fail as if the SMTP server rejected it."""

    def reject(msg):
        raise smtplib.SMTPException("Mailbox unavailable")

    service = get_email_service()
    original = service.transport
    service.transport = reject
    yield
    service.transport = original


@pytest.fixture(name="client")
def client_fixture(db_session: Session, outbox: list):
    """Create a test client with overridden DB dependency and a captured mail outbox."""
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def create_user(
    db: Session,
    username: str = "user1",
    email: str = "user1@mail.com",
    password: str = PASSWORD,
    inactive: bool = False,
) -> User:
    user = User(username=username, email=email, password_hash=hash_password(password), inactive=inactive)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_users(db: Session, active: int, inactive: int = 0) -> list[User]:
    return [
        create_user(db, username=f"user{i + 1}", email=f"user{i + 1}@mail.com", inactive=i >= active)
        for i in range(active + inactive)
    ]


@pytest.fixture(name="test_user")
def test_user_fixture(db_session: Session) -> User:
    """An active user with password P4ssword."""
    return create_user(db_session)


@pytest.fixture(name="auth_token")
def auth_token_fixture(client: TestClient, test_user: User) -> str:
    """Log the test user in and return its bearer token."""
    response = client.post("/api/1.0/auth", json={"email": test_user.email, "password": PASSWORD})
    assert response.status_code == 200
    return response.json()["token"]
