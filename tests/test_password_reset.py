"""Tests for the e-mailed password reset flow."""

from conftest import PASSWORD, create_user
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from accounts.models.token import Token
from accounts.models.user import User

NEW_PASSWORD = "N3w-P4ssword"


def post_reset(client: TestClient, email: str | None = "user1@mail.com"):
    return client.post("/api/1.0/user/password", json={"email": email})


def put_password(client: TestClient, reset_token: str | None, password: str | None = NEW_PASSWORD):
    return client.put("/api/1.0/user/password", json={"password": password, "passwordResetToken": reset_token})


def reset_token_for(client: TestClient, db: Session) -> str:
    post_reset(client)
    db.expire_all()
    return db.query(User).filter(User.email == "user1@mail.com").one().password_reset_token


class TestPasswordResetRequest:
    """Tests for POST /api/1.0/user/password."""

    def test_unknown_email(self, client: TestClient):
        response = post_reset(client, "nobody@mail.com")
        assert response.status_code == 404
        body = response.json()
        assert body["message"] == "E-mail not found."
        assert body["path"] == "/api/1.0/user/password"

    def test_invalid_email(self, client: TestClient):
        response = post_reset(client, "not-an-email")
        assert response.status_code == 400
        assert response.json()["validationErrors"]["email"] == "E-mail is not valid."

    def test_malformed_email(self, client: TestClient, test_user: User):
        response = post_reset(client, "a@b..c")
        assert response.status_code == 400
        assert response.json()["validationErrors"]["email"] == "E-mail is not valid."

    def test_missing_email(self, client: TestClient):
        response = post_reset(client, None)
        assert response.status_code == 400
        assert response.json()["validationErrors"]["email"] == "E-mail is not valid."

    def test_known_email(self, client: TestClient, test_user: User):
        response = post_reset(client)
        assert response.status_code == 200
        assert response.json()["message"] == "Check your e-mail for resetting your password."

    def test_token_stored_and_mailed(self, client: TestClient, test_user: User, db_session: Session, outbox: list):
        post_reset(client)
        db_session.refresh(test_user)
        assert test_user.password_reset_token
        assert len(outbox) == 1
        assert outbox[0]["To"] == "user1@mail.com"
        assert outbox[0]["Subject"] == "Password Reset"
        assert test_user.password_reset_token in outbox[0].as_string()

    def test_inactive_account_may_request_reset(self, client: TestClient, db_session: Session):
        create_user(db_session, inactive=True)
        response = post_reset(client)
        assert response.status_code == 200

    def test_email_failure(self, client: TestClient, test_user: User, failing_mail):
        response = post_reset(client)
        assert response.status_code == 502
        assert response.json()["message"] == "E-mail failure."


class TestPasswordUpdate:
    """Tests for PUT /api/1.0/user/password."""

    def test_unknown_reset_token(self, client: TestClient):
        response = put_password(client, "abcd")
        assert response.status_code == 403
        body = response.json()
        assert body["message"] == (
            "You are not authorized to update your password. Please follow the password reset steps again."
        )
        assert body["path"] == "/api/1.0/user/password"

    def test_missing_reset_token(self, client: TestClient):
        response = put_password(client, None)
        assert response.status_code == 403

    def test_unknown_token_checked_before_password(self, client: TestClient):
        response = put_password(client, "abcd", password="weak")
        assert response.status_code == 403

    def test_invalid_new_password(self, client: TestClient, test_user: User, db_session: Session):
        token = reset_token_for(client, db_session)
        response = put_password(client, token, password="alllowercase")
        assert response.status_code == 400
        assert response.json()["validationErrors"]["password"] == (
            "Password must have at least 1 uppercase, 1 lowercase letter and 1 number."
        )

    def test_successful_update(self, client: TestClient, test_user: User, db_session: Session):
        token = reset_token_for(client, db_session)
        response = put_password(client, token)
        assert response.status_code == 200

        db_session.refresh(test_user)
        assert test_user.password_reset_token is None

    def test_new_password_logs_in(self, client: TestClient, test_user: User, db_session: Session):
        token = reset_token_for(client, db_session)
        put_password(client, token)

        old = client.post("/api/1.0/auth", json={"email": "user1@mail.com", "password": PASSWORD})
        new = client.post("/api/1.0/auth", json={"email": "user1@mail.com", "password": NEW_PASSWORD})
        assert old.status_code == 401
        assert new.status_code == 200

    def test_reset_token_is_single_use(self, client: TestClient, test_user: User, db_session: Session):
        token = reset_token_for(client, db_session)
        put_password(client, token)
        response = put_password(client, token, password="An0ther-pass")
        assert response.status_code == 403

    def test_update_revokes_sessions(self, client: TestClient, test_user: User, auth_token: str, db_session: Session):
        user_id = test_user.id
        token = reset_token_for(client, db_session)
        put_password(client, token)

        db_session.expire_all()
        assert db_session.query(Token).filter(Token.user_id == user_id).count() == 0

    def test_update_activates_inactive_account(self, client: TestClient, db_session: Session):
        user = create_user(db_session, inactive=True)
        user.activation_token = "activation-1234"
        db_session.commit()

        token = reset_token_for(client, db_session)
        put_password(client, token)

        db_session.refresh(user)
        assert user.inactive is False
        assert user.activation_token is None
