"""Single-use activation and password-reset tokens stored on the user row."""

import logging

from sqlalchemy.orm import Session

from accounts.errors import Forbidden, InvalidToken
from accounts.models.user import User
from accounts.security import hash_password, random_string
from accounts.services.token_store import get_token_store

logger = logging.getLogger("accounts.users")

ACCOUNT_TOKEN_LENGTH = 16


def issue_activation_token() -> str:
    return random_string(ACCOUNT_TOKEN_LENGTH)


def issue_password_reset_token() -> str:
    return random_string(ACCOUNT_TOKEN_LENGTH)


def consume_activation_token(db: Session, token: str) -> User:
    """Activate the account holding this token. Raises InvalidToken if none does."""
    user = db.query(User).filter(User.activation_token == token).first() if token else None
    if user is None:
        raise InvalidToken()

    user.inactive = False
    user.activation_token = None
    db.commit()
    logger.info("Activated user %s", user.id)
    return user


def find_password_reset_user(db: Session, token: str | None) -> User:
    """Return the user holding this reset token.

    An unknown token is reported as Forbidden so callers cannot tell which
    tokens exist.
    """
    user = db.query(User).filter(User.password_reset_token == token).first() if token else None
    if user is None:
        raise Forbidden(
            "You are not authorized to update your password. Please follow the password reset steps again."
        )
    return user


def consume_password_reset_token(db: Session, token: str | None, new_password: str) -> User:
    """Set a new password for the account holding this reset token.

    On success the account is activated and every session token of the user
    is revoked.
    """
    user = find_password_reset_user(db, token)

    user.password_hash = hash_password(new_password)
    user.password_reset_token = None
    user.inactive = False
    user.activation_token = None
    get_token_store().revoke_all_for_user(db, user.id, commit=False)
    db.commit()
    logger.info("Password reset completed for user %s", user.id)
    return user
