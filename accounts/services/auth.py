"""Authentication service."""

import logging

from sqlalchemy.orm import Session

from accounts.errors import AuthenticationFailure, ForbiddenInactive
from accounts.models.user import User
from accounts.security import hash_password, verify_password

logger = logging.getLogger("accounts.auth")

# Checked against when the e-mail is unknown, so both failure paths pay for one bcrypt comparison.
_DUMMY_PASSWORD_HASH: str | None = None


def _dummy_hash() -> str:
    global _DUMMY_PASSWORD_HASH
    if _DUMMY_PASSWORD_HASH is None:
        _DUMMY_PASSWORD_HASH = hash_password("dummy-password-for-timing")
    return _DUMMY_PASSWORD_HASH


class AuthService:
    """Checks login credentials."""

    def login(self, db: Session, email: str | None, password: str | None) -> User:
        """Return the user owning these credentials.

        Unknown e-mail and wrong password raise the same AuthenticationFailure.
        An inactive account is only reported once the password has matched.
        """
        if not email or password is None:
            raise AuthenticationFailure()

        user = db.query(User).filter(User.email == email).first()
        if user is None:
            verify_password(password, _dummy_hash())
            logger.info("Login failed: unknown e-mail")
            raise AuthenticationFailure()

        if not verify_password(password, user.password_hash):
            logger.info("Login failed: bad password for user %s", user.id)
            raise AuthenticationFailure()

        if user.inactive:
            raise ForbiddenInactive()

        return user


_auth_service: AuthService | None = None


def get_auth_service() -> AuthService:
    """Get singleton auth service instance."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service
