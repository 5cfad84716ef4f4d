"""Session token store.

Tokens are opaque random strings persisted with their owning user id and the
time they were last used. A token stays valid while it keeps being used: each
successful verification pushes ``last_used_at`` forward (sliding expiration).
Tokens idle for the full TTL are rejected on use and removed by the sweeper.
"""

import hmac
import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from accounts.config import get_settings
from accounts.models.token import Token
from accounts.security import random_string, utcnow

logger = logging.getLogger("accounts.tokens")

TOKEN_LENGTH = 32


class AuthFailure(Exception):
    """A presented session token could not be resolved to a user."""


class TokenNotFound(AuthFailure):
    pass


class TokenExpired(AuthFailure):
    pass


class DuplicateTokenError(RuntimeError):
    """The database rejected a freshly generated token as a duplicate key."""


class TokenStore:
    """Issues, verifies, touches and deletes session tokens."""

    def __init__(self, ttl: timedelta | None = None, clock: Callable[[], datetime] = utcnow) -> None:
        if ttl is None:
            ttl = timedelta(days=get_settings().TOKEN_TTL_DAYS)
        self.ttl = ttl
        self.clock = clock

    def is_expired(self, last_used_at: datetime, now: datetime) -> bool:
        return now - last_used_at >= self.ttl

    def issue(self, db: Session, user_id: int) -> str:
        """Create and persist a new token for the user."""
        token = random_string(TOKEN_LENGTH)
        db.add(Token(token=token, user_id=user_id, last_used_at=self.clock()))
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.error("Token insert rejected for user %s", user_id)
            raise DuplicateTokenError("Generated session token collided with an existing one") from e
        return token

    def verify_and_touch(self, db: Session, token: str) -> int:
        """Resolve a token to its user id, refreshing its last-used time.

        Raises TokenNotFound or TokenExpired. The refreshed timestamp is
        committed before the user id is returned.
        """
        record = db.get(Token, token)
        if record is None or not hmac.compare_digest(record.token.encode("utf-8"), token.encode("utf-8")):
            raise TokenNotFound(token)

        now = self.clock()
        if self.is_expired(record.last_used_at, now):
            raise TokenExpired(token)

        record.last_used_at = now
        db.commit()
        return record.user_id

    def revoke(self, db: Session, token: str) -> None:
        """Delete a token. Unknown tokens are ignored."""
        db.query(Token).filter(Token.token == token).delete(synchronize_session=False)
        db.commit()

    def revoke_all_for_user(self, db: Session, user_id: int, commit: bool = True) -> int:
        """Delete every token owned by a user. Returns the number removed."""
        removed = db.query(Token).filter(Token.user_id == user_id).delete(synchronize_session=False)
        if commit:
            db.commit()
        return removed

    def sweep_expired(self, db: Session) -> int:
        """Delete all tokens idle for at least the TTL in one statement."""
        cutoff = self.clock() - self.ttl
        removed = db.query(Token).filter(Token.last_used_at <= cutoff).delete(synchronize_session=False)
        db.commit()
        return removed


_token_store: TokenStore | None = None


def get_token_store() -> TokenStore:
    """Get singleton token store instance."""
    global _token_store
    if _token_store is None:
        _token_store = TokenStore()
    return _token_store
