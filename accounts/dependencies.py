"""Request-scoped dependencies: bearer-token authentication and pagination."""

import logging
from dataclasses import dataclass

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from accounts.config import get_settings
from accounts.database import get_db
from accounts.services.token_store import AuthFailure, get_token_store

logger = logging.getLogger("accounts.auth")

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class AuthContext:
    """Authenticated principal for the current request, if any."""

    user_id: int | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


ANONYMOUS = AuthContext()


def extract_bearer_token(request: Request) -> str | None:
    """Return the token from an `Authorization: Bearer <token>` header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith(BEARER_PREFIX):
        return None
    token = auth_header[len(BEARER_PREFIX) :].strip()
    return token or None


def get_auth_context(request: Request, db: Session = Depends(get_db)) -> AuthContext:
    """Resolve the bearer token to a principal. Never raises on bad tokens.

    Routes decide for themselves whether an anonymous context is acceptable.
    """
    token = extract_bearer_token(request)
    if token is None:
        return ANONYMOUS

    try:
        user_id = get_token_store().verify_and_touch(db, token)
    except AuthFailure as e:
        logger.debug("Bearer token rejected on %s: %s", request.url.path, type(e).__name__)
        return ANONYMOUS

    return AuthContext(user_id=user_id)


@dataclass(frozen=True)
class Pagination:
    page: int
    size: int


def _parse_int(raw: str | None) -> int | None:
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


MAX_SQL_INTEGER = 2**63 - 1


def parse_user_id(raw: str) -> int | None:
    """Parse a `{user_id}` path segment. Anything that cannot name a stored row is None."""
    user_id = _parse_int(raw)
    if user_id is None or not 0 < user_id <= MAX_SQL_INTEGER:
        return None
    return user_id


def get_pagination(page: str | None = None, size: str | None = None) -> Pagination:
    """Clamp `page` and `size` query parameters.

    A missing, non-numeric or negative page becomes 0. A size that is missing,
    non-numeric, not positive or above the configured maximum becomes the maximum.
    """
    max_size = get_settings().MAX_PAGE_SIZE
    if max_size <= 0:
        max_size = 10

    page_number = _parse_int(page)
    if page_number is None or page_number < 0:
        page_number = 0

    page_size = _parse_int(size)
    if page_size is None or page_size <= 0 or page_size > max_size:
        page_size = max_size

    return Pagination(page=page_number, size=page_size)
