"""Authentication API endpoints."""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session

from accounts.database import get_db
from accounts.dependencies import extract_bearer_token
from accounts.errors import AuthenticationFailure
from accounts.schemas.auth import LoginRequest, LoginResponse
from accounts.services.auth import get_auth_service
from accounts.services.token_store import get_token_store

logger = logging.getLogger("accounts.auth")

router = APIRouter(prefix="/api/1.0", tags=["Authentication"])


def parse_credentials(body: Any) -> LoginRequest:
    """Read `{email, password}` from a login body. A body of any other shape is a failed login."""
    try:
        return LoginRequest.model_validate(body if body is not None else {})
    except ValidationError as e:
        logger.info("Login failed: malformed credentials body")
        raise AuthenticationFailure() from e


@router.post("/auth", response_model=LoginResponse)
def login(body: Any = Body(default=None), db: Session = Depends(get_db)) -> LoginResponse:
    """Check credentials and issue a session token."""
    credentials = parse_credentials(body)
    user = get_auth_service().login(db, credentials.email, credentials.password)
    token = get_token_store().issue(db, user.id)
    return LoginResponse(id=user.id, username=user.username, token=token)


@router.post("/logout")
def logout(request: Request, db: Session = Depends(get_db)) -> dict:
    """Revoke the presented bearer token. Always succeeds."""
    token = extract_bearer_token(request)
    if token:
        get_token_store().revoke(db, token)
    return {}
