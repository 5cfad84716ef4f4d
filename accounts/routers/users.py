"""User API endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from accounts.database import get_db
from accounts.dependencies import AuthContext, Pagination, get_auth_context, get_pagination, parse_user_id
from accounts.errors import NotFound, ValidationError
from accounts.policy import authorize_delete, authorize_update, listing_exclusion
from accounts.schemas.user import (
    MessageResponse,
    PasswordResetRequest,
    PasswordUpdateRequest,
    RegisterRequest,
    UserPageResponse,
    UserResponse,
    UserUpdateRequest,
)
from accounts.services.account_tokens import (
    consume_activation_token,
    consume_password_reset_token,
    find_password_reset_user,
)
from accounts.services.users import get_user_service
from accounts.validation import (
    validate_password_reset_request,
    validate_password_update,
    validate_registration,
    validate_user_update,
)

router = APIRouter(prefix="/api/1.0", tags=["Users"])


@router.post("/users", response_model=MessageResponse)
def register(body: RegisterRequest, db: Session = Depends(get_db)) -> MessageResponse:
    """Create an inactive account and e-mail its activation link."""
    errors = validate_registration(db, body.username, body.email, body.password)
    if errors:
        raise ValidationError(errors)

    get_user_service().register(db, body.username, body.email, body.password)  # type: ignore[arg-type]
    return MessageResponse(message="User created.")


@router.post("/users/token/{token}", response_model=MessageResponse)
def activate(token: str, db: Session = Depends(get_db)) -> MessageResponse:
    """Activate an account with the token from its activation e-mail."""
    consume_activation_token(db, token)
    return MessageResponse(message="Account is activated.")


@router.get("/users", response_model=UserPageResponse)
def list_users(
    pagination: Pagination = Depends(get_pagination),
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> UserPageResponse:
    """List active users. The caller is left out of their own listing."""
    result = get_user_service().get_users(db, pagination.page, pagination.size, exclude_id=listing_exclusion(auth))
    return UserPageResponse(
        content=[UserResponse.model_validate(u) for u in result["content"]],
        page=result["page"],
        size=result["size"],
        totalPages=result["totalPages"],
    )


@router.get("/users/{user_id}", response_model=UserResponse)
def get_user(user_id: str, db: Session = Depends(get_db)) -> UserResponse:
    """Get a single active user."""
    parsed_id = parse_user_id(user_id)
    if parsed_id is None:
        raise NotFound("User not found.")
    return UserResponse.model_validate(get_user_service().get_user(db, parsed_id))


@router.put("/users/{user_id}", response_model=UserResponse)
def update_user(
    user_id: str,
    body: UserUpdateRequest | None = None,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> UserResponse:
    """Update the caller's own account."""
    parsed_id = parse_user_id(user_id)
    authorize_update(auth, parsed_id)

    username = body.username if body else None
    errors = validate_user_update(username)
    if errors:
        raise ValidationError(errors)

    user = get_user_service().update_user(db, parsed_id, username)  # type: ignore[arg-type]
    return UserResponse.model_validate(user)


@router.delete("/users/{user_id}")
def delete_user(
    user_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> dict:
    """Delete the caller's own account and its sessions."""
    parsed_id = parse_user_id(user_id)
    authorize_delete(auth, parsed_id)
    get_user_service().delete_user(db, parsed_id)  # type: ignore[arg-type]
    return {}


@router.post("/user/password", response_model=MessageResponse)
def request_password_reset(body: PasswordResetRequest, db: Session = Depends(get_db)) -> MessageResponse:
    """E-mail a password reset token."""
    errors = validate_password_reset_request(body.email)
    if errors:
        raise ValidationError(errors)

    get_user_service().request_password_reset(db, body.email)  # type: ignore[arg-type]
    return MessageResponse(message="Check your e-mail for resetting your password.")


@router.put("/user/password")
def update_password(body: PasswordUpdateRequest, db: Session = Depends(get_db)) -> dict:
    """Set a new password using an e-mailed reset token."""
    find_password_reset_user(db, body.password_reset_token)

    errors = validate_password_update(body.password)
    if errors:
        raise ValidationError(errors)

    consume_password_reset_token(db, body.password_reset_token, body.password)  # type: ignore[arg-type]
    return {}
