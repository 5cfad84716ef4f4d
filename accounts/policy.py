"""Authorization rules for user resources."""

from accounts.dependencies import AuthContext
from accounts.errors import Forbidden


def _is_owner(auth: AuthContext, user_id: int | None) -> bool:
    return auth.user_id is not None and auth.user_id == user_id


def authorize_update(auth: AuthContext, user_id: int | None) -> None:
    """Only the account owner may update it."""
    if not _is_owner(auth, user_id):
        raise Forbidden("You are not authorized to update user.")


def authorize_delete(auth: AuthContext, user_id: int | None) -> None:
    """Only the account owner may delete it."""
    if not _is_owner(auth, user_id):
        raise Forbidden("You are not authorized to delete user.")


def listing_exclusion(auth: AuthContext) -> int | None:
    """Id to leave out of user listings: callers never see themselves."""
    return auth.user_id
