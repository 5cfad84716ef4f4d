"""Field validation for account payloads.

Each check returns a field -> message map; an empty map means the input is valid.
"""

import re

from pydantic import EmailStr, TypeAdapter, ValidationError
from sqlalchemy.orm import Session

from accounts.models.user import User

USERNAME_MIN = 4
USERNAME_MAX = 32
PASSWORD_MIN = 6

_EMAIL_ADAPTER = TypeAdapter(EmailStr)
_UPPERCASE_RE = re.compile(r"[A-Z]")
_LOWERCASE_RE = re.compile(r"[a-z]")
_NUMBER_RE = re.compile(r"[0-9]")


def is_valid_email(email: str | None) -> bool:
    if not email:
        return False
    try:
        _EMAIL_ADAPTER.validate_python(email)
    except ValidationError:
        return False
    return True


def username_error(username: str | None) -> str | None:
    if username is None:
        return "Username cannot be null."
    if not USERNAME_MIN <= len(username) <= USERNAME_MAX:
        return f"Must have min {USERNAME_MIN} and max {USERNAME_MAX} characters."
    return None


def email_error(email: str | None) -> str | None:
    if email is None:
        return "E-mail cannot be null."
    if not is_valid_email(email):
        return "E-mail is not valid."
    return None


def password_error(password: str | None) -> str | None:
    if password is None:
        return "Password cannot be null."
    if len(password) < PASSWORD_MIN:
        return f"Password must be at least {PASSWORD_MIN} characters."
    if not (_UPPERCASE_RE.search(password) and _LOWERCASE_RE.search(password) and _NUMBER_RE.search(password)):
        return "Password must have at least 1 uppercase, 1 lowercase letter and 1 number."
    return None


def _collect(**checks: str | None) -> dict[str, str]:
    return {field: message for field, message in checks.items() if message}


def validate_registration(
    db: Session, username: str | None, email: str | None, password: str | None
) -> dict[str, str]:
    errors = _collect(username=username_error(username), email=email_error(email), password=password_error(password))
    if "email" not in errors and db.query(User.id).filter(User.email == email).first() is not None:
        errors["email"] = "E-mail already in use."
    return errors


def validate_user_update(username: str | None) -> dict[str, str]:
    return _collect(username=username_error(username))


def validate_password_reset_request(email: str | None) -> dict[str, str]:
    return _collect(email=None if is_valid_email(email) else "E-mail is not valid.")


def validate_password_update(password: str | None) -> dict[str, str]:
    return _collect(password=password_error(password))
