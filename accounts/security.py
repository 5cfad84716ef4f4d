"""Random token generation, password hashing and clock helpers."""

import secrets
from datetime import datetime, timezone

import bcrypt

from accounts.config import get_settings


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how DateTime columns are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def random_string(length: int) -> str:
    """Return `length` hex characters drawn from the OS CSPRNG."""
    return secrets.token_hex((length + 1) // 2)[:length]


def hash_password(password: str) -> str:
    rounds = get_settings().BCRYPT_ROUNDS
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plaintext password against a stored bcrypt hash."""
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
