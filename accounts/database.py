"""Engine and session factory for the accounts database.

Request handlers get a session through `get_db`. The token sweeper and startup
seeding open their own sessions from `SessionLocal`.
"""

from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from accounts.config import get_settings


def engine_options(url: str, echo: bool = False) -> dict:
    """Keyword arguments for `create_engine`, shared with the migration environment."""
    if url.startswith("sqlite"):
        # Sessions are used from the sweeper's worker thread as well as request threads.
        return {"echo": echo, "connect_args": {"check_same_thread": False}}
    return {"echo": echo, "pool_pre_ping": True}


settings = get_settings()
engine = create_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL, echo=settings.DEBUG))
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


class Base(DeclarativeBase):
    """Declarative base for the user and token tables."""


def get_db() -> Generator[Session, None, None]:
    """Yield a request-scoped session, closed once the response is sent."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
