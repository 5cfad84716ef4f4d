"""Configuration settings for the accounts service."""

import os
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./accounts.db")

    # Session tokens
    TOKEN_TTL_DAYS: int = int(os.getenv("TOKEN_TTL_DAYS", "7"))
    TOKEN_SWEEP_ENABLED: bool = os.getenv("TOKEN_SWEEP_ENABLED", "true").lower() == "true"
    TOKEN_SWEEP_INTERVAL_SECONDS: int = int(os.getenv("TOKEN_SWEEP_INTERVAL_SECONDS", "3600"))

    # Passwords
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "10"))

    # Listing
    MAX_PAGE_SIZE: int = int(os.getenv("MAX_PAGE_SIZE", "10"))

    # Mail
    SMTP_HOST: str = os.getenv("SMTP_HOST", "localhost")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "8587"))
    SMTP_USERNAME: str = os.getenv("SMTP_USERNAME", "")
    SMTP_PASSWORD: str = os.getenv("SMTP_PASSWORD", "")
    SMTP_USE_TLS: bool = os.getenv("SMTP_USE_TLS", "false").lower() == "true"
    MAIL_FROM: str = os.getenv("MAIL_FROM", "My App <info@my-app.com>")
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:8080")

    # Application
    APP_ENV: str = os.getenv("APP_ENV", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    SEED_USERS: int = int(os.getenv("SEED_USERS", "0"))

    def validate(self) -> list[str]:
        """Validate settings and return list of warnings."""
        errors = []
        if self.TOKEN_TTL_DAYS <= 0:
            errors.append("TOKEN_TTL_DAYS must be positive - every session token would be expired on issue")
        if self.MAX_PAGE_SIZE <= 0:
            errors.append("MAX_PAGE_SIZE must be positive - falling back to 10")
        if self.APP_ENV == "production" and self.SMTP_HOST == "localhost":
            errors.append("SMTP_HOST points at localhost in production - activation mails will not leave the host")
        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
