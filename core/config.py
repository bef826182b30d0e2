"""
Application configuration using Pydantic settings.

Usage:
    from core.config import get_settings
    settings = get_settings()
"""

import os
import warnings
from functools import lru_cache
from typing import List, Optional

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Unified application settings loaded from environment variables and .env file.

    Required for production:
        - JWT_SECRET_KEY / SESSION_SECRET_KEY (min 32 chars)
        - GITHUB_CLIENT_ID / GITHUB_CLIENT_SECRET (for OAuth)
        - GITHUB_SPONSORABLE_LOGIN (account whose sponsors are tracked)
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App settings
    app_name: str = "Sponsors Portal"
    debug: bool = Field(default=False)
    env: str = Field(default="development", validation_alias="ENV")
    home_url: str = Field(default="/", validation_alias="HOME_URL")

    # Database
    database_url: str = Field(default="sqlite:///sponsors_portal.db", validation_alias="DATABASE_URL")
    db_pool_size: int = Field(default=10, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=20, validation_alias="DB_MAX_OVERFLOW")
    db_pool_pre_ping: bool = Field(default=True, validation_alias="DB_POOL_PRE_PING")

    # GitHub OAuth
    github_client_id: str = Field(default="", validation_alias="GITHUB_CLIENT_ID")
    github_client_secret: str = Field(default="", validation_alias="GITHUB_CLIENT_SECRET")
    github_redirect_uri: Optional[AnyHttpUrl] = Field(default=None, validation_alias="GITHUB_REDIRECT_URI")
    github_scope: str = Field(default="read:user read:org", validation_alias="GITHUB_SCOPE")

    # GitHub Sponsors
    github_sponsorable_login: str = Field(default="", validation_alias="GITHUB_SPONSORABLE_LOGIN")
    github_api_timeout: int = Field(default=30, validation_alias="GITHUB_API_TIMEOUT")

    # JWT / Authentication
    jwt_secret_key: str = Field(default="CHANGE_ME", validation_alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=60 * 24 * 14)

    # Sessions (OAuth state + intended URL)
    session_secret_key: str = Field(default="CHANGE_ME", validation_alias="SESSION_SECRET_KEY")
    session_max_age: int = Field(default=60 * 60 * 2, validation_alias="SESSION_MAX_AGE")

    # Token encryption (GitHub access tokens at rest)
    # Generate with: python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())"
    token_encryption_key: Optional[str] = Field(default=None, validation_alias="TOKEN_ENCRYPTION_KEY")
    require_encryption: bool = Field(default=False, validation_alias="REQUIRE_ENCRYPTION")

    # Celery
    celery_broker_url: str = Field(default="redis://localhost:6379/1", validation_alias="CELERY_BROKER_URL")
    celery_result_backend: str = Field(default="redis://localhost:6379/2", validation_alias="CELERY_RESULT_BACKEND")

    # Scheduler
    enable_scheduler: bool = Field(default=False, validation_alias="ENABLE_SCHEDULER")
    sponsor_sync_hour: int = Field(default=3, ge=0, le=23, validation_alias="SPONSOR_SYNC_HOUR")

    @field_validator("jwt_secret_key", "session_secret_key")
    @classmethod
    def validate_secret(cls, v: str) -> str:
        """Validate signing secrets - warns in dev, errors in production."""
        env = os.getenv("ENV", "development")
        is_production = env.lower() in ("production", "prod")

        forbidden_values = [
            "CHANGE_ME", "changeme", "secret", "your-secret-key",
            "supersecret", "development", "test",
        ]

        is_forbidden = v.lower() in [fv.lower() for fv in forbidden_values]
        is_too_short = len(v) < 32

        if is_production:
            if is_forbidden:
                raise ValueError(
                    f"Signing secret cannot be a default value ('{v}') in production. "
                    "Generate a secure key with: python -c \"import secrets; print(secrets.token_urlsafe(48))\""
                )
            if is_too_short:
                raise ValueError(
                    f"Signing secret must be at least 32 characters in production (got {len(v)})."
                )
        elif is_forbidden:
            warnings.warn(
                f"Signing secret is set to a default value ('{v}'). "
                "This is insecure - set a proper key for production.",
                UserWarning,
                stacklevel=2,
            )

        return v

    @property
    def is_production(self) -> bool:
        return self.env.lower() in ("production", "prod")

    @property
    def github_scopes(self) -> List[str]:
        """Parse OAuth scopes from a space or comma separated string."""
        return [scope for scope in self.github_scope.replace(",", " ").split() if scope]

    def validate_production_config(self) -> tuple[List[str], List[str]]:
        """
        Validate configuration for production deployment.

        Returns:
            Tuple of (errors, warnings) - errors are fatal, warnings are advisory
        """
        errors = []
        warnings_ = []

        if self.jwt_secret_key == "CHANGE_ME":
            errors.append("JWT_SECRET_KEY must be set for production")
        if self.session_secret_key == "CHANGE_ME":
            errors.append("SESSION_SECRET_KEY must be set for production")

        if not self.github_client_id:
            errors.append("GITHUB_CLIENT_ID is required for OAuth")
        if not self.github_client_secret:
            errors.append("GITHUB_CLIENT_SECRET is required for OAuth")
        if not self.github_sponsorable_login:
            errors.append("GITHUB_SPONSORABLE_LOGIN is required to check sponsorships")

        if not self.token_encryption_key:
            warnings_.append(
                "TOKEN_ENCRYPTION_KEY not set - GitHub access tokens will be stored "
                "in plaintext. Set this key to encrypt tokens at rest."
            )

        return errors, warnings_


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


__all__ = ["Settings", "get_settings"]
