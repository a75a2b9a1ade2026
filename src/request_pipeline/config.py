"""Process-wide configuration, read once from the environment.

Values come from environment variables or a ``.env`` file in the working
directory. The resulting ``Settings`` object is frozen and is handed to
``create_app()`` rather than read ad hoc.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Server, CORS, identity and logging settings."""

    # Listener
    host: str = "0.0.0.0"
    port: int = Field(default=5000, ge=1, le=65535)

    # CORS
    cors_origin: str = "http://localhost:5173"
    cors_allow_credentials: bool = True
    cors_reject_disallowed: bool = False

    # Identity provider
    auth_timeout_seconds: float = Field(default=5.0, gt=0)
    session_cookie: str = "__session"
    identity_jwt_key: str | None = None
    identity_jwt_algorithms: list[str] = ["RS256"]
    identity_jwt_issuer: str | None = None
    identity_jwt_audience: str | None = None
    identity_authorized_parties: list[str] = []
    identity_verify_url: str | None = None

    # Request handling
    body_limit_bytes: int = Field(default=100 * 1024, gt=0)
    app_router: str | None = None  # "package.module:router"

    # Logging
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"
    debug: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    return Settings()
