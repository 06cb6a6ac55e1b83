"""
Application configuration models and helpers.

Centralizes settings management so the HTTP layer, the credential store and
the upload orchestrator share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path

import os

from typing import Annotated

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


class GoogleSettings(BaseSettings):
    """Endpoints used when sending callers through the Google consent screen."""

    model_config = SettingsConfigDict(env_prefix="GOOGLE_")

    auth_base_url: AnyHttpUrl = Field(
        "https://accounts.google.com/o/oauth2/v2/auth",
        description="Google OAuth consent endpoint.",
    )
    redirect_uri: str = Field(
        "https://developers.google.com/oauthplayground",
        description="Redirect target used when the caller does not supply one.",
    )
    response_type: str = Field(
        "token",
        description="OAuth response type; the browser widget drives the implicit flow.",
    )


class OAuthSettings(BaseSettings):
    """OAuth flow configuration."""

    model_config = SettingsConfigDict(env_prefix="OAUTH_")

    scopes: Annotated[tuple[str, ...], NoDecode] = (
        "https://www.googleapis.com/auth/drive.file",
        "openid",
        "email",
    )

    @field_validator("scopes", mode="before")
    @classmethod
    def _split_scopes(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        """Support providing scopes as a comma-separated string."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(value)
        return tuple(scope.strip() for scope in value.split(",") if scope.strip())


class SessionSettings(BaseSettings):
    """Lifetime and policy of cached provider credentials."""

    model_config = SettingsConfigDict(env_prefix="SESSION_")

    ttl_minutes: int = Field(45, gt=0, description="Credential lifetime in minutes.")
    sweep_interval_seconds: int = Field(
        300,
        ge=0,
        description="Interval of the background sweep of expired records; 0 disables it.",
    )
    require_identity: bool = Field(
        True,
        description="Reject authorization requests that do not carry an identity.",
    )
    require_authorization: bool = Field(
        True,
        description="Only accept tokens for identities that started authorization.",
    )


class UploadSettings(BaseSettings):
    """Behaviour of the Drive upload transaction."""

    model_config = SettingsConfigDict(env_prefix="UPLOAD_")

    timeout_seconds: float = Field(
        120.0,
        gt=0,
        description="Deadline covering the whole upload transaction.",
    )
    fatal_share_errors: bool = Field(
        False,
        description="Fail the upload when granting access or fetching links fails.",
    )
    allow_inline_token: bool = Field(
        False,
        description="Accept an access token directly on the upload request.",
    )
    default_mime_type: str = Field("application/octet-stream")


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = SettingsConfigDict(
        extra="ignore",
        populate_by_name=True,
    )

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    host: str = Field("0.0.0.0", validation_alias="HOST")
    port: int = Field(3000, validation_alias="PORT")
    google: GoogleSettings = Field(default_factory=GoogleSettings)
    oauth: OAuthSettings = Field(default_factory=OAuthSettings)
    session: SessionSettings = Field(default_factory=SessionSettings)
    upload: UploadSettings = Field(default_factory=UploadSettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()


__all__ = [
    "AppSettings",
    "GoogleSettings",
    "OAuthSettings",
    "SessionSettings",
    "UploadSettings",
    "get_settings",
]
