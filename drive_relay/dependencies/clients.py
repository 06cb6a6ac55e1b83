"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from datetime import timedelta
from functools import lru_cache

from drive_relay.clients import GoogleDriveClient, GoogleOAuthClient
from drive_relay.core.config import get_settings
from drive_relay.services import (
    CredentialStore,
    DriveUploadService,
    InMemoryCredentialStore,
    SessionService,
)


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_credential_store() -> CredentialStore:
    """Provide the process-wide credential store."""
    settings = _settings()
    return InMemoryCredentialStore(ttl=timedelta(minutes=settings.session.ttl_minutes))


@lru_cache()
def get_google_oauth_client() -> GoogleOAuthClient:
    """Create a singleton Google OAuth client."""
    settings = _settings()
    return GoogleOAuthClient(settings.google, settings.oauth)


@lru_cache()
def get_drive_client() -> GoogleDriveClient:
    """Provide Google Drive client instance."""
    return GoogleDriveClient()


def get_session_service() -> SessionService:
    """Build the session service around the shared store."""
    settings = _settings()
    return SessionService(
        store=get_credential_store(),
        oauth_client=get_google_oauth_client(),
        session_settings=settings.session,
    )


def get_drive_upload_service() -> DriveUploadService:
    """Build the upload orchestrator using configured clients."""
    settings = _settings()
    return DriveUploadService(
        drive_client=get_drive_client(),
        upload_settings=settings.upload,
    )


__all__ = [
    "get_credential_store",
    "get_drive_client",
    "get_drive_upload_service",
    "get_google_oauth_client",
    "get_session_service",
]
