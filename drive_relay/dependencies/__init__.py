"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_credential_store,
    get_drive_client,
    get_drive_upload_service,
    get_google_oauth_client,
    get_session_service,
)
from .config import get_app_settings, get_upload_settings

__all__ = [
    "get_app_settings",
    "get_credential_store",
    "get_drive_client",
    "get_drive_upload_service",
    "get_google_oauth_client",
    "get_session_service",
    "get_upload_settings",
]
