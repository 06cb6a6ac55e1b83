"""
FastAPI dependencies exposing configuration to route handlers.
"""

from fastapi import Depends

from drive_relay.core.config import AppSettings, UploadSettings, get_settings


def get_app_settings() -> AppSettings:
    """FastAPI dependency returning application settings."""
    return get_settings()


def get_upload_settings(settings: AppSettings = Depends(get_app_settings)) -> UploadSettings:
    """Upload policy for the current request, derived from the app settings."""
    return settings.upload


__all__ = ["get_app_settings", "get_upload_settings"]
