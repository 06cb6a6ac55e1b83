"""Expose constructed client wrappers."""

from .google_auth import GoogleOAuthClient
from .google_drive import GoogleDriveClient, ShareLinks

__all__ = [
    "GoogleDriveClient",
    "GoogleOAuthClient",
    "ShareLinks",
]
