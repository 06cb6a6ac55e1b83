"""Service layer exports."""

from .credential_store import CredentialRecord, CredentialStore, InMemoryCredentialStore
from .drive_upload import (
    DriveUploadService,
    UploadRequest,
    UploadResult,
    parse_visibility_flag,
)
from .sessions import SessionService

__all__ = [
    "CredentialRecord",
    "CredentialStore",
    "DriveUploadService",
    "InMemoryCredentialStore",
    "SessionService",
    "UploadRequest",
    "UploadResult",
    "parse_visibility_flag",
]
