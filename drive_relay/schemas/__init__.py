"""Public schema exports."""

from .auth import (
    AuthorizationRequest,
    AuthorizationResponse,
    LogoutRequest,
    LogoutResponse,
    TokenResponse,
    TokenSubmission,
)
from .upload import ErrorResponse, UploadResponse

__all__ = [
    "AuthorizationRequest",
    "AuthorizationResponse",
    "ErrorResponse",
    "LogoutRequest",
    "LogoutResponse",
    "TokenResponse",
    "TokenSubmission",
    "UploadResponse",
]
