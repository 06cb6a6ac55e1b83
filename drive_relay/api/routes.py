"""
FastAPI routes for the Drive relay.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, Any

from fastapi import APIRouter, Depends, File, Form, UploadFile

from drive_relay.core.errors import InvalidRequestError
from drive_relay.dependencies import (
    get_drive_upload_service,
    get_session_service,
    get_upload_settings,
)
from drive_relay.schemas import (
    AuthorizationRequest,
    AuthorizationResponse,
    ErrorResponse,
    LogoutRequest,
    LogoutResponse,
    TokenResponse,
    TokenSubmission,
    UploadResponse,
)
from drive_relay.services import (
    CredentialRecord,
    UploadRequest,
    parse_visibility_flag,
)

router = APIRouter()
logger = logging.getLogger(__name__)

_DEFAULT_FILE_NAME = "upload"


@router.get("/", status_code=HTTPStatus.OK)
async def root() -> dict:
    """Liveness banner."""
    return {"status": "ok", "message": "Drive relay is live."}


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.post("/auth", response_model=AuthorizationResponse, status_code=HTTPStatus.OK)
async def start_authorization(
    payload: AuthorizationRequest,
    sessions: Annotated[Any, Depends(get_session_service)],
) -> AuthorizationResponse:
    """Return the Google consent URL and remember the pending authorization."""
    auth_url = sessions.begin_authorization(
        payload.identity, payload.client_id, redirect_uri=payload.redirect_uri
    )
    return AuthorizationResponse(auth_url=auth_url)


@router.post("/token", response_model=TokenResponse, status_code=HTTPStatus.OK)
async def save_token(
    payload: TokenSubmission,
    sessions: Annotated[Any, Depends(get_session_service)],
) -> TokenResponse:
    """Cache the access token obtained from the consent flow."""
    sessions.save_credential(payload.identity, payload.bearer_token)
    return TokenResponse(
        message="Access token saved.",
        expires_in_minutes=sessions.expires_in_minutes,
    )


@router.post(
    "/upload",
    response_model=UploadResponse,
    response_model_exclude_none=True,
    responses={
        HTTPStatus.BAD_REQUEST: {"model": ErrorResponse},
        HTTPStatus.UNAUTHORIZED: {"model": ErrorResponse},
        HTTPStatus.INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
    status_code=HTTPStatus.OK,
)
async def upload_file(
    sessions: Annotated[Any, Depends(get_session_service)],
    uploader: Annotated[Any, Depends(get_drive_upload_service)],
    upload_settings: Annotated[Any, Depends(get_upload_settings)],
    file: Annotated[UploadFile | None, File(description="File to upload.")] = None,
    identity: Annotated[str | None, Form()] = None,
    folder_id: Annotated[str | None, Form(alias="folderId")] = None,
    is_public: Annotated[str | None, Form(alias="isPublic")] = None,
    access_token: Annotated[str | None, Form(alias="accessToken")] = None,
) -> UploadResponse:
    """Upload a file to the caller's Drive, optionally making it public."""
    if file is None:
        raise InvalidRequestError("No file uploaded")
    content = await file.read()
    if not content:
        raise InvalidRequestError("No file uploaded")

    if access_token and upload_settings.allow_inline_token:
        credential = CredentialRecord(identity=identity or "", bearer_token=access_token)
    else:
        credential = sessions.require_credential(identity)

    request = UploadRequest(
        content=content,
        file_name=file.filename or _DEFAULT_FILE_NAME,
        mime_type=file.content_type,
        folder_id=folder_id or None,
        make_public=parse_visibility_flag(is_public),
    )
    result = await uploader.upload(credential, request)
    logger.info(
        "Uploaded %s for %s as %s (%s)",
        request.file_name,
        credential.identity or "inline token",
        result.file_id,
        result.visibility,
    )
    return UploadResponse.from_result(result)


@router.post("/logout", response_model=LogoutResponse, status_code=HTTPStatus.OK)
async def logout(
    payload: LogoutRequest,
    sessions: Annotated[Any, Depends(get_session_service)],
) -> LogoutResponse:
    """Forget the cached credential for an identity."""
    sessions.end_session(payload.identity)
    return LogoutResponse(message="Session cleared.")


__all__ = ["router"]
