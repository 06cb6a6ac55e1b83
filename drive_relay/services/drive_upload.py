"""
Upload transaction against Google Drive.

A transaction creates the file, then, when public visibility was requested,
grants "anyone with the link" read access and fetches the file's share
links. Only file creation is mandatory: the created file is never rolled
back, so a returned ``file_id`` is authoritative even when sharing fails.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

from drive_relay.clients.google_drive import GoogleDriveClient, ShareLinks
from drive_relay.core.config import UploadSettings
from drive_relay.core.errors import DriveApiError, InvalidRequestError, UploadFailedError
from drive_relay.services.credential_store import CredentialRecord

logger = logging.getLogger(__name__)

GENERIC_UPLOAD_ERROR = "Upload failed."


def parse_visibility_flag(value: Any) -> bool:
    """Normalize an ``isPublic`` field: only ``True`` or the string ``"true"`` count."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip() == "true"
    return False


@dataclass(slots=True)
class UploadRequest:
    """Payload and options for one upload."""

    content: bytes
    file_name: str
    mime_type: Optional[str] = None
    folder_id: Optional[str] = None
    make_public: bool = False


@dataclass(slots=True)
class UploadResult:
    """Outcome of an upload transaction."""

    file_id: str
    visibility: str
    view_url: Optional[str] = None
    download_url: Optional[str] = None

    @property
    def is_public(self) -> bool:
        return self.visibility == "public"


class DriveUploadService:
    """Drive the create, share and link-fetch steps for an authorized caller."""

    def __init__(self, drive_client: GoogleDriveClient, upload_settings: UploadSettings) -> None:
        self._drive = drive_client
        self._settings = upload_settings

    async def upload(self, credential: CredentialRecord, request: UploadRequest) -> UploadResult:
        """Create the file, then share it within whatever time the deadline leaves.

        Only file creation can time the transaction out. Once Drive has returned
        an id, a slow or failing share step is handled by the share policy.
        """
        if not request.content:
            raise InvalidRequestError("No file uploaded")
        if not credential.is_active:
            raise InvalidRequestError("Credential has no access token.")

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._settings.timeout_seconds
        try:
            file_id = await asyncio.wait_for(
                self._create(credential.bearer_token, request),
                timeout=self._settings.timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            raise UploadFailedError("Upload timed out.") from exc

        if not request.make_public:
            return UploadResult(file_id=file_id, visibility="private")

        try:
            links = await asyncio.wait_for(
                self._share(credential.bearer_token, file_id),
                timeout=max(deadline - loop.time(), 0.0),
            )
        except asyncio.TimeoutError as exc:
            self._share_failed("share", file_id, exc)
            links = ShareLinks()
        return UploadResult(
            file_id=file_id,
            visibility="public",
            view_url=links.view_url,
            download_url=links.download_url,
        )

    async def _create(self, access_token: str, request: UploadRequest) -> str:
        try:
            return await self._drive.create_file(
                access_token,
                name=request.file_name,
                content=request.content,
                mime_type=request.mime_type or self._settings.default_mime_type,
                folder_id=request.folder_id,
            )
        except DriveApiError as exc:
            logger.warning("Drive rejected upload of %s: %s", request.file_name, exc)
            raise UploadFailedError(exc.message or GENERIC_UPLOAD_ERROR) from exc

    async def _share(self, access_token: str, file_id: str) -> ShareLinks:
        # The file already exists here, so transport errors fall under the share policy too.
        try:
            await self._drive.grant_public_read(access_token, file_id)
        except Exception as exc:
            self._share_failed("grant public access to", file_id, exc)

        try:
            return await self._drive.get_share_links(access_token, file_id)
        except Exception as exc:
            self._share_failed("fetch links for", file_id, exc)
        return ShareLinks()

    def _share_failed(self, action: str, file_id: str, exc: Exception) -> None:
        logger.warning("Could not %s Drive file %s: %r", action, file_id, exc)
        if self._settings.fatal_share_errors:
            message = getattr(exc, "message", None) or str(exc)
            raise UploadFailedError(message or f"Could not {action} file {file_id}.") from exc


__all__ = [
    "DriveUploadService",
    "GENERIC_UPLOAD_ERROR",
    "UploadRequest",
    "UploadResult",
    "parse_visibility_flag",
]
