"""Google Drive client wrapper."""

from __future__ import annotations

import asyncio
import io
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import Resource, build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload

from drive_relay.core.errors import DriveApiError

logger = logging.getLogger(__name__)

T = TypeVar("T")

ServiceFactory = Callable[[str], Resource]

PUBLIC_READ_PERMISSION = {"role": "reader", "type": "anyone"}


@dataclass(slots=True)
class ShareLinks:
    """Canonical links Drive reports for a file."""

    view_url: Optional[str] = None
    download_url: Optional[str] = None


def _build_service(access_token: str) -> Resource:
    credentials = Credentials(token=access_token)
    return build("drive", "v3", credentials=credentials, cache_discovery=False)


def _provider_message(exc: HttpError) -> Optional[str]:
    """Extract ``error.message`` from a Drive error payload, if present."""
    content = exc.content
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="replace")
    try:
        payload = json.loads(content or "")
    except ValueError:
        return None
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict):
        return error.get("message")
    if isinstance(error, str):
        return payload.get("error_description") or error
    return None


class GoogleDriveClient:
    """Create files, share them and read their links on a caller's Drive."""

    def __init__(self, service_factory: ServiceFactory | None = None) -> None:
        self._service_factory = service_factory or _build_service

    async def _call(self, access_token: str, operation: Callable[[Any], T]) -> T:
        def _execute() -> T:
            service = self._service_factory(access_token)
            try:
                return operation(service)
            except HttpError as exc:
                status = getattr(exc.resp, "status", None)
                raise DriveApiError(
                    _provider_message(exc), status=int(status) if status else None
                ) from exc

        return await asyncio.to_thread(_execute)

    async def create_file(
        self,
        access_token: str,
        *,
        name: str,
        content: bytes,
        mime_type: str,
        folder_id: Optional[str] = None,
    ) -> str:
        """Upload ``content`` as a new file and return its Drive identifier."""
        file_metadata: dict[str, Any] = {"name": name}
        if folder_id:
            file_metadata["parents"] = [folder_id]

        def _create(service: Any) -> str:
            media = MediaIoBaseUpload(io.BytesIO(content), mimetype=mime_type, resumable=False)
            created = (
                service.files()
                .create(body=file_metadata, media_body=media, fields="id")
                .execute()
            )
            file_id = created.get("id") if isinstance(created, dict) else None
            if not file_id:
                raise DriveApiError("Drive did not return a file identifier.")
            return file_id

        file_id = await self._call(access_token, _create)
        logger.info("Created Drive file %s (%d bytes)", file_id, len(content))
        return file_id

    async def grant_public_read(self, access_token: str, file_id: str) -> None:
        """Allow anyone with the link to read ``file_id``."""

        def _grant(service: Any) -> None:
            service.permissions().create(fileId=file_id, body=dict(PUBLIC_READ_PERMISSION)).execute()

        await self._call(access_token, _grant)

    async def get_share_links(self, access_token: str, file_id: str) -> ShareLinks:
        """Fetch the view and download links for ``file_id``."""

        def _links(service: Any) -> ShareLinks:
            metadata = (
                service.files()
                .get(fileId=file_id, fields="webViewLink,webContentLink")
                .execute()
            )
            return ShareLinks(
                view_url=metadata.get("webViewLink"),
                download_url=metadata.get("webContentLink"),
            )

        return await self._call(access_token, _links)


__all__ = ["GoogleDriveClient", "PUBLIC_READ_PERMISSION", "ServiceFactory", "ShareLinks"]
