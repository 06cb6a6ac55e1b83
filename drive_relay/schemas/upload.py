"""Schemas describing upload responses."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from drive_relay.services.drive_upload import UploadResult


class UploadResponse(BaseModel):
    """Result of a Drive upload; links are only present for public files."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    file_id: str
    view_url: Optional[str] = None
    download_url: Optional[str] = None
    visibility: str

    @classmethod
    def from_result(cls, result: UploadResult) -> "UploadResponse":
        return cls(
            file_id=result.file_id,
            view_url=result.view_url,
            download_url=result.download_url,
            visibility=result.visibility,
        )


class ErrorResponse(BaseModel):
    success: bool = False
    error: str


__all__ = ["ErrorResponse", "UploadResponse"]
