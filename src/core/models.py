"""Domain models for the file store."""
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============ Internal Domain Models ============


class StoredObject(CamelModel):
    """One stored file plus whatever its metadata sidecar contributed."""

    key: str
    size: int = Field(ge=0)
    last_modified: datetime
    content_type: str = DEFAULT_CONTENT_TYPE
    original_name: str


class ObjectMetadata(CamelModel):
    """Metadata sidecar record, written as ``metadata/<key>.json``."""

    original_name: str
    content_type: str
    size: int
    uploaded_at: str


# ============ Request/Response Models ============


class UploadedFile(CamelModel):
    """Description of a freshly uploaded object."""

    key: str
    location: str
    bucket: str
    original_name: str
    size: int
    content_type: str
    uploaded_at: str


class UploadResponse(CamelModel):
    """Response after a single upload."""

    success: bool = True
    message: str
    file: UploadedFile


class MultiUploadResponse(CamelModel):
    """Response after a multi-file upload."""

    success: bool = True
    message: str
    files: list[UploadedFile]


class FileListResponse(CamelModel):
    """Listing of stored objects, newest first."""

    success: bool = True
    count: int
    files: list[StoredObject]


class FileDetail(StoredObject):
    """Stored object with its metadata block."""

    metadata: dict[str, Any] = Field(default_factory=dict)


class FileDetailResponse(CamelModel):
    """Single object details."""

    success: bool = True
    file: FileDetail


class PreviewResponse(CamelModel):
    """Preview URL for a stored object. Local URLs never expire."""

    success: bool = True
    url: str
    expires_in: int | None = None


class DeleteResponse(CamelModel):
    """Response after deleting one object."""

    success: bool = True
    message: str
    key: str


class BatchDeleteResponse(CamelModel):
    """Response after a batch delete. Only the success count is reported."""

    success: bool = True
    message: str
    count: int
