"""Object storage endpoints: upload, list, inspect, download, delete."""
import json
from urllib.parse import quote

from fastapi import APIRouter, File, Request, Response, UploadFile

from src.api.deps import FileStoreDep, SettingsDep
from src.core.config import Settings
from src.core.exceptions import (
    InvalidKeyError,
    InvalidRequestError,
    ObjectNotFoundError,
    StorageError,
    UploadTooLargeError,
)
from src.core.logging import get_logger
from src.core.models import (
    DEFAULT_CONTENT_TYPE,
    BatchDeleteResponse,
    DeleteResponse,
    FileDetail,
    FileDetailResponse,
    FileListResponse,
    MultiUploadResponse,
    PreviewResponse,
    StoredObject,
    UploadedFile,
    UploadResponse,
)
from src.storage.local import LocalStorage
from src.storage.metadata import utc_timestamp

logger = get_logger(__name__)

router = APIRouter()


def file_location(settings: Settings, key: str) -> str:
    """API path of a stored object."""
    return f"{settings.api_prefix}/storage/files/{quote(key, safe='')}"


def content_disposition(filename: str) -> str:
    """Attachment header value, RFC 5987 encoded for non-ASCII names."""
    quoted = quote(filename)
    if quoted != filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'


async def require_object(store: LocalStorage, key: str) -> StoredObject:
    """Get object info or fail with 404."""
    info = await store.get_file_info(key)
    if info is None:
        raise ObjectNotFoundError("File not found", details={"key": key})
    return info


async def require_content(store: LocalStorage, key: str) -> bytes:
    """Read object bytes or fail with 500."""
    content = await store.read_file(key)
    if content is None:
        # Deleted between stat and read, or unreadable
        logger.error("Failed to read file", key=key)
        raise StorageError("Failed to read file", details={"key": key})
    return content


async def store_upload(
    file: UploadFile,
    settings: Settings,
    store: LocalStorage,
) -> UploadedFile | None:
    """Persist one uploaded file and its metadata.

    Returns None if the file bytes could not be written. A failed metadata
    write is logged and otherwise ignored; reads fall back to defaults.
    """
    content = await file.read()
    size = len(content)
    if size > settings.max_upload_size_bytes:
        raise UploadTooLargeError(size, settings.max_upload_size_bytes)

    filename = file.filename or "file"
    content_type = file.content_type or DEFAULT_CONTENT_TYPE

    key = await store.save_file(filename, content, content_type)
    if key is None:
        logger.error("Failed to save file", filename=filename, size=size)
        return None

    uploaded_at = utc_timestamp()
    if not await store.save_metadata(key, filename, content_type, size, uploaded_at):
        logger.warning("Failed to save metadata", key=key)

    logger.info("File uploaded", key=key, size=size, content_type=content_type)

    return UploadedFile(
        key=key,
        location=file_location(settings, key),
        bucket=settings.bucket_name,
        original_name=filename,
        size=size,
        content_type=content_type,
        uploaded_at=uploaded_at,
    )


@router.post("/upload", response_model=UploadResponse)
async def upload_file(
    settings: SettingsDep,
    store: FileStoreDep,
    file: UploadFile | None = File(None),
) -> UploadResponse:
    """Upload a single file from the ``file`` form field."""
    if file is None:
        raise InvalidRequestError("No file uploaded")

    uploaded = await store_upload(file, settings, store)
    if uploaded is None:
        raise StorageError("Failed to save file")

    return UploadResponse(message="File uploaded successfully", file=uploaded)


@router.post("/upload-multiple", response_model=MultiUploadResponse)
async def upload_multiple(
    settings: SettingsDep,
    store: FileStoreDep,
    files: list[UploadFile] | None = File(None),
) -> MultiUploadResponse:
    """Upload several files from the ``files`` form field.

    Files that fail to save are left out of the response.
    """
    if not files:
        raise InvalidRequestError("No files uploaded")
    if len(files) > settings.max_upload_files:
        raise InvalidRequestError(
            f"At most {settings.max_upload_files} files per request",
            details={"received": len(files)},
        )

    uploaded = []
    for file in files:
        result = await store_upload(file, settings, store)
        if result is not None:
            uploaded.append(result)

    return MultiUploadResponse(
        message=f"{len(uploaded)} file(s) uploaded successfully",
        files=uploaded,
    )


@router.get("/files", response_model=FileListResponse)
async def list_files(store: FileStoreDep) -> FileListResponse:
    """List all stored objects, newest first."""
    files = await store.list_files()
    return FileListResponse(count=len(files), files=files)


@router.get("/files/{key}/view", name="view_file")
async def view_file(key: str, store: FileStoreDep) -> Response:
    """Serve object bytes inline with their stored content type."""
    info = await require_object(store, key)
    content = await require_content(store, key)
    return Response(content=content, media_type=info.content_type)


@router.get("/files/{key}", response_model=FileDetailResponse)
async def get_file(key: str, store: FileStoreDep) -> FileDetailResponse:
    """Get details for one stored object."""
    info = await require_object(store, key)
    detail = FileDetail(
        **info.model_dump(),
        metadata={"originalName": info.original_name},
    )
    return FileDetailResponse(file=detail)


@router.get("/download/{key}")
async def download_file(key: str, store: FileStoreDep) -> Response:
    """Serve object bytes as an attachment named after the original file."""
    info = await require_object(store, key)
    content = await require_content(store, key)
    return Response(
        content=content,
        media_type=info.content_type,
        headers={"Content-Disposition": content_disposition(info.original_name)},
    )


@router.get("/preview/{key}", response_model=PreviewResponse)
async def preview_file(
    key: str,
    request: Request,
    settings: SettingsDep,
    store: FileStoreDep,
) -> PreviewResponse:
    """Get an absolute URL that renders the object inline."""
    await require_object(store, key)
    base_url = str(request.base_url).rstrip("/")
    return PreviewResponse(url=f"{base_url}{file_location(settings, key)}/view")


@router.delete("/files/{key}", response_model=DeleteResponse)
async def delete_file(key: str, store: FileStoreDep) -> DeleteResponse:
    """Delete one stored object."""
    await require_object(store, key)

    if not await store.delete_file(key):
        logger.error("Failed to delete file", key=key)
        raise StorageError("Failed to delete file", details={"key": key})

    logger.info("File deleted", key=key)
    return DeleteResponse(message="File deleted successfully", key=key)


@router.delete("/files", response_model=BatchDeleteResponse)
async def delete_files(request: Request, store: FileStoreDep) -> BatchDeleteResponse:
    """Delete every key in the ``{"keys": [...]}`` body.

    Missing and invalid keys are skipped; only the success count is reported.
    """
    raw = await request.body()
    try:
        body = json.loads(raw) if raw else {}
    except ValueError:
        raise InvalidRequestError("Invalid JSON") from None

    keys = body.get("keys") if isinstance(body, dict) else None
    if not isinstance(keys, list) or not keys:
        raise InvalidRequestError("No keys provided")

    count = 0
    for key in keys:
        try:
            if await store.delete_file(key):
                count += 1
        except InvalidKeyError:
            continue

    logger.info("Batch delete finished", requested=len(keys), deleted=count)
    return BatchDeleteResponse(
        message=f"{count} file(s) deleted successfully",
        count=count,
    )
