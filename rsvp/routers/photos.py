import logging
import re
import time
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import FormData, UploadFile
from starlette.status import HTTP_404_NOT_FOUND

from rsvp.constants import (
    ALLOWED_MIME_TYPES,
    DEFAULT_EVENT_TYPE,
    DEFAULT_EXTENSION,
    MAX_FILE_SIZE,
    PHOTO_DELETE_SUCCESS,
    PHOTO_UPLOAD_SUCCESS,
    PHOTOS_CLEAR_SUCCESS,
    PHOTOS_METHODS,
    PHOTOS_PATH,
)
from rsvp.dao import PhotoDAO
from rsvp.deps import get_blob_storage, get_photo_dao
from rsvp.schemas import (
    ClearPhotosResponse,
    MessageResponse,
    Photo,
    PhotoListResponse,
    PhotoUploadResponse,
)
from rsvp.storage import BlobStorage, BlobStorageError
from rsvp.utils.errors import PhotoRequestError, handle_error

logger = logging.getLogger(__name__)

router = APIRouter()

# photo, guestName, eventType
MAX_FORM_FIELDS = 3
_UNSAFE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9]")


def blob_name_for(guest_name: str, original_filename: str | None, timestamp_ms: int) -> str:
    """
    Build the blob name: the guest name with non-alphanumerics replaced by
    underscores, the upload time in epoch milliseconds and the original
    extension (jpg when the filename has none).
    """
    extension = DEFAULT_EXTENSION
    if original_filename and "." in original_filename:
        extension = original_filename.rsplit(".", 1)[1] or DEFAULT_EXTENSION
    safe_name = _UNSAFE_NAME_CHARS.sub("_", guest_name)
    return f"{safe_name}_{timestamp_ms}.{extension}"


def _utc_timestamp() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _validate_upload(upload: object, guest_name: str) -> UploadFile:
    if not isinstance(upload, UploadFile):
        raise PhotoRequestError("No file uploaded")
    if not upload.size:
        raise PhotoRequestError("Uploaded file is empty")
    if not guest_name.strip():
        raise PhotoRequestError("Guest name is required")
    if upload.content_type not in ALLOWED_MIME_TYPES:
        raise PhotoRequestError(
            "Invalid file type. Only JPEG, PNG, and WebP are allowed."
        )
    if upload.size > MAX_FILE_SIZE:
        raise PhotoRequestError("File too large. Maximum size is 10MB.")
    return upload


def _form_text(form: FormData, field: str) -> str:
    value = form.get(field)
    return value if isinstance(value, str) else ""


async def _close_form(form: FormData) -> None:
    """Release the parser's spooled temporary files; failures are only logged."""
    try:
        await form.close()
    except Exception as exc:  # noqa: BLE001
        logger.error("Failed to cleanup temporary upload file: %s", exc)


def list_photos(dao: PhotoDAO) -> JSONResponse:
    try:
        photos = dao.list()
    except Exception as exc:  # noqa: BLE001
        logger.error("Failed to fetch photos: %s", exc)
        return handle_error(exc, "getPhotos")
    body = PhotoListResponse(photos=photos, count=len(photos))
    return JSONResponse(body.model_dump(by_alias=True))


async def upload_photo(
    request: Request, dao: PhotoDAO, blobs: BlobStorage
) -> JSONResponse:
    form: FormData | None = None
    try:
        form = await request.form(max_files=1, max_fields=MAX_FORM_FIELDS)
        guest_name = _form_text(form, "guestName")
        event_type = _form_text(form, "eventType") or DEFAULT_EVENT_TYPE
        upload = _validate_upload(form.get("photo"), guest_name)

        data = await upload.read()
        filename = blob_name_for(guest_name, upload.filename, time.time_ns() // 1_000_000)
        logger.info(
            "Starting photo upload filename=%s size=%s type=%s guest_name=%s",
            filename,
            upload.size,
            upload.content_type,
            guest_name,
        )
        url = await run_in_threadpool(
            blobs.put, filename, data, upload.content_type, "public"
        )

        photo = Photo(
            id=url.rsplit("/", 1)[-1],
            url=url,
            filename=upload.filename,
            guest_name=guest_name.strip(),
            event_type=event_type,
            uploaded_at=_utc_timestamp(),
            size=upload.size,
            mimetype=upload.content_type,
        )
        await run_in_threadpool(dao.add, photo)
    except Exception as exc:  # noqa: BLE001
        if not isinstance(exc, PhotoRequestError):
            logger.error("Photo upload failed: %s", exc)
        return handle_error(exc, "uploadPhoto")
    finally:
        if form is not None:
            await _close_form(form)

    logger.info(
        "Photo uploaded successfully photo_id=%s url=%s guest_name=%s",
        photo.id,
        photo.url,
        photo.guest_name,
    )
    body = PhotoUploadResponse(message=PHOTO_UPLOAD_SUCCESS, photo=photo)
    return JSONResponse(body.model_dump(by_alias=True))


async def _read_photo_id(request: Request) -> str:
    try:
        body = await request.json()
    except ValueError:
        return ""
    photo_id = body.get("photoId") if isinstance(body, dict) else None
    return str(photo_id) if photo_id else ""


async def delete_photo(
    request: Request, dao: PhotoDAO, blobs: BlobStorage
) -> JSONResponse:
    try:
        photo_id = await _read_photo_id(request)
        if not photo_id:
            raise PhotoRequestError("Photo ID is required")

        match = await run_in_threadpool(dao.find, photo_id)
        if match is None:
            raise PhotoRequestError("Photo not found", HTTP_404_NOT_FOUND)
        entry, photo = match

        try:
            await run_in_threadpool(blobs.delete, photo.url)
        except BlobStorageError as exc:
            logger.error(
                "Failed to delete from blob storage url=%s: %s", photo.url, exc
            )

        await run_in_threadpool(dao.remove, entry)
    except Exception as exc:  # noqa: BLE001
        if not isinstance(exc, PhotoRequestError):
            logger.error("Photo deletion failed: %s", exc)
        return handle_error(exc, "deletePhoto")

    logger.info("Photo deleted successfully photo_id=%s url=%s", photo_id, photo.url)
    body = MessageResponse(message=PHOTO_DELETE_SUCCESS)
    return JSONResponse(body.model_dump(by_alias=True))


def clear_photos(dao: PhotoDAO, blobs: BlobStorage) -> JSONResponse:
    """
    Delete every blob in the list, then drop the list and its counter.
    Individual blob failures are logged and skipped.
    """
    try:
        entries = dao.entries()
        for entry in entries:
            try:
                photo = Photo.model_validate_json(entry)
                blobs.delete(photo.url)
            except (ValidationError, BlobStorageError) as exc:
                logger.error("Failed to delete photo from blob: %s", exc)
        dao.clear()
    except Exception as exc:  # noqa: BLE001
        logger.error("Failed to clear all photos: %s", exc)
        return handle_error(exc, "clearAllPhotos")

    logger.info("All photos cleared successfully deleted_count=%d", len(entries))
    body = ClearPhotosResponse(message=PHOTOS_CLEAR_SUCCESS, deleted_count=len(entries))
    return JSONResponse(body.model_dump(by_alias=True))


@router.api_route(PHOTOS_PATH, methods=list(PHOTOS_METHODS))
async def photos_handler(
    request: Request,
    dao: Annotated[PhotoDAO, Depends(get_photo_dao)],
    blobs: Annotated[BlobStorage, Depends(get_blob_storage)],
) -> Response:
    """
    Single entry point for the guest photo API, routed by HTTP method.
    Pre-flight and unsupported methods are answered by the CORS middleware.
    """
    try:
        if request.method == "GET":
            return await run_in_threadpool(list_photos, dao)
        if request.method == "POST":
            return await upload_photo(request, dao, blobs)
        return await delete_photo(request, dao, blobs)
    except Exception as exc:  # noqa: BLE001
        logger.error("API handler error method=%s: %s", request.method, exc)
        return handle_error(exc, "apiHandler")
