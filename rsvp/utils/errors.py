import logging
import os

from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_502_BAD_GATEWAY,
)

from rsvp.constants import CORS_HEADERS
from rsvp.liststore import ListStoreError
from rsvp.storage import BlobStorageError

logger = logging.getLogger(__name__)


class PhotoRequestError(Exception):
    """A client error with the message and status to send back."""

    def __init__(self, message: str, status_code: int = HTTP_400_BAD_REQUEST) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _debug_enabled() -> bool:
    return os.getenv("DEBUG", "").lower() in ("1", "true", "yes")


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"error": message}, headers=CORS_HEADERS
    )


def handle_error(exc: Exception, context: str) -> JSONResponse:
    """
    Map a failure raised while serving a request to a JSON error response.
    context names the operation that failed and is logged with the error.
    """
    if isinstance(exc, PhotoRequestError):
        logger.warning("[%s] %s (%d)", context, exc.message, exc.status_code)
        return error_response(exc.message, exc.status_code)
    if isinstance(exc, HTTPException):
        logger.error("[%s] request rejected: %s", context, exc.detail)
        return error_response(str(exc.detail), exc.status_code)

    if isinstance(exc, (BlobStorageError, ListStoreError)):
        logger.error("[%s] storage failure: %s", context, exc)
        status_code = HTTP_502_BAD_GATEWAY
        content = {"error": "Storage service error", "context": context}
    else:
        logger.exception("[%s] unexpected failure", context, exc_info=exc)
        status_code = HTTP_500_INTERNAL_SERVER_ERROR
        content = {"error": "Internal server error", "context": context}
    if _debug_enabled():
        content["details"] = str(exc)
    return JSONResponse(status_code=status_code, content=content, headers=CORS_HEADERS)
