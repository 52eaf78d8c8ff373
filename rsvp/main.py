import logging
import os
from collections.abc import Awaitable, Callable

from dotenv import load_dotenv

# Before the rsvp imports: rsvp.database reads DATABASE_URL at import time
load_dotenv()

from fastapi import FastAPI, Request, Response  # noqa: E402
from fastapi.staticfiles import StaticFiles  # noqa: E402
from starlette.middleware.base import BaseHTTPMiddleware  # noqa: E402
from starlette.status import (  # noqa: E402
    HTTP_200_OK,
    HTTP_405_METHOD_NOT_ALLOWED,
    HTTP_413_CONTENT_TOO_LARGE,
)

from rsvp.constants import (  # noqa: E402
    CORS_HEADERS,
    MAX_FILE_SIZE,
    MULTIPART_OVERHEAD,
    PHOTOS_METHODS,
    PHOTOS_PATH,
)
from rsvp.database import Base, engine  # noqa: E402
from rsvp.routers.admin import router as admin_router  # noqa: E402
from rsvp.routers.login import router as login_router  # noqa: E402
from rsvp.routers.photos import router as photos_router  # noqa: E402
from rsvp.utils.errors import error_response, handle_error  # noqa: E402
from rsvp.utils.logging import configure_logging  # noqa: E402

configure_logging()

logger = logging.getLogger(__name__)

# Tables for the SQL list store backend
Base.metadata.create_all(bind=engine)


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """Answer pre-flight requests, turn away methods the photo API does not
    serve, and add the permissive CORS headers to every response. Anything that escapes a route (including failing
    dependencies) is logged and turned into a JSON error response."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=HTTP_200_OK, headers=CORS_HEADERS)
        if request.url.path == PHOTOS_PATH and request.method not in PHOTOS_METHODS:
            return error_response("Method not allowed", HTTP_405_METHOD_NOT_ALLOWED)
        try:
            response = await call_next(request)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "API handler error method=%s path=%s: %s",
                request.method,
                request.url.path,
                exc,
            )
            return handle_error(exc, "apiHandler")
        response.headers.update(CORS_HEADERS)
        return response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject bodies that cannot hold a photo within the size limit before
    the multipart parser reads them."""

    max_body_size = MAX_FILE_SIZE + MULTIPART_OVERHEAD

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        if request.method in ("POST", "PUT", "PATCH"):
            content_length = request.headers.get("content-length")
            if (
                content_length
                and content_length.isdigit()
                and int(content_length) > self.max_body_size
            ):
                return error_response(
                    "File too large. Maximum size is 10MB.",
                    HTTP_413_CONTENT_TOO_LARGE,
                )
        return await call_next(request)


app = FastAPI(title="Wedding RSVP Photos")

# Added last so it wraps the size guard and sees its responses
app.add_middleware(RequestSizeLimitMiddleware)
app.add_middleware(CORSHeadersMiddleware)

app.include_router(photos_router)
app.include_router(admin_router)
app.include_router(login_router)

if os.getenv("BLOB_BACKEND", "").lower() == "filesystem":
    app.mount(
        "/uploads",
        StaticFiles(directory=os.getenv("BLOB_LOCAL_PATH", "uploads"), check_dir=False),
        name="uploads",
    )

# Reminder: JWT_SECRET_KEY and ADMIN_PASSWORD must be set for the clear-all endpoint

__all__ = ["app"]
