from collections.abc import Generator
from typing import Annotated, Any

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from rsvp.dao import PhotoDAO
from rsvp.database import SessionLocal
from rsvp.liststore import ListStore, get_list_store_backend
from rsvp.storage import BlobStorage, get_storage_backend
from rsvp.utils.jwt import require_admin_claims

security = HTTPBearer()


def get_current_admin(
    credentials: HTTPAuthorizationCredentials = Depends(security),  # noqa: B008
) -> dict[str, Any]:
    """
    Dependency to get the admin claims from a JWT bearer token.
    Raises 401 if the token is invalid or missing, 403 if it is not an
    admin token.
    """
    return require_admin_claims(credentials.credentials)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency that provides a database session and closes it when done.
    Only the SQL list store uses it; the session is lazy, so other backends
    never open a connection.
    Yields:
        Session: SQLAlchemy database session
    """
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_list_store(db: Annotated[Session, Depends(get_db)]) -> ListStore:
    return get_list_store_backend(db)


def get_blob_storage() -> BlobStorage:
    return get_storage_backend()


def get_photo_dao(store: Annotated[ListStore, Depends(get_list_store)]) -> PhotoDAO:
    return PhotoDAO(store)
