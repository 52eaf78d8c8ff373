from typing import Annotated, Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from rsvp.dao import PhotoDAO
from rsvp.deps import get_blob_storage, get_current_admin, get_photo_dao
from rsvp.routers.photos import clear_photos
from rsvp.schemas import ClearPhotosResponse
from rsvp.storage import BlobStorage

router = APIRouter()


@router.post("/api/photos/clear", response_model=ClearPhotosResponse)
def clear_all_photos(
    _admin: Annotated[dict[str, Any], Depends(get_current_admin)],
    dao: Annotated[PhotoDAO, Depends(get_photo_dao)],
    blobs: Annotated[BlobStorage, Depends(get_blob_storage)],
) -> JSONResponse:
    """
    Remove every guest photo from blob storage and empty the photo list.
    Requires an admin bearer token.
    """
    return clear_photos(dao, blobs)
