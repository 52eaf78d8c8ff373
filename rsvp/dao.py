import logging

from rsvp.constants import PHOTO_COUNT_KEY, PHOTOS_KEY
from rsvp.liststore import ListStore
from rsvp.schemas import Photo

logger = logging.getLogger(__name__)


class PhotoDAO:
    """Data Access Object for the guest photo list."""

    def __init__(
        self,
        store: ListStore,
        key: str = PHOTOS_KEY,
        count_key: str = PHOTO_COUNT_KEY,
    ) -> None:
        self.store = store
        self.key = key
        self.count_key = count_key

    def add(self, photo: Photo) -> None:
        self.store.lpush(self.key, photo.to_json())
        self.store.incr(self.count_key)

    def entries(self) -> list[str]:
        """Raw serialized entries, most recent first."""
        return self.store.lrange(self.key, 0, -1)

    def list(self) -> list[Photo]:
        return [Photo.model_validate_json(entry) for entry in self.entries()]

    def find(self, photo_id: str) -> tuple[str, Photo] | None:
        """
        Return the first entry whose id equals photo_id or whose url
        contains it, together with its raw serialized form.
        """
        for entry in self.entries():
            photo = Photo.model_validate_json(entry)
            if photo.id == photo_id or photo_id in photo.url:
                return entry, photo
        return None

    def remove(self, entry: str) -> None:
        removed = self.store.lrem(self.key, 1, entry)
        if not removed:
            logger.warning("Photo entry was already gone from %s", self.key)
        self.store.decr(self.count_key)

    def clear(self) -> None:
        self.store.delete(self.key)
        self.store.delete(self.count_key)
