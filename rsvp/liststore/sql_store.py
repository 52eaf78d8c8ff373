from collections.abc import Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rsvp.models import Counter, ListEntry

from .list_store import ListStore, ListStoreError


def _redis_slice(length: int, start: int, stop: int) -> slice:
    """Translate inclusive Redis LRANGE bounds into a Python slice."""
    if start < 0:
        start = max(length + start, 0)
    if stop < 0:
        stop = length + stop
    stop = min(stop, length - 1)
    if start > stop:
        return slice(0, 0)
    return slice(start, stop + 1)


class SQLListStore(ListStore):
    """
    List store kept in the application database via SQLAlchemy.
    Every call commits on its own.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def _entries(self, key: str) -> Sequence[ListEntry]:
        stmt = select(ListEntry).where(ListEntry.key == key).order_by(ListEntry.id.desc())
        return self.db.scalars(stmt).all()

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            error_message = f"List store commit failed: {exc}"
            raise ListStoreError(error_message) from exc

    def lpush(self, key: str, value: str) -> int:
        try:
            self.db.add(ListEntry(key=key, value=value))
            self._commit()
            return len(self._entries(key))
        except SQLAlchemyError as exc:
            error_message = f"LPUSH {key} failed: {exc}"
            raise ListStoreError(error_message) from exc

    def lrange(self, key: str, start: int, stop: int) -> list[str]:
        try:
            entries = self._entries(key)
        except SQLAlchemyError as exc:
            error_message = f"LRANGE {key} failed: {exc}"
            raise ListStoreError(error_message) from exc
        return [entry.value for entry in entries[_redis_slice(len(entries), start, stop)]]

    def lrem(self, key: str, count: int, value: str) -> int:
        try:
            matches = [entry for entry in self._entries(key) if entry.value == value]
            if count < 0:
                matches = list(reversed(matches))[: -count]
            elif count > 0:
                matches = matches[:count]
            for entry in matches:
                self.db.delete(entry)
            self._commit()
        except SQLAlchemyError as exc:
            error_message = f"LREM {key} failed: {exc}"
            raise ListStoreError(error_message) from exc
        return len(matches)

    def _add_to_counter(self, key: str, amount: int) -> int:
        try:
            counter = self.db.get(Counter, key)
            if counter is None:
                counter = Counter(key=key, value=0)
                self.db.add(counter)
            counter.value += amount
            value = counter.value
            self._commit()
        except SQLAlchemyError as exc:
            error_message = f"Counter update on {key} failed: {exc}"
            raise ListStoreError(error_message) from exc
        return value

    def incr(self, key: str) -> int:
        return self._add_to_counter(key, 1)

    def decr(self, key: str) -> int:
        return self._add_to_counter(key, -1)

    def delete(self, key: str) -> int:
        try:
            removed_entries = self.db.execute(
                delete(ListEntry).where(ListEntry.key == key)
            ).rowcount
            removed_counters = self.db.execute(
                delete(Counter).where(Counter.key == key)
            ).rowcount
            self._commit()
        except SQLAlchemyError as exc:
            error_message = f"DEL {key} failed: {exc}"
            raise ListStoreError(error_message) from exc
        return 1 if (removed_entries or removed_counters) else 0
