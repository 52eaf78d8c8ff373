import os

from sqlalchemy.orm import Session

from .list_store import ListStore, ListStoreError
from .sql_store import SQLListStore
from .upstash_store import UpstashListStore


def get_list_store_backend(db: Session) -> ListStore:
    """
    Factory for the photo list store based on LIST_STORE_BACKEND env var.
    Defaults to UpstashListStore.

    Supported values (case-insensitive):
      - 'upstash'
      - 'sql'
    """
    backend = os.getenv("LIST_STORE_BACKEND", "upstash").lower()
    if backend == "sql":
        return SQLListStore(db)
    if backend in ("upstash", ""):  # default
        return UpstashListStore()
    error_message = f"Unknown list store backend: {backend}"
    raise ValueError(error_message)


__all__ = [
    "ListStore",
    "ListStoreError",
    "SQLListStore",
    "UpstashListStore",
    "get_list_store_backend",
]
