import os

from .blob_storage import BlobStorage, BlobStorageError
from .filesystem_storage import FileSystemStorage
from .vercel_storage import VercelBlobStorage


def get_storage_backend() -> BlobStorage:
    """
    Factory for blob storage based on BLOB_BACKEND env var.
    Defaults to VercelBlobStorage.

    Supported values (case-insensitive):
      - 'vercel'
      - 'filesystem'
    """
    backend = os.getenv("BLOB_BACKEND", "vercel").lower()
    if backend == "filesystem":
        return FileSystemStorage()
    if backend in ("vercel", ""):  # default
        return VercelBlobStorage()
    error_message = f"Unknown storage backend: {backend}"
    raise ValueError(error_message)


__all__ = [
    "BlobStorage",
    "BlobStorageError",
    "FileSystemStorage",
    "VercelBlobStorage",
    "get_storage_backend",
]
