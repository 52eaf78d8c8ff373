import os
from pathlib import Path

from .blob_storage import BlobStorage, BlobStorageError


class FileSystemStorage(BlobStorage):
    """
    Blob storage using the local filesystem, for development.
    """

    def __init__(self, base_path: str = "", public_base_url: str = "") -> None:
        self.base_path = Path(base_path or os.getenv("BLOB_LOCAL_PATH", "uploads"))
        self.public_base_url = (
            public_base_url or os.getenv("BLOB_PUBLIC_BASE_URL", "/uploads")
        ).rstrip("/")

    def put(
        self,
        name: str,
        data: bytes,
        content_type: str,
        access: str = "public",
    ) -> str:
        file_path = self.base_path / Path(name).name
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
            file_path.write_bytes(data)
        except OSError as exc:
            error_message = f"Failed to write {file_path}: {exc}"
            raise BlobStorageError(error_message) from exc
        return f"{self.public_base_url}/{file_path.name}"

    def delete(self, url: str) -> None:
        file_path = self.base_path / url.rsplit("/", 1)[-1]
        try:
            file_path.unlink(missing_ok=True)
        except OSError as exc:
            error_message = f"Failed to delete {file_path}: {exc}"
            raise BlobStorageError(error_message) from exc
