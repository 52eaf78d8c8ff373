from abc import ABC, abstractmethod


class BlobStorageError(Exception):
    """Raised when a blob store call fails."""


class BlobStorage(ABC):
    """
    Interface for blob storage backends holding uploaded photos.
    """

    @abstractmethod
    def put(
        self,
        name: str,
        data: bytes,
        content_type: str,
        access: str = "public",
    ) -> str:
        """
        Store data under name and return its public URL.
        """
        error_message = "put not implemented"
        raise NotImplementedError(error_message)

    @abstractmethod
    def delete(self, url: str) -> None:
        """
        Delete the blob published at url.
        """
        error_message = "delete not implemented"
        raise NotImplementedError(error_message)
