import os
from urllib.parse import quote

import requests

from .blob_storage import BlobStorage, BlobStorageError


class VercelBlobStorage(BlobStorage):
    """
    Blob storage using the Vercel Blob HTTP API.
    """

    _DEFAULT_API_URL = "https://blob.vercel-storage.com"
    _API_VERSION = "7"
    _SUCCESS_CODE = 200
    _TIMEOUT = 10  # seconds

    def __init__(self, token: str = "", api_url: str = "") -> None:
        """
        Args:
            token: Read/write token. Falls back to BLOB_READ_WRITE_TOKEN.
            api_url: API endpoint. Falls back to VERCEL_BLOB_API_URL, then
                the public Vercel endpoint.
        """
        self.token = token or os.getenv("BLOB_READ_WRITE_TOKEN", "")
        self.api_url = (
            api_url or os.getenv("VERCEL_BLOB_API_URL", "") or self._DEFAULT_API_URL
        ).rstrip("/")

    def _headers(self) -> dict[str, str]:
        if not self.token:
            error_message = "BLOB_READ_WRITE_TOKEN is not set"
            raise BlobStorageError(error_message)
        return {
            "Authorization": f"Bearer {self.token}",
            "x-api-version": self._API_VERSION,
        }

    def put(
        self,
        name: str,
        data: bytes,
        content_type: str,
        access: str = "public",
    ) -> str:
        headers = self._headers()
        headers["x-content-type"] = content_type
        headers["x-vercel-blob-access"] = access
        url = f"{self.api_url}/?pathname={quote(name)}"
        try:
            resp = requests.put(url, headers=headers, data=data, timeout=self._TIMEOUT)
        except requests.RequestException as exc:
            error_message = f"Vercel Blob request failed: {exc}"
            raise BlobStorageError(error_message) from exc
        if resp.status_code != self._SUCCESS_CODE:
            error_message = f"Vercel Blob API error: {resp.status_code} {resp.text}"
            raise BlobStorageError(error_message)
        blob_url = resp.json().get("url")
        if not blob_url:
            error_message = "Vercel Blob response did not include a url"
            raise BlobStorageError(error_message)
        return blob_url

    def delete(self, url: str) -> None:
        headers = self._headers()
        try:
            resp = requests.post(
                f"{self.api_url}/delete",
                headers=headers,
                json={"urls": [url]},
                timeout=self._TIMEOUT,
            )
        except requests.RequestException as exc:
            error_message = f"Vercel Blob request failed: {exc}"
            raise BlobStorageError(error_message) from exc
        if resp.status_code != self._SUCCESS_CODE:
            error_message = f"Vercel Blob API error: {resp.status_code} {resp.text}"
            raise BlobStorageError(error_message)
