import os
from typing import Any

import requests

from .list_store import ListStore, ListStoreError


class UpstashListStore(ListStore):
    """
    List store using the Upstash Redis REST API.
    """

    _SUCCESS_CODE = 200
    _TIMEOUT = 10  # seconds

    def __init__(self, url: str = "", token: str = "") -> None:
        self.url = (url or os.getenv("UPSTASH_REDIS_REST_URL", "")).rstrip("/")
        self.token = token or os.getenv("UPSTASH_REDIS_REST_TOKEN", "")

    def _command(self, *args: str | int) -> Any:
        if not self.url or not self.token:
            error_message = "Upstash Redis REST credentials are not set"
            raise ListStoreError(error_message)
        headers = {"Authorization": f"Bearer {self.token}"}
        try:
            resp = requests.post(
                self.url,
                headers=headers,
                json=[str(arg) for arg in args],
                timeout=self._TIMEOUT,
            )
        except requests.RequestException as exc:
            error_message = f"Upstash request failed: {exc}"
            raise ListStoreError(error_message) from exc
        if resp.status_code != self._SUCCESS_CODE:
            error_message = f"Upstash API error: {resp.status_code} {resp.text}"
            raise ListStoreError(error_message)
        try:
            body = resp.json()
        except ValueError as exc:
            error_message = f"Upstash returned a non-JSON response: {resp.text}"
            raise ListStoreError(error_message) from exc
        if not isinstance(body, dict):
            error_message = f"Upstash returned an unexpected response: {body!r}"
            raise ListStoreError(error_message)
        if "error" in body:
            error_message = f"Upstash command {args[0]} failed: {body['error']}"
            raise ListStoreError(error_message)
        return body.get("result")

    def lpush(self, key: str, value: str) -> int:
        return int(self._command("LPUSH", key, value))

    def lrange(self, key: str, start: int, stop: int) -> list[str]:
        return list(self._command("LRANGE", key, start, stop) or [])

    def lrem(self, key: str, count: int, value: str) -> int:
        return int(self._command("LREM", key, count, value))

    def incr(self, key: str) -> int:
        return int(self._command("INCR", key))

    def decr(self, key: str) -> int:
        return int(self._command("DECR", key))

    def delete(self, key: str) -> int:
        return int(self._command("DEL", key))
