"""HTTP backend that keeps the snapshot document on a remote server."""

from __future__ import annotations

import logging

import httpx

from .codec import dump_store_document, parse_store_document
from .models import StoreSnapshot
from .store import StorageError

logger = logging.getLogger(__name__)


class RemoteStoreClient:
    """Loads the snapshot with GET and saves it with PUT at a single URL."""

    def __init__(
        self,
        url: str,
        token: str | None = None,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.url = url
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.Client(
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def load(self) -> StoreSnapshot:
        """Fetch the current document; a missing document is an empty store."""
        try:
            resp = self._client.get(self.url)
            if resp.status_code == 404:
                logger.info("No document at %s; starting empty", self.url)
                return StoreSnapshot(source_path=self.url)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Failed to load %s: %s", self.url, e)
            raise StorageError("read", str(e)) from e
        return parse_store_document(resp.text, source_path=self.url)

    def write(self, snapshot: StoreSnapshot) -> None:
        content = dump_store_document(snapshot)
        try:
            resp = self._client.put(self.url, content=content)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Failed to save %s: %s", self.url, e)
            raise StorageError("save", str(e)) from e
        logger.debug("Uploaded %d bytes to %s", len(content), self.url)

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()
