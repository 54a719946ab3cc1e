"""Base async HTTP client for bulk file downloads.

All upstream clients inherit from this base to ensure consistent behavior:
- Async/await for non-blocking I/O
- Connection pooling for performance
- Streaming downloads straight to disk (bulk files are large); file writes
  run in worker threads via asyncio.to_thread
- Explicit timeouts and a single typed error (FetchError)

There are no retries: the first failure propagates to the caller.

Usage:
    class MyArchiveClient(BaseAsyncClient):
        def __init__(self, timeout: float = 30.0):
            super().__init__(base_url="https://files.example.com", timeout=timeout)

        async def download_day(self, day: str, dest: Path) -> Path:
            return await self.download(f"/{day}.csv", dest)
"""

import asyncio
import logging
import os
from pathlib import Path
from uuid import uuid4

import httpx

from bulkfeed.errors import FetchError

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1024 * 1024


class BaseAsyncClient:
    """Base async HTTP client with connection pooling and streaming downloads.

    Args:
        base_url: Base URL for all requests
        headers: Default headers for all requests
        timeout: Per-operation timeout in seconds (default: 30)
    """

    def __init__(
        self,
        base_url: str,
        headers: dict[str, str] | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.headers = headers or {}
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "BaseAsyncClient":
        """Async context manager entry."""
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            timeout=self.timeout,
            follow_redirects=True,
            limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def url_for(self, endpoint: str) -> str:
        """Absolute URL for an endpoint path."""
        if not endpoint.startswith("/"):
            endpoint = f"/{endpoint}"
        return f"{self.base_url}{endpoint}"

    async def download(self, endpoint: str, dest: Path) -> Path:
        """Stream an upstream file to ``dest``.

        The body is written to a temporary sibling and renamed into place once
        complete, so a failed download never leaves a truncated file at
        ``dest``.

        Args:
            endpoint: Path relative to base_url
            dest: Local file to create (parent directories are created)

        Returns:
            ``dest``

        Raises:
            FetchError: On non-success status, timeout or transport failure
            RuntimeError: If used outside ``async with``
        """
        if not self._client:
            raise RuntimeError("Client not initialized. Use async with context manager.")

        url = self.url_for(endpoint)
        dest = Path(dest)
        await asyncio.to_thread(dest.parent.mkdir, parents=True, exist_ok=True)
        partial = dest.with_name(f".{dest.name}.{uuid4().hex}.part")

        logger.debug("GET %s -> %s", url, dest)

        try:
            async with self._client.stream("GET", url) as response:
                if response.status_code >= 400:
                    body = (await response.aread()).decode("utf-8", errors="replace")[:500]
                    logger.error("Download failed: %d %s - %s", response.status_code, url, body)
                    raise FetchError(
                        f"Download failed: {response.status_code} for {url}",
                        url=url,
                        status_code=response.status_code,
                        response_body=body,
                    )

                size = 0
                fh = await asyncio.to_thread(open, partial, "wb")
                try:
                    async for chunk in response.aiter_bytes(_CHUNK_SIZE):
                        await asyncio.to_thread(fh.write, chunk)
                        size += len(chunk)
                finally:
                    await asyncio.to_thread(fh.close)

            await asyncio.to_thread(os.replace, partial, dest)
            logger.info("Downloaded %s (%d bytes) to %s", url, size, dest)
            return dest

        except httpx.TimeoutException as e:
            logger.error("Request timeout for %s: %s", url, e)
            raise FetchError(f"Request timeout: {e}", url=url) from e

        except httpx.HTTPError as e:
            logger.error("Transport error for %s: %s", url, e)
            raise FetchError(f"Network error: {e}", url=url) from e

        finally:
            await asyncio.to_thread(partial.unlink, missing_ok=True)
