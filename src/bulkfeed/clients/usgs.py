"""USGS earthquake summary feed client.

The USGS republishes rolling summary feeds (past hour/day/week/month) every
few minutes as a single CSV file per feed.

Feed documentation: https://earthquake.usgs.gov/earthquakes/feed/v1.0/csv.php

Usage:
    from bulkfeed.clients.usgs import USGSFeedClient

    async with USGSFeedClient(feed="all_month") as client:
        path = await client.download_feed(Path("/tmp/earthquakes.csv"))
"""

from pathlib import Path

from bulkfeed.clients.base import BaseAsyncClient
from bulkfeed.config import settings


class USGSFeedClient(BaseAsyncClient):
    """Async client for the USGS CSV summary feeds.

    Args:
        feed: Summary feed name (default: from settings, e.g. "all_month")
        base_url: Feed base URL (default: from settings)
        timeout: Per-operation timeout in seconds (default: from settings)
    """

    def __init__(
        self,
        feed: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        super().__init__(
            base_url=base_url or settings.usgs_base_url,
            timeout=timeout or settings.http_timeout,
        )
        self.feed = feed or settings.usgs_feed

    @property
    def feed_endpoint(self) -> str:
        return f"/{self.feed}.csv"

    async def download_feed(self, dest: Path) -> Path:
        """Download the current snapshot of the feed to ``dest``."""
        return await self.download(self.feed_endpoint, dest)
