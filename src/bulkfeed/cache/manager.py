"""Cache manager — guarantees a partition's artifact exists locally.

On a hit the artifact path is returned immediately. On a miss (or a stale
rolling-feed artifact) the raw payload is downloaded, converted, and the new
artifact path returned. The whole fetch + convert cycle is bounded by a
timeout.

There is no locking: two concurrent misses for the same partition both fetch
and convert, and the last complete write wins. Both produce an equivalent
artifact. Each cycle downloads into its own temporary raw file, so one request
never converts or deletes a payload another request is still using.
"""

import asyncio
import logging
import os
from pathlib import Path
from uuid import uuid4

from bulkfeed.cache.artifact_store import ArtifactStore
from bulkfeed.config import settings
from bulkfeed.datasets.base import Dataset
from bulkfeed.datasets.partitions import Partition
from bulkfeed.engine.converter import convert
from bulkfeed.errors import FetchError

logger = logging.getLogger(__name__)


class CacheManager:
    """Cache-or-fetch access to partition artifacts.

    Usage:
        manager = CacheManager(ArtifactStore("/tmp/bulkfeed"))
        path = await manager.ensure_available(TaxiTrips(), MonthPartition(2024, 1))

    Args:
        store: Local artifact store
        fetch_timeout: Bound on one fetch + convert cycle in seconds
            (default: from settings)
        keep_raw_payload: Keep the raw file after conversion (default: from settings)
    """

    def __init__(
        self,
        store: ArtifactStore,
        fetch_timeout: float | None = None,
        keep_raw_payload: bool | None = None,
    ) -> None:
        self.store = store
        self.fetch_timeout = fetch_timeout or settings.fetch_timeout
        self.keep_raw_payload = (
            settings.keep_raw_payload if keep_raw_payload is None else keep_raw_payload
        )

    async def ensure_available(self, dataset: Dataset, partition: Partition) -> Path:
        """Return the artifact path for a partition, populating it on a miss.

        Raises:
            FetchError: Download failed, upstream answered non-success, or the
                cycle exceeded fetch_timeout
            ConversionError: Raw payload could not be converted
        """
        artifact = self.store.artifact_path(dataset, partition)

        if await self.store.is_fresh(dataset, partition):
            logger.info("%s/%s: cache hit %s", dataset.name, partition.key, artifact)
            return artifact

        if await self.store.exists(dataset, partition):
            logger.info(
                "%s/%s: cached artifact older than %.0fs, re-fetching",
                dataset.name, partition.key, dataset.max_age,
            )
        else:
            logger.info("%s/%s: cache miss", dataset.name, partition.key)

        try:
            return await asyncio.wait_for(
                self._populate(dataset, partition),
                timeout=self.fetch_timeout,
            )
        except TimeoutError as e:
            raise FetchError(
                f"Fetch and convert of {dataset.name}/{partition.key} "
                f"exceeded {self.fetch_timeout:.0f}s"
            ) from e

    async def _populate(self, dataset: Dataset, partition: Partition) -> Path:
        raw = self.store.raw_path(dataset, partition)
        artifact = self.store.artifact_path(dataset, partition)
        payload = raw.with_name(f"{dataset.file_stem(partition)}.{uuid4().hex}{dataset.raw_suffix}")

        try:
            await dataset.fetch(partition, payload)
            await asyncio.to_thread(convert, payload, artifact, dataset)
            if self.keep_raw_payload:
                await asyncio.to_thread(os.replace, payload, raw)
        finally:
            await asyncio.to_thread(payload.unlink, missing_ok=True)

        logger.info("%s/%s: cached artifact %s", dataset.name, partition.key, artifact)
        return artifact
