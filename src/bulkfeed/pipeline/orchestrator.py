"""Query pipeline — resolve → ensure cached → query → map.

Usage:
    pipeline = QueryPipeline(cache_dir="/tmp/bulkfeed")
    quakes = await pipeline.get_records(EarthquakeFeed(), from_time_ms=1719783621000, n_results=5)
"""

import asyncio
import logging
import time

from bulkfeed.cache import ArtifactStore, CacheManager
from bulkfeed.config import settings
from bulkfeed.datasets import Dataset, EarthquakeFeed, TaxiTrips
from bulkfeed.datasets.records import Earthquake, Trip
from bulkfeed.engine import map_records, query_artifact
from bulkfeed.errors import InvalidQueryError
from bulkfeed.pipeline.synthetic import fake_earthquakes, fake_trips

logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Current unix timestamp in milliseconds."""
    return time.time_ns() // 1_000_000


def _query_records(path, dataset: Dataset, from_time_ms: int, n_results: int) -> list:
    table = query_artifact(path, dataset.schema, from_time_ms, n_results)
    return map_records(table, dataset.schema, dataset.record_type)


class QueryPipeline:
    """Runs time-windowed queries against cached dataset partitions.

    One call is one sequential pipeline. Pipeline-level errors (FetchError,
    ConversionError, SchemaMismatchError, StorageError) propagate unwrapped;
    no partial result is returned.

    Args:
        cache_dir: Directory for raw payloads and artifacts (default: from settings)
        fetch_timeout: Bound on one fetch + convert cycle (default: from settings)
    """

    def __init__(self, cache_dir: str | None = None, fetch_timeout: float | None = None) -> None:
        self.store = ArtifactStore(cache_dir or settings.cache_dir)
        self.cache = CacheManager(self.store, fetch_timeout=fetch_timeout)

    async def get_records(self, dataset: Dataset, from_time_ms: int, n_results: int) -> list:
        """Up to ``n_results`` records at or after ``from_time_ms``, oldest first.

        Only the partition containing ``from_time_ms`` is consulted.

        Raises:
            InvalidQueryError: If n_results is negative
        """
        if n_results < 0:
            raise InvalidQueryError(f"n_results must be >= 0, got {n_results}")

        partition = dataset.resolve(from_time_ms)
        logger.info(
            "%s: from_ms=%d n_results=%d -> partition %s",
            dataset.name, from_time_ms, n_results, partition.key,
        )

        path = await self.cache.ensure_available(dataset, partition)
        records = await asyncio.to_thread(
            _query_records, path, dataset, from_time_ms, n_results
        )

        logger.info("%s: returning %d records", dataset.name, len(records))
        return records


async def get_earthquakes(
    from_ms: int,
    n_results: int,
    fake_data: bool = False,
    pipeline: QueryPipeline | None = None,
) -> list[Earthquake]:
    """Earthquakes at or after ``from_ms`` from the USGS rolling feed.

    Args:
        from_ms: Inclusive lower bound, epoch milliseconds
        n_results: Maximum number of events
        fake_data: Return synthetic events instead of real data
        pipeline: Pipeline to use (default: a new one on settings.cache_dir)
    """
    if fake_data:
        return fake_earthquakes(from_ms, n_results)
    pipeline = pipeline or QueryPipeline()
    return await pipeline.get_records(EarthquakeFeed(), from_ms, n_results)


async def get_trips(
    from_ms: int,
    n_results: int,
    fake_data: bool = False,
    pipeline: QueryPipeline | None = None,
) -> list[Trip]:
    """Taxi trips picked up at or after ``from_ms``, from that month's archive.

    Args:
        from_ms: Inclusive lower bound, epoch milliseconds
        n_results: Maximum number of trips
        fake_data: Return synthetic trips instead of real data
        pipeline: Pipeline to use (default: a new one on settings.cache_dir)
    """
    if fake_data:
        return fake_trips(from_ms, n_results)
    pipeline = pipeline or QueryPipeline()
    return await pipeline.get_records(TaxiTrips(), from_ms, n_results)
