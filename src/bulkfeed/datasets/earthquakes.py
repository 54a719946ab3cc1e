"""USGS earthquake feed: one rolling CSV partition, refreshed by max age."""

from pathlib import Path

from bulkfeed.clients.usgs import USGSFeedClient
from bulkfeed.config import settings
from bulkfeed.datasets.base import Dataset, RawFormat
from bulkfeed.datasets.partitions import RollingPartition, resolve_rolling
from bulkfeed.datasets.records import Earthquake
from bulkfeed.datasets.schema import Column, ColumnKind, DatasetSchema

EARTHQUAKE_SCHEMA = DatasetSchema(
    columns=(
        Column("time", "time", ColumnKind.ISO_TIME),
        Column("latitude", "latitude", ColumnKind.FLOAT),
        Column("longitude", "longitude", ColumnKind.FLOAT),
        Column("depth", "depth_km", ColumnKind.FLOAT),
        Column("mag", "magnitude", ColumnKind.FLOAT),
        Column("place", "location", ColumnKind.TEXT),
    ),
    time_column="time",
)


class EarthquakeFeed(Dataset):
    """The USGS summary feed as a single, always-current partition.

    Args:
        feed: Summary feed name (default: from settings)
        max_age: Freshness bound in seconds (default: from settings)
    """

    name = "earthquakes"
    schema = EARTHQUAKE_SCHEMA
    record_type = Earthquake
    raw_format = RawFormat.CSV
    raw_suffix = ".csv"

    def __init__(self, feed: str | None = None, max_age: float | None = None) -> None:
        self.feed = feed or settings.usgs_feed
        self._max_age = settings.feed_max_age if max_age is None else max_age

    @property
    def max_age(self) -> float | None:
        return self._max_age

    def resolve(self, from_time_ms: int) -> RollingPartition:
        return resolve_rolling(from_time_ms, self.feed)

    def file_stem(self, partition: RollingPartition) -> str:
        return f"earthquakes_{partition.key}"

    async def fetch(self, partition: RollingPartition, dest: Path) -> Path:
        async with USGSFeedClient(feed=partition.feed) as client:
            return await client.download_feed(dest)
