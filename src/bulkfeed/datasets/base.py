"""Dataset definitions: how a dataset is partitioned, fetched and typed."""

from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path

from bulkfeed.datasets.partitions import Partition
from bulkfeed.datasets.schema import DatasetSchema


class RawFormat(str, Enum):
    """Format of the upstream payload, selecting the converter."""

    CSV = "csv"
    PARQUET = "parquet"


class Dataset(ABC):
    """One upstream bulk dataset.

    Subclasses declare the static schema and record type, and implement
    partition resolution, file naming and the download itself.

    Attributes:
        name: Stable dataset name, also the cache sub-directory
        schema: Required artifact columns
        record_type: Domain record class built by the mapper
        raw_format: Upstream payload format
        raw_suffix: File suffix of the raw payload on disk
    """

    name: str
    schema: DatasetSchema
    record_type: type
    raw_format: RawFormat
    raw_suffix: str

    @abstractmethod
    def resolve(self, from_time_ms: int) -> Partition:
        """Partition holding records at ``from_time_ms``."""

    @abstractmethod
    def file_stem(self, partition: Partition) -> str:
        """Deterministic file name stem for a partition."""

    @abstractmethod
    async def fetch(self, partition: Partition, dest: Path) -> Path:
        """Download the raw payload of ``partition`` to ``dest``."""

    @property
    def max_age(self) -> float | None:
        """Seconds after which a cached artifact is stale; None = immutable."""
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
