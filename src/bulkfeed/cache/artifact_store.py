"""Local artifact store with a deterministic, per-dataset layout.

Storage structure:
    {base_path}/{dataset}/{stem}{raw_suffix}   raw upstream payload
    {base_path}/{dataset}/{stem}.parquet       converted artifact

Example:
    /tmp/bulkfeed/earthquakes/earthquakes_all_month.csv
    /tmp/bulkfeed/earthquakes/earthquakes_all_month.parquet
    /tmp/bulkfeed/trips/yellow_tripdata_2024-01.raw.parquet
    /tmp/bulkfeed/trips/yellow_tripdata_2024-01.parquet

Artifacts are write-once: they are created by the converter and replaced only
when a dataset's freshness policy declares them stale. Nothing is evicted
automatically; ``clear`` exists for operators.

All filesystem checks are async-compatible using asyncio.to_thread.
"""

import asyncio
import logging
import shutil
import time
from pathlib import Path
from typing import Any

from bulkfeed.datasets.base import Dataset
from bulkfeed.datasets.partitions import Partition

logger = logging.getLogger(__name__)

ARTIFACT_SUFFIX = ".parquet"


class ArtifactStore:
    """Filesystem layout and inspection for cached artifacts.

    Args:
        base_path: Root directory for the cache. Created if absent.
    """

    def __init__(self, base_path: str | Path) -> None:
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)

    def dataset_dir(self, dataset: Dataset) -> Path:
        return self.base_path / dataset.name

    def raw_path(self, dataset: Dataset, partition: Partition) -> Path:
        """Path of the raw payload for a partition."""
        return self.dataset_dir(dataset) / f"{dataset.file_stem(partition)}{dataset.raw_suffix}"

    def artifact_path(self, dataset: Dataset, partition: Partition) -> Path:
        """Path of the converted artifact for a partition."""
        return self.dataset_dir(dataset) / f"{dataset.file_stem(partition)}{ARTIFACT_SUFFIX}"

    async def exists(self, dataset: Dataset, partition: Partition) -> bool:
        """Check if a partition's artifact exists."""
        return await asyncio.to_thread(self.artifact_path(dataset, partition).is_file)

    async def age_seconds(self, dataset: Dataset, partition: Partition) -> float | None:
        """Seconds since the artifact was written, or None if absent."""
        path = self.artifact_path(dataset, partition)

        def _age() -> float | None:
            try:
                return max(0.0, time.time() - path.stat().st_mtime)
            except FileNotFoundError:
                return None

        return await asyncio.to_thread(_age)

    async def is_fresh(self, dataset: Dataset, partition: Partition) -> bool:
        """Whether a cached artifact can be served without re-fetching.

        Immutable datasets (max_age None) are fresh as soon as they exist.
        Otherwise the artifact must be younger than max_age, so 0 never hits.
        """
        age = await self.age_seconds(dataset, partition)
        if age is None:
            return False
        max_age = dataset.max_age
        return max_age is None or age < max_age

    async def list_artifacts(self, dataset: Dataset) -> list[Path]:
        """Sorted artifact paths cached for a dataset."""
        directory = self.dataset_dir(dataset)

        def _list() -> list[Path]:
            if not directory.exists():
                return []
            # Raw Parquet payloads share the suffix; their own suffix tells them apart
            return sorted(
                p for p in directory.glob(f"*{ARTIFACT_SUFFIX}")
                if not p.name.endswith(dataset.raw_suffix)
            )

        return await asyncio.to_thread(_list)

    async def get_cache_stats(self, dataset: Dataset) -> dict[str, Any]:
        """Get cache statistics for a dataset.

        Returns:
            Dictionary with cache statistics:
                - artifacts: Number of converted artifacts
                - total_files: All files (raw + converted)
                - size_bytes: Total size on disk
                - partitions: Artifact stems, sorted
        """
        artifacts = await self.list_artifacts(dataset)
        directory = self.dataset_dir(dataset)

        def _stats() -> dict[str, Any]:
            files = [p for p in directory.glob("*") if p.is_file()] if directory.exists() else []
            return {
                "artifacts": len(artifacts),
                "total_files": len(files),
                "size_bytes": sum(f.stat().st_size for f in files),
                "partitions": [p.name[: -len(ARTIFACT_SUFFIX)] for p in artifacts],
            }

        return await asyncio.to_thread(_stats)

    async def clear(self, dataset: Dataset) -> int:
        """Delete everything cached for a dataset.

        Returns:
            Number of files removed
        """
        directory = self.dataset_dir(dataset)

        def _clear() -> int:
            if not directory.exists():
                return 0
            count = sum(1 for p in directory.rglob("*") if p.is_file())
            shutil.rmtree(directory)
            return count

        removed = await asyncio.to_thread(_clear)
        logger.info("Cleared %d cached files for %s", removed, dataset.name)
        return removed
