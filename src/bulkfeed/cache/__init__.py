"""Local Parquet artifact cache for bulkfeed.

Write-once storage of converted partitions, with cache-or-fetch access.
"""

from bulkfeed.cache.artifact_store import ArtifactStore
from bulkfeed.cache.manager import CacheManager

__all__ = ["ArtifactStore", "CacheManager"]
