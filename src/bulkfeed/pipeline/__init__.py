"""Query pipeline — Partition → Cache → Engine → Records.

The pipeline coordinates one time-windowed query:
1. Resolve the partition covering the window start
2. Ensure its Parquet artifact is cached (fetch + convert on a miss)
3. Project, filter, sort and limit the artifact
4. Map rows to domain records

Components:
- QueryPipeline: Main coordinator
- get_earthquakes / get_trips: Dataset entrypoints
- synthetic: Fake records for fallback mode
"""

from bulkfeed.pipeline.orchestrator import QueryPipeline, get_earthquakes, get_trips, now_ms

__all__ = ["QueryPipeline", "get_earthquakes", "get_trips", "now_ms"]
