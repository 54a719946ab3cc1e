"""Conversion and query engine for bulkfeed.

- converter: raw payload → Parquet artifact
- query: projection, time filter, sort and limit over an artifact
- mapper: result rows → domain records
"""

from bulkfeed.engine.converter import convert, convert_csv, convert_parquet
from bulkfeed.engine.mapper import map_records, map_row
from bulkfeed.engine.query import open_artifact, query_artifact

__all__ = [
    "convert",
    "convert_csv",
    "convert_parquet",
    "map_records",
    "map_row",
    "open_artifact",
    "query_artifact",
]
