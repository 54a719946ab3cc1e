"""bulkfeed — time-windowed queries over cached bulk datasets.

Public API:
    from bulkfeed import get_earthquakes, get_trips

    quakes = await get_earthquakes(from_ms=1719783621000, n_results=5)
"""

from bulkfeed.datasets.records import Earthquake, Trip
from bulkfeed.errors import (
    ConversionError,
    FetchError,
    InvalidQueryError,
    PipelineError,
    SchemaMismatchError,
    StorageError,
)
from bulkfeed.pipeline import QueryPipeline, get_earthquakes, get_trips, now_ms

__version__ = "0.1.0"

__all__ = [
    "ConversionError",
    "Earthquake",
    "FetchError",
    "InvalidQueryError",
    "PipelineError",
    "QueryPipeline",
    "SchemaMismatchError",
    "StorageError",
    "Trip",
    "get_earthquakes",
    "get_trips",
    "now_ms",
]
