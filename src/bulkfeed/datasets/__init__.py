"""Dataset definitions for bulkfeed.

- earthquakes: USGS rolling summary feed (CSV, one partition)
- trips: NYC TLC yellow-taxi archive (Parquet, one partition per month)
"""

from bulkfeed.datasets.base import Dataset, RawFormat
from bulkfeed.datasets.earthquakes import EARTHQUAKE_SCHEMA, EarthquakeFeed
from bulkfeed.datasets.partitions import (
    MonthPartition,
    Partition,
    RollingPartition,
    resolve_month,
    resolve_rolling,
)
from bulkfeed.datasets.records import Earthquake, Trip
from bulkfeed.datasets.schema import Column, ColumnKind, DatasetSchema
from bulkfeed.datasets.trips import TRIP_SCHEMA, TaxiTrips

DATASETS: dict[str, type[Dataset]] = {
    EarthquakeFeed.name: EarthquakeFeed,
    TaxiTrips.name: TaxiTrips,
}


def get_dataset(name: str) -> Dataset:
    """Instantiate a dataset by name.

    Raises:
        KeyError: If no dataset has that name
    """
    try:
        return DATASETS[name]()
    except KeyError:
        raise KeyError(f"Unknown dataset '{name}', expected one of {sorted(DATASETS)}") from None


__all__ = [
    "Column",
    "ColumnKind",
    "DATASETS",
    "Dataset",
    "DatasetSchema",
    "EARTHQUAKE_SCHEMA",
    "Earthquake",
    "EarthquakeFeed",
    "MonthPartition",
    "Partition",
    "RawFormat",
    "RollingPartition",
    "TRIP_SCHEMA",
    "TaxiTrips",
    "Trip",
    "get_dataset",
    "resolve_month",
    "resolve_rolling",
]
