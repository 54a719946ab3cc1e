"""NYC yellow-taxi trips: one immutable Parquet partition per month."""

from pathlib import Path

from bulkfeed.clients.tlc import TLCTripClient
from bulkfeed.datasets.base import Dataset, RawFormat
from bulkfeed.datasets.partitions import MonthPartition, resolve_month
from bulkfeed.datasets.records import Trip
from bulkfeed.datasets.schema import Column, ColumnKind, DatasetSchema

TRIP_SCHEMA = DatasetSchema(
    columns=(
        Column("tpep_pickup_datetime", "tpep_pickup_datetime", ColumnKind.TIMESTAMP),
        Column("tpep_dropoff_datetime", "tpep_dropoff_datetime", ColumnKind.TIMESTAMP),
        Column("trip_distance", "trip_distance", ColumnKind.FLOAT),
        Column("fare_amount", "fare_amount", ColumnKind.FLOAT),
    ),
    time_column="tpep_pickup_datetime",
)


class TaxiTrips(Dataset):
    """Monthly TLC archive. Published months never change, so never expire."""

    name = "trips"
    schema = TRIP_SCHEMA
    record_type = Trip
    raw_format = RawFormat.PARQUET
    raw_suffix = ".raw.parquet"

    def resolve(self, from_time_ms: int) -> MonthPartition:
        return resolve_month(from_time_ms)

    def file_stem(self, partition: MonthPartition) -> str:
        return f"yellow_tripdata_{partition.key}"

    async def fetch(self, partition: MonthPartition, dest: Path) -> Path:
        async with TLCTripClient() as client:
            return await client.download_month(partition.year, partition.month, dest)
