"""Shared fixtures: small upstream payloads shaped like the real ones."""

from datetime import datetime, timezone

import pyarrow as pa
import pyarrow.parquet as pq
import pytest

from bulkfeed.config import settings

USGS_URL = f"{settings.usgs_base_url}/{settings.usgs_feed}.csv"


def tlc_url(year: int, month: int) -> str:
    return f"{settings.tlc_base_url}/yellow_tripdata_{year}-{month:02d}.parquet"


# 2024-06-30T21:40:21Z
FROM_MS = 1719783621000

EARTHQUAKE_HEADER = "time,latitude,longitude,depth,mag,magType,nst,id,place,type"

# Deliberately out of time order. Five rows sit at or after FROM_MS before the
# sixth (r9); r3 is one millisecond too early.
EARTHQUAKE_ROWS = [
    '2024-07-01T03:12:45.250Z,61.2,-150.1,35.4,2.9,ml,,ak024,"50 km N of Anchorage, Alaska",earthquake',
    '2024-06-30T18:00:00.000Z,35.1,-117.6,7.2,1.1,ml,21,ci001,"12 km SW of Searles Valley, CA",earthquake',
    '2024-07-02T10:00:00.000Z,-20.5,-70.3,40.0,4.6,mb,80,us009,"offshore Tarapaca, Chile",earthquake',
    '2024-06-30T21:40:21.000Z,19.2,-155.4,2.1,2.3,md,40,hv004,"10 km NE of Pahala, Hawaii",earthquake',
    '2024-06-30T20:15:30.500Z,38.8,-122.8,1.5,0.9,md,12,nc002,"The Geysers, CA",earthquake',
    '2024-06-30T23:59:59.999Z,37.3,141.6,50.2,4.8,mb,95,us006,"Fukushima, Japan",earthquake',
    '2024-07-01T08:00:00.000Z,44.5,-110.7,6.0,1.8,ml,18,mb008,"Yellowstone National Park, Wyoming",earthquake',
    '2024-06-30T21:40:20.999Z,33.9,-116.4,9.9,1.4,ml,30,ci003,"8 km N of Indio, CA",earthquake',
    '2024-07-01T00:30:00.000Z,-6.2,130.1,120.0,5.1,mww,112,us007,"Banda Sea",earthquake',
    '2024-06-30T22:05:00.120Z,15.9,-98.2,25.0,4.2,mb,60,us005,"Oaxaca, Mexico",earthquake',
]

EARTHQUAKE_CSV = "\n".join([EARTHQUAKE_HEADER, *EARTHQUAKE_ROWS]) + "\n"

# Expected answer for (FROM_MS, 5): ids hv004, us005, us006, us007, ak024
EXPECTED_EARTHQUAKES = [
    (datetime(2024, 6, 30, 21, 40, 21, tzinfo=timezone.utc), 19.2, -155.4, 2.1, 2.3, "10 km NE of Pahala, Hawaii"),
    (datetime(2024, 6, 30, 22, 5, 0, 120000, tzinfo=timezone.utc), 15.9, -98.2, 25.0, 4.2, "Oaxaca, Mexico"),
    (datetime(2024, 6, 30, 23, 59, 59, 999000, tzinfo=timezone.utc), 37.3, 141.6, 50.2, 4.8, "Fukushima, Japan"),
    (datetime(2024, 7, 1, 0, 30, tzinfo=timezone.utc), -6.2, 130.1, 120.0, 5.1, "Banda Sea"),
    (datetime(2024, 7, 1, 3, 12, 45, 250000, tzinfo=timezone.utc), 61.2, -150.1, 35.4, 2.9, "50 km N of Anchorage, Alaska"),
]


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def trips_table(unit: str = "us") -> pa.Table:
    """Eight June 2024 trips, unordered, with the extra columns TLC ships."""
    pickups = [
        utc(2024, 6, 30, 23, 10, 0),
        utc(2024, 6, 1, 0, 5, 0),
        utc(2024, 6, 30, 21, 40, 21),
        utc(2024, 6, 30, 21, 45, 0),
        utc(2024, 6, 15, 12, 0, 0),
        utc(2024, 6, 30, 21, 40, 20),
        utc(2024, 6, 30, 22, 30, 0),
        utc(2024, 6, 30, 23, 55, 0),
    ]
    dropoffs = [p.replace(minute=(p.minute + 3) % 60) for p in pickups]
    naive = pa.timestamp(unit)
    return pa.table(
        {
            "VendorID": pa.array([1, 2, 2, 1, 1, 2, 1, 2], type=pa.int32()),
            "tpep_pickup_datetime": pa.array([p.replace(tzinfo=None) for p in pickups], type=naive),
            "tpep_dropoff_datetime": pa.array([d.replace(tzinfo=None) for d in dropoffs], type=naive),
            "passenger_count": pa.array([1, 1, 2, 3, 1, 1, 4, 2], type=pa.int64()),
            "trip_distance": pa.array([5.5, 1.0, 2.25, 3.1, 8.0, 0.7, 12.4, 1.9], type=pa.float64()),
            "fare_amount": pa.array([22.0, 6.5, 12.1, 15.0, 30.0, 5.0, 45.2, 9.8], type=pa.float64()),
        }
    )


def parquet_bytes(table: pa.Table) -> bytes:
    sink = pa.BufferOutputStream()
    pq.write_table(table, sink)
    return sink.getvalue().to_pybytes()


@pytest.fixture
def earthquake_csv_path(tmp_path):
    path = tmp_path / "raw" / "earthquakes.csv"
    path.parent.mkdir(exist_ok=True)
    path.write_text(EARTHQUAKE_CSV)
    return path


@pytest.fixture
def trips_raw_path(tmp_path):
    path = tmp_path / "raw" / "yellow_tripdata_2024-06.raw.parquet"
    path.parent.mkdir(exist_ok=True)
    pq.write_table(trips_table(), path)
    return path
