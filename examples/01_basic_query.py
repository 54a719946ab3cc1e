"""Example 1: Basic Query

This example shows the most basic usage of bulkfeed: the five earliest
earthquakes and taxi trips at or after a timestamp.

The first run downloads and converts the partitions (the June 2024 trip file
is roughly 60 MB); later runs are served from the local cache. Pass --fake to
use synthetic records instead.
"""

import asyncio
import sys

from bulkfeed import get_earthquakes, get_trips, now_ms

# 2024-06-30T21:40:21Z
TRIPS_FROM_MS = 1719783621000


async def main(fake: bool) -> None:
    """Run basic query example."""
    print("=" * 60)
    print("bulkfeed — Example 1: Basic Query")
    print("=" * 60)
    print()

    print("Earthquakes in the last 24 hours (first 5):")
    quakes = await get_earthquakes(now_ms() - 24 * 60 * 60 * 1000, 5, fake_data=fake)
    for q in quakes:
        print(f"  {q.time:%Y-%m-%d %H:%M:%S}  M{q.magnitude:.1f}  {q.location}")
    print()

    print("Taxi trips from 2024-06-30 21:40:21 UTC (first 5):")
    trips = await get_trips(TRIPS_FROM_MS, 5, fake_data=fake)
    for t in trips:
        print(
            f"  {t.tpep_pickup_datetime:%H:%M:%S} -> {t.tpep_dropoff_datetime:%H:%M:%S}"
            f"  {t.trip_distance:5.2f} mi  ${t.fare_amount:.2f}"
        )


if __name__ == "__main__":
    asyncio.run(main(fake="--fake" in sys.argv))
