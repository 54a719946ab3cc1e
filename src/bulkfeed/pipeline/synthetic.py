"""Synthetic records for demos and fallback mode.

Randomness comes from an explicitly passed numpy Generator; when none is
given a fresh one is constructed per call. There is no module-level RNG.
"""

from datetime import timedelta

import numpy as np

from bulkfeed.datasets.partitions import ms_to_datetime
from bulkfeed.datasets.records import Earthquake, Trip
from bulkfeed.errors import InvalidQueryError


def _check(n_results: int) -> None:
    if n_results < 0:
        raise InvalidQueryError(f"n_results must be >= 0, got {n_results}")


def fake_earthquakes(
    from_ms: int,
    n_results: int,
    rng: np.random.Generator | None = None,
) -> list[Earthquake]:
    """One random event per minute starting at ``from_ms``."""
    _check(n_results)
    rng = rng or np.random.default_rng()
    start = ms_to_datetime(from_ms)
    return [
        Earthquake(
            time=start + timedelta(minutes=i),
            latitude=float(rng.uniform(-90.0, 90.0)),
            longitude=float(rng.uniform(-180.0, 180.0)),
            depth_km=float(rng.uniform(1.0, 700.0)),
            magnitude=float(rng.uniform(1.0, 7.5)),
            location="Somewhere",
        )
        for i in range(n_results)
    ]


def fake_trips(
    from_ms: int,
    n_results: int,
    rng: np.random.Generator | None = None,
) -> list[Trip]:
    """Random trips picked up within a minute of ``from_ms``, sorted by pickup."""
    _check(n_results)
    rng = rng or np.random.default_rng()
    start = ms_to_datetime(from_ms - from_ms % 1000)
    trips = []
    for _ in range(n_results):
        pickup = start + timedelta(seconds=int(rng.integers(0, 60)))
        trips.append(
            Trip(
                tpep_pickup_datetime=pickup,
                tpep_dropoff_datetime=pickup + timedelta(seconds=int(rng.integers(300, 3600))),
                trip_distance=float(rng.uniform(0.5, 20.0)),
                fare_amount=float(rng.uniform(2.5, 100.0)),
            )
        )
    return sorted(trips, key=lambda t: t.tpep_pickup_datetime)
