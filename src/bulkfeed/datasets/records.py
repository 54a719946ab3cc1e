"""Domain records returned to callers.

Field order is part of the public shape: serializers emit fields in
declaration order.
"""

from dataclasses import dataclass, fields
from datetime import datetime, timezone
from typing import Any


def format_time(dt: datetime) -> str:
    """RFC 3339 UTC rendering with a trailing Z."""
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class _Serializable:
    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization, preserving field order."""
        out: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            out[f.name] = format_time(value) if isinstance(value, datetime) else value
        return out


@dataclass(frozen=True)
class Earthquake(_Serializable):
    """One seismic event from the USGS feed."""

    time: datetime
    latitude: float
    longitude: float
    depth_km: float
    magnitude: float
    location: str


@dataclass(frozen=True)
class Trip(_Serializable):
    """One yellow-taxi trip from the TLC archive."""

    tpep_pickup_datetime: datetime
    tpep_dropoff_datetime: datetime
    trip_distance: float
    fare_amount: float
