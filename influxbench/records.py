"""
Synthetic sensor samples written by the benchmark.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List

TEST_SENSOR_ID = "test"


@dataclass(frozen=True)
class SensorSample:
    """One accelerometer reading of a simulated seismometer."""

    timestamp: datetime
    sensor_id: str
    x: float
    y: float
    z: float


def truncate_to_millis(instant: datetime) -> datetime:
    """Drop sub-millisecond precision and pin naive instants to UTC."""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.replace(microsecond=instant.microsecond - instant.microsecond % 1000)


def generate_batch(size: int, base: datetime, sensor_id: str = TEST_SENSOR_ID) -> List[SensorSample]:
    """
    Build ``size`` samples starting at ``base``.

    Sample ``i`` is stamped ``base + i`` milliseconds and carries ``i`` on all
    three axes.
    """
    if size < 0:
        raise ValueError(f"Batch size must be non-negative, got {size}")

    t0 = truncate_to_millis(base)
    return [
        SensorSample(
            timestamp=t0 + timedelta(milliseconds=i),
            sensor_id=sensor_id,
            x=float(i),
            y=float(i),
            z=float(i),
        )
        for i in range(size)
    ]
