from __future__ import annotations

from datetime import datetime
from typing import Any

import polars as pl
import pytest

from trip_duration.config import Config

_DEFAULT_RIDE: dict[str, Any] = {
    "vendor_id": 1,
    "pickup_datetime": datetime(2016, 1, 5, 12, 0),
    "passenger_count": 1,
    "pickup_longitude": -74.0060,
    "pickup_latitude": 40.7128,
    "dropoff_longitude": -73.9352,
    "dropoff_latitude": 40.7306,
    "store_and_fwd_flag": "N",
    "trip_duration": 900,
}


def make_rides(rows: list[dict[str, Any]], with_target: bool = True) -> pl.DataFrame:
    """Raw partition built from per-row overrides of a default Manhattan ride."""
    records = []
    for i, overrides in enumerate(rows):
        record = {"id": f"id{i:04d}", **_DEFAULT_RIDE, **overrides}
        if not with_target:
            record.pop("trip_duration", None)
        records.append(record)
    return pl.DataFrame(records)


@pytest.fixture
def config() -> Config:
    return Config()


@pytest.fixture
def rides():
    return make_rides
