from __future__ import annotations

import logging
import os

import numpy as np
import polars as pl

from trip_duration.geo import distance_km

logger = logging.getLogger("TripDurationPipeline")

_START = np.datetime64("2016-01-01T00:00:00", "us")
_END = np.datetime64("2016-07-01T00:00:00", "us")

# lat_min, lat_max, lon_min, lon_max
_NYC_BOX = (40.63, 40.85, -74.03, -73.77)


def _sample_locations(
    rng: np.random.Generator, hotspots: np.ndarray, n: int, hotspot_share: float
) -> tuple[np.ndarray, np.ndarray]:
    lat_min, lat_max, lon_min, lon_max = _NYC_BOX
    lat = rng.uniform(lat_min, lat_max, size=n)
    lon = rng.uniform(lon_min, lon_max, size=n)

    from_hotspot = rng.random(n) < hotspot_share
    picks = rng.integers(0, len(hotspots), size=n)
    lat = np.where(from_hotspot, hotspots[picks, 0], lat)
    lon = np.where(from_hotspot, hotspots[picks, 1], lon)
    return lat, lon


def _generate_rides(
    rng: np.random.Generator, hotspots: np.ndarray, n: int, id_offset: int
) -> pl.DataFrame:
    span = int((_END - _START) / np.timedelta64(1, "s"))
    hour_probs = np.array([
        0.025, 0.018, 0.013, 0.009, 0.008, 0.010, 0.022, 0.038,
        0.046, 0.046, 0.044, 0.045, 0.048, 0.048, 0.050, 0.050,
        0.046, 0.052, 0.062, 0.062, 0.058, 0.056, 0.053, 0.041,
    ])
    hour_probs = hour_probs / hour_probs.sum()
    days = rng.integers(0, span // 86_400, size=n)
    seconds = (
        days * 86_400
        + rng.choice(24, size=n, p=hour_probs) * 3_600
        + rng.integers(0, 3_600, size=n)
    )
    pickups = _START + seconds.astype("timedelta64[s]")

    pickup_lat, pickup_lon = _sample_locations(rng, hotspots, n, hotspot_share=0.4)
    dropoff_lat, dropoff_lon = _sample_locations(rng, hotspots, n, hotspot_share=0.3)

    return pl.DataFrame({
        "id": [f"id{i:07d}" for i in range(id_offset, id_offset + n)],
        "vendor_id": rng.choice([1, 2], size=n, p=[0.47, 0.53]).astype(np.int64),
        "pickup_datetime": pickups,
        "passenger_count": rng.choice(
            [1, 2, 3, 4, 5, 6], size=n, p=[0.71, 0.14, 0.04, 0.02, 0.05, 0.04],
        ).astype(np.int64),
        "pickup_longitude": pickup_lon,
        "pickup_latitude": pickup_lat,
        "dropoff_longitude": dropoff_lon,
        "dropoff_latitude": dropoff_lat,
        "store_and_fwd_flag": rng.choice(["N", "Y"], size=n, p=[0.995, 0.005]),
    })


def build_synthetic_rides(
    n_train: int = 100_000,
    n_test: int = 25_000,
    seed: int = 42,
) -> tuple[pl.DataFrame, pl.DataFrame]:
    """Synthetic train and test partitions with the raw ride schema.

    Part of the coordinates come from a fixed pool of popular spots shared by
    both partitions, so location frequencies are above 1. The train partition
    gets zero-duration trips and multi-day outliers mixed in.

    Args:
        n_train: Train rows.
        n_test: Test rows.
        seed: Random seed.

    Returns:
        (train_df, test_df) tuple.
    """
    rng = np.random.default_rng(seed)
    lat_min, lat_max, lon_min, lon_max = _NYC_BOX
    hotspots = np.column_stack([
        rng.uniform(lat_min, lat_max, size=300),
        rng.uniform(lon_min, lon_max, size=300),
    ])

    train = _generate_rides(rng, hotspots, n_train, id_offset=0)
    test = _generate_rides(rng, hotspots, n_test, id_offset=n_train)

    distance = distance_km(
        train["pickup_latitude"].to_numpy(),
        train["pickup_longitude"].to_numpy(),
        train["dropoff_latitude"].to_numpy(),
        train["dropoff_longitude"].to_numpy(),
    )
    speed_kmh = rng.normal(18, 6, size=n_train).clip(4, 60)
    duration = (distance / speed_kmh * 3_600 + rng.integers(60, 300, size=n_train)).astype(np.int64)

    anomalies = rng.choice(n_train, size=max(n_train // 100, 2), replace=False)
    half = len(anomalies) // 2
    duration[anomalies[:half]] = 0
    duration[anomalies[half:]] = rng.integers(86_400, 3_600_000, size=len(anomalies) - half)

    train = train.with_columns(pl.Series("trip_duration", duration))
    train = train.with_columns(
        (pl.col("pickup_datetime") + pl.duration(seconds=pl.col("trip_duration")))
        .alias("dropoff_datetime")
    ).select([
        "id", "vendor_id", "pickup_datetime", "dropoff_datetime", "passenger_count",
        "pickup_longitude", "pickup_latitude", "dropoff_longitude", "dropoff_latitude",
        "store_and_fwd_flag", "trip_duration",
    ])
    return train, test


def _write_partitions(
    train: pl.DataFrame, test: pl.DataFrame, train_path: str, test_path: str
) -> tuple[str, str]:
    for path in (train_path, test_path):
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    train.write_parquet(train_path)
    test.write_parquet(test_path)
    logger.info(
        "Generated synthetic rides: %s (%d rows), %s (%d rows)",
        train_path, train.height, test_path, test.height,
    )
    return train_path, test_path


def generate_synthetic_rides(
    dest_dir: str = ".",
    n_train: int = 100_000,
    n_test: int = 25_000,
    seed: int = 42,
) -> tuple[str, str]:
    """Write ``train.parquet`` and ``test.parquet`` into ``dest_dir``.

    Returns:
        (train_path, test_path) tuple.
    """
    train, test = build_synthetic_rides(n_train, n_test, seed)
    return _write_partitions(
        train,
        test,
        os.path.join(dest_dir, "train.parquet"),
        os.path.join(dest_dir, "test.parquet"),
    )


def resolve_data(
    train_path: str,
    test_path: str,
    n_train: int = 100_000,
    n_test: int = 25_000,
    seed: int = 42,
) -> tuple[str, str]:
    """Return the given paths, generating synthetic files when both are missing.

    Raises:
        FileNotFoundError: Only one of the two partitions exists. Generating
            the other one would pair real rides with synthetic ones.
    """
    train_exists = os.path.exists(train_path)
    test_exists = os.path.exists(test_path)
    if train_exists and test_exists:
        logger.info("Data files found locally: %s, %s", train_path, test_path)
        return train_path, test_path
    if train_exists or test_exists:
        missing = test_path if train_exists else train_path
        raise FileNotFoundError(f"Partition file missing: {missing}")

    logger.warning("Data files missing, generating synthetic rides")
    train, test = build_synthetic_rides(n_train, n_test, seed)
    return _write_partitions(train, test, train_path, test_path)
