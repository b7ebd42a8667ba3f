"""Pipeline configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any

WEEKDAY_NAMES: tuple[str, ...] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

TIME_OF_DAY_LABELS: tuple[str, ...] = ("EarlyMorning", "Morning", "Afternoon", "Night")

# Operating window of the dataset: January to June 2016.
HOLIDAYS_2016_H1: tuple[date, ...] = (
    date(2016, 1, 1),    # New Year's Day
    date(2016, 1, 18),   # Martin Luther King Jr. Day
    date(2016, 2, 12),   # Lincoln's Birthday
    date(2016, 2, 15),   # Presidents' Day
    date(2016, 5, 8),    # Mother's Day
    date(2016, 5, 30),   # Memorial Day
    date(2016, 6, 19),   # Father's Day
)


@dataclass
class Config:
    """Central configuration for the entire pipeline.

    Args:
        train_path: Parquet or CSV file holding the train partition.
        test_path: Parquet or CSV file holding the test partition.
        id_column: Opaque row identifier, carried to the prediction table.
        datetime_column: Pickup timestamp used for temporal features.
        dropoff_column: Dropoff timestamp (train only, not used in features).
        duration_column: Ground-truth duration in seconds (train only).
        target_column: Log-transformed duration handed to the model.
        earth_radius_km: Sphere radius used by the haversine distance.
        holidays: Calendar dates flagged as holidays.
        weekday_rush_windows: Open ``(lo, hi)`` hour intervals for Mon-Fri.
        weekend_rush_windows: Open ``(lo, hi)`` hour intervals for Sat-Sun.
        time_of_day_breaks: Hours where EarlyMorning, Morning and Afternoon end.
        duration_quantile: Quantile of trip duration kept by the percentile cut.
        min_speed_kmh: Slowest plausible speed, inclusive.
        max_speed_kmh: Fastest plausible speed, inclusive.
        drop_malformed: Drop malformed / invalid-geometry rows instead of raising.
        matrix_columns: Ordered feature matrix columns (target included).
        categorical_features: Columns treated as categorical by LightGBM.
        holdout_fraction: Fraction of latest train rows reserved for evaluation.
        model_params: Fixed LightGBM parameters.
        early_stopping_rounds: Patience when a validation set is given.
        synthetic_train_rows: Train size for generated data.
        synthetic_test_rows: Test size for generated data.
        random_seed: Reproducibility seed.
    """

    train_path: str = "train.parquet"
    test_path: str = "test.parquet"

    id_column: str = "id"
    datetime_column: str = "pickup_datetime"
    dropoff_column: str = "dropoff_datetime"
    duration_column: str = "trip_duration"
    target_column: str = "log_trip_duration"

    # Geometry
    earth_radius_km: float = 6373.0

    # Calendar tables
    holidays: tuple[date, ...] = HOLIDAYS_2016_H1
    weekday_rush_windows: tuple[tuple[int, int], ...] = ((7, 11), (17, 22))
    weekend_rush_windows: tuple[tuple[int, int], ...] = ((17, 22),)
    time_of_day_breaks: tuple[int, int, int] = (6, 12, 18)

    # Outlier thresholds
    duration_quantile: float = 0.99
    min_speed_kmh: float = 1.0
    max_speed_kmh: float = 100.0

    drop_malformed: bool = False

    # Features
    matrix_columns: list[str] = field(default_factory=lambda: [
        "vendor_id",
        "passenger_count",
        "store_and_fwd_flag",
        "log_trip_duration",
        "pickup_weekday",
        "log_distance",
        "is_weekday",
        "is_rush_hour",
        "is_holiday",
        "time_of_day",
        "pickup_location_frequency",
        "dropoff_location_frequency",
        "is_cancelled",
    ])

    categorical_features: list[str] = field(default_factory=lambda: [
        "vendor_id",
        "pickup_weekday",
        "time_of_day",
    ])

    # Holdout
    holdout_fraction: float = 0.15

    # Model collaborator
    model_params: dict[str, Any] = field(default_factory=lambda: {
        "objective": "regression",
        "metric": "rmse",
        "n_estimators": 500,
        "learning_rate": 0.1,
        "num_leaves": 63,
        "min_child_samples": 20,
        "subsample": 0.9,
        "subsample_freq": 1,
        "colsample_bytree": 0.9,
        "verbosity": -1,
    })
    early_stopping_rounds: int = 50

    # Synthetic data
    synthetic_train_rows: int = 100_000
    synthetic_test_rows: int = 25_000

    random_seed: int = 42

    @property
    def feature_columns(self) -> list[str]:
        """Model input columns, i.e. the matrix without the target."""
        return [c for c in self.matrix_columns if c != self.target_column]
