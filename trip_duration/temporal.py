"""Calendar features derived from the pickup timestamp."""

from __future__ import annotations

import logging
from functools import reduce

import polars as pl

from trip_duration.config import TIME_OF_DAY_LABELS, WEEKDAY_NAMES, Config

logger = logging.getLogger("TripDurationPipeline")

WEEKDAY_DTYPE = pl.Enum(list(WEEKDAY_NAMES))
TIME_OF_DAY_DTYPE = pl.Enum(list(TIME_OF_DAY_LABELS))

TEMPORAL_COLUMNS = (
    "pickup_weekday",
    "is_weekday",
    "is_rush_hour",
    "is_holiday",
    "time_of_day",
)


def _in_windows(hour: pl.Expr, windows: tuple[tuple[int, int], ...]) -> pl.Expr:
    """True when ``hour`` lies strictly inside any of the ``(lo, hi)`` windows."""
    if not windows:
        return pl.lit(False)
    return reduce(
        lambda acc, expr: acc | expr,
        [(hour > lo) & (hour < hi) for lo, hi in windows],
    )


def rush_hour_expr(
    hour: pl.Expr,
    is_weekday: pl.Expr,
    weekday_windows: tuple[tuple[int, int], ...],
    weekend_windows: tuple[tuple[int, int], ...],
) -> pl.Expr:
    """Rush-hour flag; window bounds themselves are never flagged."""
    return (is_weekday & _in_windows(hour, weekday_windows)) | (
        ~is_weekday & _in_windows(hour, weekend_windows)
    )


def time_of_day_expr(hour: pl.Expr, breaks: tuple[int, int, int]) -> pl.Expr:
    early_end, morning_end, afternoon_end = breaks
    early, morning, afternoon, night = TIME_OF_DAY_LABELS
    return (
        pl.when(hour < early_end).then(pl.lit(early))
        .when(hour < morning_end).then(pl.lit(morning))
        .when(hour < afternoon_end).then(pl.lit(afternoon))
        .otherwise(pl.lit(night))
        .cast(TIME_OF_DAY_DTYPE)
    )


class TemporalFeatureExtractor:
    """Adds weekday, weekend, rush-hour, holiday and time-of-day columns.

    Timezone-aware pickup columns are decomposed in their own timezone; naive
    columns are read as local wall-clock time.

    Args:
        config: Pipeline configuration.
    """

    def __init__(self, config: Config) -> None:
        self._config = config

    def transform(self, df: pl.DataFrame) -> pl.DataFrame:
        """Return ``df`` with the five temporal feature columns appended.

        Args:
            df: Frame carrying the pickup timestamp column.

        Returns:
            New DataFrame; ``df`` is left untouched.
        """
        pickup = pl.col(self._config.datetime_column)
        holidays = pl.Series("holidays", list(self._config.holidays), dtype=pl.Date)

        df = df.with_columns([
            pickup.dt.strftime("%A").cast(WEEKDAY_DTYPE).alias("pickup_weekday"),
            (pickup.dt.weekday() <= 5).alias("is_weekday"),
            pickup.dt.date().is_in(holidays.implode()).alias("is_holiday"),
            pickup.dt.hour().alias("_pickup_hour"),
        ])

        hour = pl.col("_pickup_hour")
        df = df.with_columns([
            rush_hour_expr(
                hour,
                pl.col("is_weekday"),
                self._config.weekday_rush_windows,
                self._config.weekend_rush_windows,
            ).alias("is_rush_hour"),
            time_of_day_expr(hour, self._config.time_of_day_breaks).alias("time_of_day"),
        ])

        raw_columns = [c for c in df.columns if c not in TEMPORAL_COLUMNS and c != "_pickup_hour"]
        df = df.select(raw_columns + list(TEMPORAL_COLUMNS))
        logger.debug("Temporal features added for %d rows", df.height)
        return df
