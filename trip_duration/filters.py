"""Train-only outlier rejection on trip duration and derived speed."""

from __future__ import annotations

import logging

import polars as pl

from trip_duration.config import Config
from trip_duration.errors import EmptyDatasetError

logger = logging.getLogger("TripDurationPipeline")


def _log_drop(stage: str, rows_before: int, rows_after: int) -> None:
    dropped = rows_before - rows_after
    logger.info(
        "%s: %d -> %d rows (dropped %d, %.2f%%)",
        stage, rows_before, rows_after, dropped,
        dropped / rows_before * 100 if rows_before else 0.0,
    )


def duration_percentile_filter(df: pl.DataFrame, config: Config) -> tuple[pl.DataFrame, float]:
    """Keep rows whose duration is at or below the configured percentile.

    The quantile uses linear interpolation, matching numpy and pandas.

    Args:
        df: Train partition.
        config: Pipeline configuration.

    Returns:
        (filtered_df, threshold) tuple.

    Raises:
        EmptyDatasetError: ``df`` has no rows with a duration.
    """
    duration = df[config.duration_column]
    if duration.drop_nulls().len() == 0:
        raise EmptyDatasetError("Cannot compute duration percentile on an empty train set")

    threshold = float(duration.quantile(config.duration_quantile, interpolation="linear"))
    out = df.filter(pl.col(config.duration_column) <= threshold)

    logger.info(
        "Duration p%g threshold: %.1f s", config.duration_quantile * 100, threshold
    )
    _log_drop("Duration filter", df.height, out.height)
    return out, threshold


def speed_filter(df: pl.DataFrame, config: Config) -> tuple[pl.DataFrame, int]:
    """Drop trips whose average speed is implausible.

    ``speed = distance * 3600 / trip_duration`` in km/h. Rows inside
    ``[min_speed_kmh, max_speed_kmh]`` are kept, bounds included. Zero
    durations leave speed undefined and are dropped with the too-slow rows.

    Args:
        df: Train partition carrying ``distance`` and the raw duration.
        config: Pipeline configuration.

    Returns:
        (filtered_df, speed_undefined_count) tuple. ``speed`` is not kept.
    """
    duration = pl.col(config.duration_column)
    undefined = df.filter(duration == 0).height
    if undefined:
        logger.warning("Speed undefined for %d zero-duration trips, dropping", undefined)

    out = (
        df.with_columns(
            pl.when(duration > 0)
            .then(pl.col("distance") * 3600 / duration)
            .otherwise(None)
            .alias("speed")
        )
        .filter(
            pl.col("speed").is_not_null()
            & (pl.col("speed") >= config.min_speed_kmh)
            & (pl.col("speed") <= config.max_speed_kmh)
        )
        .drop("speed")
    )

    _log_drop("Speed filter", df.height, out.height)
    return out, undefined
