"""Skew correction and cancellation flag."""

from __future__ import annotations

import polars as pl

from trip_duration.config import Config


def apply_transforms(df: pl.DataFrame, config: Config, has_target: bool) -> pl.DataFrame:
    """Add ``log_distance``, ``is_cancelled`` and, for train, the log target.

    Args:
        df: Frame carrying ``distance`` and, when ``has_target``, the raw duration.
        config: Pipeline configuration.
        has_target: Whether the partition carries ground-truth duration.

    Returns:
        New DataFrame with the transformed columns appended.
    """
    if has_target:
        df = df.with_columns(
            pl.col(config.duration_column).cast(pl.Float64).log1p().alias(config.target_column)
        )
    df = df.with_columns(pl.col("distance").log1p().alias("log_distance"))
    # log1p(0) is exactly 0, so zero-distance trips compare equal
    return df.with_columns((pl.col("log_distance") == 0.0).alias("is_cancelled"))
