"""Raw record checks run before any feature is derived."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import polars as pl

from trip_duration.config import Config
from trip_duration.errors import InvalidGeometryError, MalformedRecordError

logger = logging.getLogger("TripDurationPipeline")

COORDINATE_COLUMNS = (
    "pickup_longitude",
    "pickup_latitude",
    "dropoff_longitude",
    "dropoff_latitude",
)

CATEGORICAL_COLUMNS = ("vendor_id", "store_and_fwd_flag")


@dataclass(frozen=True)
class ValidationReport:
    """Row counts for one partition.

    Args:
        rows_in: Rows received.
        malformed: Rows with missing or impossible raw fields.
        invalid_geometry: Well-formed rows with out-of-range coordinates.
        rows_out: Rows handed to feature extraction.
    """

    rows_in: int
    malformed: int
    invalid_geometry: int
    rows_out: int


def required_columns(config: Config, has_target: bool) -> list[str]:
    columns = [
        config.id_column,
        config.datetime_column,
        *COORDINATE_COLUMNS,
        "passenger_count",
        *CATEGORICAL_COLUMNS,
    ]
    if has_target:
        columns.append(config.duration_column)
    return columns


def _malformed_expr(config: Config, has_target: bool) -> pl.Expr:
    checked = [config.datetime_column, *COORDINATE_COLUMNS, "passenger_count"]
    if has_target:
        checked.append(config.duration_column)

    expr = pl.any_horizontal([pl.col(c).is_null() for c in checked])
    expr = expr | pl.any_horizontal([pl.col(c).is_nan() for c in COORDINATE_COLUMNS])
    expr = expr | (pl.col("passenger_count") < 0)
    if has_target:
        expr = expr | (pl.col(config.duration_column) < 0)
    return expr.fill_null(True)


def _invalid_geometry_expr() -> pl.Expr:
    return pl.any_horizontal(
        [pl.col(c).abs() > 90 for c in ("pickup_latitude", "dropoff_latitude")]
        + [pl.col(c).abs() > 180 for c in ("pickup_longitude", "dropoff_longitude")]
    ).fill_null(False)


def validate_records(
    df: pl.DataFrame, config: Config, has_target: bool, partition: str = "train"
) -> tuple[pl.DataFrame, ValidationReport]:
    """Check required columns and classify bad rows.

    Coordinates are cast to Float64 so that frequency keys of both partitions
    share one dtype. Bad rows are always counted. Unless
    ``config.drop_malformed`` is set, any bad row raises; otherwise the rows
    are removed and the counts are logged and reported.

    Args:
        df: Raw partition.
        config: Pipeline configuration.
        has_target: Whether the partition carries ground-truth duration.
        partition: Name used in log lines and error messages.

    Returns:
        (clean_df, report) tuple.

    Raises:
        MalformedRecordError: A required column is missing, or rows are
            malformed and dropping is disabled.
        InvalidGeometryError: Rows have out-of-range coordinates and dropping
            is disabled.
    """
    missing = [c for c in required_columns(config, has_target) if c not in df.columns]
    if missing:
        raise MalformedRecordError(f"{partition}: missing required columns {missing}")

    df = df.with_columns([pl.col(c).cast(pl.Float64) for c in COORDINATE_COLUMNS])
    flagged = df.with_columns(
        _malformed_expr(config, has_target).alias("_malformed"),
        _invalid_geometry_expr().alias("_invalid_geometry"),
    )
    malformed = flagged.filter(pl.col("_malformed")).height
    invalid = flagged.filter(~pl.col("_malformed") & pl.col("_invalid_geometry")).height

    if malformed or invalid:
        logger.warning(
            "%s: %d malformed rows, %d rows with invalid geometry",
            partition, malformed, invalid,
        )
        if not config.drop_malformed:
            if malformed:
                raise MalformedRecordError(
                    f"{partition}: {malformed} malformed rows", count=malformed
                )
            raise InvalidGeometryError(
                f"{partition}: {invalid} rows with coordinates out of range", count=invalid
            )

    out = flagged.filter(~pl.col("_malformed") & ~pl.col("_invalid_geometry")).drop(
        "_malformed", "_invalid_geometry"
    )
    report = ValidationReport(
        rows_in=df.height, malformed=malformed, invalid_geometry=invalid, rows_out=out.height
    )
    return out, report
