"""Loading, validation, feature engineering and cleaning of both partitions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import polars as pl

from trip_duration.config import Config
from trip_duration.filters import duration_percentile_filter, speed_filter
from trip_duration.frequency import LocationFrequencyTable
from trip_duration.geo import distance_km
from trip_duration.temporal import TemporalFeatureExtractor
from trip_duration.transforms import apply_transforms
from trip_duration.validation import ValidationReport, validate_records

logger = logging.getLogger("TripDurationPipeline")


class Stage(str, Enum):
    """Pipeline stages in execution order."""

    LOAD = "Load"
    VALIDATE = "Validate"
    TEMPORAL_FEATURES = "TemporalFeatures"
    GEO_DISTANCE = "GeoDistance"
    FREQUENCY_JOIN = "FrequencyJoin"
    TRANSFORM = "Transform"
    DURATION_FILTER = "DurationFilter"
    SPEED_FILTER = "SpeedFilter"
    FEATURE_PROJECTION = "FeatureProjection"


@dataclass(frozen=True)
class PipelineReport:
    """Row accounting for one run.

    Args:
        train_validation: Validation counts of the train partition.
        test_validation: Validation counts of the test partition.
        duration_threshold: Percentile cut applied to trip duration (seconds).
        rows_after_duration_filter: Train rows kept by the percentile cut.
        speed_undefined: Zero-duration train rows dropped by the speed filter.
        rows_after_speed_filter: Train rows kept by the speed filter.
    """

    train_validation: ValidationReport
    test_validation: ValidationReport
    duration_threshold: float
    rows_after_duration_filter: int
    speed_undefined: int
    rows_after_speed_filter: int


@dataclass(frozen=True)
class PipelineResult:
    """Enriched partitions, their feature matrices and the state needed to reproduce them."""

    train: pl.DataFrame
    test: pl.DataFrame
    train_matrix: pl.DataFrame
    test_matrix: pl.DataFrame
    frequency_table: LocationFrequencyTable
    report: PipelineReport


class FeaturePipeline:
    """Runs every stage over train and test with one shared code path.

    Only the duration-dependent steps (log target, percentile and speed
    filters) are switched on by ``has_target``; everything else is applied
    identically, in the same order, to both partitions.

    Args:
        config: Pipeline configuration.
    """

    def __init__(self, config: Config) -> None:
        self._config = config
        self._temporal = TemporalFeatureExtractor(config)

    def load(self, path: str) -> pl.DataFrame:
        """Read one partition from parquet or CSV.

        Args:
            path: File path; ``.csv`` files get their dates parsed.

        Returns:
            Raw partition.
        """
        if Path(path).suffix.lower() == ".csv":
            df = pl.read_csv(path, try_parse_dates=True)
        else:
            df = pl.read_parquet(path)
        logger.info("%s: loaded %s (%d rows)", Stage.LOAD.value, path, df.height)
        return df

    def enrich(self, df: pl.DataFrame) -> pl.DataFrame:
        """Per-row stages: temporal features, then haversine distance.

        Args:
            df: Validated partition.

        Returns:
            New DataFrame with temporal columns and ``distance``.
        """
        df = self._temporal.transform(df)
        distance = distance_km(
            df["pickup_latitude"].to_numpy(),
            df["pickup_longitude"].to_numpy(),
            df["dropoff_latitude"].to_numpy(),
            df["dropoff_longitude"].to_numpy(),
            radius_km=self._config.earth_radius_km,
        )
        return df.with_columns(pl.Series("distance", distance, dtype=pl.Float64))

    def transform(
        self,
        df: pl.DataFrame,
        frequency_table: LocationFrequencyTable,
        has_target: bool = False,
        partition: str = "test",
    ) -> pl.DataFrame:
        """Validate, enrich, join frequencies and transform one partition.

        Use this at inference time with the table built during training so
        frequencies stay comparable to the ones the model was fit on.

        Args:
            df: Raw partition.
            frequency_table: Table from a previous ``run``.
            has_target: Whether the partition carries ground-truth duration.
            partition: Name used in log lines.

        Returns:
            Fully featured partition, not outlier-filtered.
        """
        df, _ = validate_records(df, self._config, has_target, partition)
        df = self.enrich(df)
        df = frequency_table.attach(df)
        return apply_transforms(df, self._config, has_target)

    def project_features(self, df: pl.DataFrame, has_target: bool) -> pl.DataFrame:
        """Select the modeling columns in their fixed order.

        Args:
            df: Fully featured partition.
            has_target: Keep ``log_trip_duration`` when True.

        Returns:
            Feature matrix.
        """
        columns = [
            c for c in self._config.matrix_columns
            if has_target or c != self._config.target_column
        ]
        return df.select(columns)

    def run(self, train: pl.DataFrame, test: pl.DataFrame) -> PipelineResult:
        """Execute the whole pipeline on a train/test pair.

        Args:
            train: Raw train partition, with ``trip_duration``.
            test: Raw test partition.

        Returns:
            Enriched partitions, feature matrices, the frequency table and the
            row report.
        """
        logger.info("%s: train %d rows, test %d rows", Stage.VALIDATE.value, train.height, test.height)
        train, train_report = validate_records(train, self._config, True, "train")
        test, test_report = validate_records(test, self._config, False, "test")

        logger.info(
            "%s + %s", Stage.TEMPORAL_FEATURES.value, Stage.GEO_DISTANCE.value
        )
        train = self.enrich(train)
        test = self.enrich(test)

        logger.info(Stage.FREQUENCY_JOIN.value)
        table = LocationFrequencyTable.build(train, test)
        train = table.attach(train)
        test = table.attach(test)

        logger.info(Stage.TRANSFORM.value)
        train = apply_transforms(train, self._config, has_target=True)
        test = apply_transforms(test, self._config, has_target=False)

        logger.info("%s (train only)", Stage.DURATION_FILTER.value)
        train, threshold = duration_percentile_filter(train, self._config)
        rows_after_duration = train.height
        logger.info("%s (train only)", Stage.SPEED_FILTER.value)
        train, undefined = speed_filter(train, self._config)

        train_matrix = self.project_features(train, has_target=True)
        test_matrix = self.project_features(test, has_target=False)
        logger.info(
            "%s complete. Train matrix: %d x %d, test matrix: %d x %d",
            Stage.FEATURE_PROJECTION.value,
            train_matrix.height, train_matrix.width,
            test_matrix.height, test_matrix.width,
        )

        report = PipelineReport(
            train_validation=train_report,
            test_validation=test_report,
            duration_threshold=threshold,
            rows_after_duration_filter=rows_after_duration,
            speed_undefined=undefined,
            rows_after_speed_filter=train.height,
        )
        return PipelineResult(
            train=train,
            test=test,
            train_matrix=train_matrix,
            test_matrix=test_matrix,
            frequency_table=table,
            report=report,
        )
