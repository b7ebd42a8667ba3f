"""Chronological holdout for evaluating the model collaborator."""

from __future__ import annotations

import logging

import numpy as np
import polars as pl

from trip_duration.config import Config

logger = logging.getLogger("TripDurationPipeline")


class TimeSplitter:
    """Chronological data splitting to prevent data leakage.

    Sorts the featured train partition by pickup time and carves out a holdout
    set from the tail.

    Args:
        config: Pipeline configuration.
    """

    def __init__(self, config: Config) -> None:
        self._config = config

    def split_holdout(
        self, df: pl.DataFrame
    ) -> tuple[pl.DataFrame, pl.DataFrame]:
        """Reserve the latest fraction of data as holdout.

        Args:
            df: Featured train partition with the pickup timestamp.

        Returns:
            (train_df, holdout_df) tuple.
        """
        df = df.sort(self._config.datetime_column, maintain_order=True)
        n = df.height
        split_idx = int(n * (1 - self._config.holdout_fraction))

        train_df = df.slice(0, split_idx)
        holdout_df = df.slice(split_idx, n - split_idx)

        if train_df.height and holdout_df.height:
            logger.info(
                "Train period: %s to %s (%d rows)",
                train_df[self._config.datetime_column].min(),
                train_df[self._config.datetime_column].max(),
                train_df.height,
            )
            logger.info(
                "Holdout period: %s to %s (%d rows)",
                holdout_df[self._config.datetime_column].min(),
                holdout_df[self._config.datetime_column].max(),
                holdout_df.height,
            )

        return train_df, holdout_df

    @staticmethod
    def check_target_drift(y_train: np.ndarray, y_test: np.ndarray) -> float:
        """Log a warning if train/holdout target means differ by more than 20%.

        Args:
            y_train: Target values in the training part.
            y_test: Target values in the holdout part.

        Returns:
            Drift in percent of the training mean (0 when that mean is 0).
        """
        mean_train = float(np.mean(y_train))
        mean_test = float(np.mean(y_test))
        if mean_train == 0:
            return 0.0
        drift_pct = abs(mean_train - mean_test) / abs(mean_train) * 100
        logger.info(
            "Target mean: train=%.4f, holdout=%.4f (drift=%.1f%%)",
            mean_train, mean_test, drift_pct,
        )
        if drift_pct > 20:
            logger.warning("Target drift %.1f%% exceeds 20%% threshold!", drift_pct)
        return drift_pct
