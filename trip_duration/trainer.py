from __future__ import annotations

import logging
from typing import Any

import lightgbm as lgb
import numpy as np
import polars as pl
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score

from trip_duration.config import Config

logger = logging.getLogger("TripDurationPipeline")


class ModelTrainer:
    """Fits and applies the regression collaborator on feature matrices.

    The model sees ``log_trip_duration``; ``predict_trip_duration`` is the one
    place where predictions are mapped back to seconds.

    Args:
        config: Pipeline configuration.
    """

    def __init__(self, config: Config) -> None:
        self._config = config

    def _prepare_arrays(
        self, df: pl.DataFrame
    ) -> tuple[Any, np.ndarray | None, list[str]]:
        available_features = [
            c for c in self._config.feature_columns if c in df.columns
        ]
        numeric = df.select(available_features).with_columns(pl.col(pl.Boolean).cast(pl.Int8))
        if numeric.schema.get("store_and_fwd_flag") == pl.String:
            numeric = numeric.with_columns(
                (pl.col("store_and_fwd_flag") == "Y").cast(pl.Int8).alias("store_and_fwd_flag")
            )

        X = numeric.to_pandas()
        for col in self._config.categorical_features:
            if col in X.columns and str(X[col].dtype) != "category":
                X[col] = X[col].astype("category")

        y = None
        if self._config.target_column in df.columns:
            y = df.select(self._config.target_column).to_numpy().ravel()
        return X, y, available_features

    def train(
        self,
        train_matrix: pl.DataFrame,
        valid_matrix: pl.DataFrame | None = None,
    ) -> lgb.LGBMRegressor:
        """Fit LightGBM on ``log_trip_duration`` with the configured parameters.

        Args:
            train_matrix: Train feature matrix including the target.
            valid_matrix: Optional matrix for early stopping.

        Returns:
            Fitted regressor.
        """
        X_tr, y_tr, features = self._prepare_arrays(train_matrix)
        if y_tr is None:
            raise ValueError(f"Train matrix has no '{self._config.target_column}' column")

        params: dict[str, Any] = {
            "random_state": self._config.random_seed,
            **self._config.model_params,
        }
        model = lgb.LGBMRegressor(**params)

        fit_kwargs: dict[str, Any] = {}
        if valid_matrix is not None:
            X_val, y_val, _ = self._prepare_arrays(valid_matrix)
            fit_kwargs["eval_set"] = [(X_val, y_val)]
            fit_kwargs["callbacks"] = [
                lgb.early_stopping(stopping_rounds=self._config.early_stopping_rounds, verbose=False),
                lgb.log_evaluation(period=100),
            ]

        logger.info("Training on %d rows, %d features", len(y_tr), len(features))
        model.fit(X_tr, y_tr, **fit_kwargs)
        if valid_matrix is not None:
            logger.info("Best iteration: %s", model.best_iteration_)
        return model

    def predict_log_duration(self, model: lgb.LGBMRegressor, matrix: pl.DataFrame) -> np.ndarray:
        X, _, _ = self._prepare_arrays(matrix)
        return model.predict(X)

    def predict_trip_duration(self, model: lgb.LGBMRegressor, matrix: pl.DataFrame) -> np.ndarray:
        """Predicted durations in seconds, ``expm1`` of the model output."""
        return np.expm1(self.predict_log_duration(model, matrix))

    def evaluate_holdout(
        self, model: lgb.LGBMRegressor, holdout_matrix: pl.DataFrame
    ) -> dict[str, float]:
        """Score the model on the log target.

        RMSE on ``log1p`` durations is the RMSLE of the durations themselves.
        """
        X_hold, y_hold, _ = self._prepare_arrays(holdout_matrix)
        if y_hold is None:
            raise ValueError(f"Holdout matrix has no '{self._config.target_column}' column")
        y_pred = model.predict(X_hold)

        metrics = {
            "rmse": float(np.sqrt(mean_squared_error(y_hold, y_pred))),
            "mae": float(mean_absolute_error(y_hold, y_pred)),
            "r2": float(r2_score(y_hold, y_pred)),
        }
        logger.info(
            "Holdout RMSE (log): %.4f | MAE (log): %.4f | R2: %.4f",
            metrics["rmse"], metrics["mae"], metrics["r2"],
        )
        return metrics

    def predictions_frame(self, ids: pl.Series, durations: np.ndarray) -> pl.DataFrame:
        """Pair each test id with its predicted duration in seconds."""
        if len(ids) != len(durations):
            raise ValueError(f"Got {len(ids)} ids for {len(durations)} predictions")
        return pl.DataFrame({
            self._config.id_column: ids,
            self._config.duration_column: durations,
        })
