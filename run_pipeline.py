"""Trip duration feature pipeline, end to end.

Loads the train and test partitions, builds the cleaned feature matrices,
fits the LightGBM collaborator on a chronological split and predicts test
durations. Nothing is written to disk besides generated input data.
"""

from __future__ import annotations

import logging
import os

from trip_duration.config import Config
from trip_duration.data_utils import resolve_data
from trip_duration.pipeline import FeaturePipeline
from trip_duration.splitter import TimeSplitter
from trip_duration.trainer import ModelTrainer

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("TripDurationPipeline")


def run_pipeline() -> None:
    """Orchestrate feature building, training and test prediction."""
    data_dir = os.path.dirname(os.path.abspath(__file__))
    config = Config()
    train_path, test_path = resolve_data(
        os.path.join(data_dir, config.train_path),
        os.path.join(data_dir, config.test_path),
        n_train=config.synthetic_train_rows,
        n_test=config.synthetic_test_rows,
        seed=config.random_seed,
    )

    # -- Feature pipeline ---
    pipeline = FeaturePipeline(config)
    result = pipeline.run(pipeline.load(train_path), pipeline.load(test_path))
    report = result.report
    logger.info(
        "Train rows: %d in, %d after validation, %d after duration cut (%.0f s), %d after speed filter",
        report.train_validation.rows_in,
        report.train_validation.rows_out,
        report.rows_after_duration_filter,
        report.duration_threshold,
        report.rows_after_speed_filter,
    )

    # -- Split holdout ---
    splitter = TimeSplitter(config)
    train_df, holdout_df = splitter.split_holdout(result.train)
    train_matrix = pipeline.project_features(train_df, has_target=True)
    holdout_matrix = pipeline.project_features(holdout_df, has_target=True)
    splitter.check_target_drift(
        train_matrix[config.target_column].to_numpy(),
        holdout_matrix[config.target_column].to_numpy(),
    )

    # -- Training ---
    trainer = ModelTrainer(config)
    logger.info("=" * 60)
    logger.info("Model training")
    logger.info("=" * 60)
    model = trainer.train(train_matrix, holdout_matrix)

    logger.info("=" * 60)
    logger.info("Evaluation on holdout")
    logger.info("=" * 60)
    trainer.evaluate_holdout(model, holdout_matrix)

    # -- Test predictions ---
    durations = trainer.predict_trip_duration(model, result.test_matrix)
    predictions = trainer.predictions_frame(result.test[config.id_column], durations)
    logger.info("Predicted %d test trips, median %.0f s", predictions.height, float(predictions[config.duration_column].median()))

    logger.info("Pipeline complete.")


if __name__ == "__main__":
    run_pipeline()
