import numpy as np
import polars as pl
import pytest

from trip_duration.config import Config
from trip_duration.data_utils import generate_synthetic_rides
from trip_duration.pipeline import FeaturePipeline
from trip_duration.splitter import TimeSplitter
from trip_duration.trainer import ModelTrainer


@pytest.fixture(scope="module")
def fitted(tmp_path_factory):
    dest = tmp_path_factory.mktemp("model")
    train_path, test_path = generate_synthetic_rides(str(dest), n_train=3_000, n_test=500, seed=11)

    config = Config()
    config.model_params = {**config.model_params, "n_estimators": 30, "num_leaves": 15}
    pipeline = FeaturePipeline(config)
    result = pipeline.run(pl.read_parquet(train_path), pl.read_parquet(test_path))

    train_df, holdout_df = TimeSplitter(config).split_holdout(result.train)
    train_matrix = pipeline.project_features(train_df, has_target=True)
    holdout_matrix = pipeline.project_features(holdout_df, has_target=True)

    trainer = ModelTrainer(config)
    model = trainer.train(train_matrix, holdout_matrix)
    return config, trainer, model, result, holdout_matrix


def test_predictions_are_seconds(fitted):
    _, trainer, model, result, _ = fitted

    log_pred = trainer.predict_log_duration(model, result.test_matrix)
    seconds = trainer.predict_trip_duration(model, result.test_matrix)

    assert len(seconds) == result.test_matrix.height
    np.testing.assert_allclose(seconds, np.expm1(log_pred))
    assert np.median(seconds) > 60


def test_holdout_metrics(fitted):
    _, trainer, model, _, holdout_matrix = fitted
    metrics = trainer.evaluate_holdout(model, holdout_matrix)
    assert set(metrics) == {"rmse", "mae", "r2"}
    assert metrics["rmse"] > 0
    assert metrics["r2"] > 0


def test_test_matrix_has_no_target(fitted):
    config, trainer, _, result, _ = fitted
    X, y, features = trainer._prepare_arrays(result.test_matrix)
    assert y is None
    assert features == config.feature_columns
    assert list(X.columns) == config.feature_columns
    assert str(X["time_of_day"].dtype) == "category"
    assert X["store_and_fwd_flag"].isin([0, 1]).all()


def test_predictions_frame(fitted):
    _, trainer, model, result, _ = fitted
    durations = trainer.predict_trip_duration(model, result.test_matrix)

    out = trainer.predictions_frame(result.test["id"], durations)

    assert out.columns == ["id", "trip_duration"]
    assert out.height == result.test.height
    with pytest.raises(ValueError):
        trainer.predictions_frame(result.test["id"], durations[:-1])


def test_training_requires_target():
    trainer = ModelTrainer(Config())
    with pytest.raises(ValueError):
        trainer.train(pl.DataFrame({"log_distance": [1.0, 2.0]}))
