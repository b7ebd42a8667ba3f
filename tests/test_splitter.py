from datetime import datetime, timedelta

import numpy as np
import polars as pl
import pytest

from trip_duration.config import Config
from trip_duration.splitter import TimeSplitter


def test_holdout_is_the_latest_slice():
    start = datetime(2016, 1, 1)
    df = pl.DataFrame({
        "pickup_datetime": [start + timedelta(hours=h) for h in range(100)][::-1],
        "log_trip_duration": np.linspace(5, 7, 100),
    })
    splitter = TimeSplitter(Config(holdout_fraction=0.2))

    train_df, holdout_df = splitter.split_holdout(df)

    assert train_df.height == 80
    assert holdout_df.height == 20
    assert train_df["pickup_datetime"].max() < holdout_df["pickup_datetime"].min()


def test_target_drift_is_reported_in_percent():
    drift = TimeSplitter.check_target_drift(np.array([6.0, 6.0]), np.array([6.6, 6.6]))
    assert drift == pytest.approx(10.0)
    assert TimeSplitter.check_target_drift(np.array([0.0]), np.array([1.0])) == 0.0
