import math

import polars as pl
import pytest

from trip_duration.transforms import apply_transforms


def test_train_gets_log_target_and_flags(config):
    df = pl.DataFrame({"distance": [0.0, 7.0], "trip_duration": [0, 900]})

    out = apply_transforms(df, config, has_target=True)

    assert out["log_trip_duration"].to_list() == pytest.approx([0.0, math.log1p(900)])
    assert out["log_distance"].to_list() == pytest.approx([0.0, math.log(8.0)])
    assert out["is_cancelled"].to_list() == [True, False]


def test_test_partition_has_no_target(config):
    df = pl.DataFrame({"distance": [2.5]})

    out = apply_transforms(df, config, has_target=False)

    assert "log_trip_duration" not in out.columns
    assert out.columns == ["distance", "log_distance", "is_cancelled"]


def test_cancelled_uses_exact_zero(config):
    df = pl.DataFrame({"distance": [0.0, 1e-12]})
    out = apply_transforms(df, config, has_target=False)
    assert out["is_cancelled"].to_list() == [True, False]
