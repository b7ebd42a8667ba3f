import warnings
from datetime import date, datetime

import polars as pl
import pytest

from trip_duration.config import Config
from trip_duration.temporal import TemporalFeatureExtractor


def _features(config, timestamps):
    df = pl.DataFrame({"pickup_datetime": timestamps})
    return TemporalFeatureExtractor(config).transform(df)


@pytest.mark.parametrize(
    "hour, expected",
    [(7, False), (8, True), (10, True), (11, False), (12, False),
     (17, False), (18, True), (21, True), (22, False), (23, False)],
)
def test_weekday_rush_hour_boundaries(config, hour, expected):
    # 2016-01-05 is a Tuesday
    out = _features(config, [datetime(2016, 1, 5, hour, 30)])
    assert out["is_rush_hour"][0] is expected


@pytest.mark.parametrize(
    "hour, expected",
    [(8, False), (10, False), (17, False), (18, True), (21, True), (22, False)],
)
def test_weekend_rush_hour_only_in_evening(config, hour, expected):
    # 2016-01-09 is a Saturday
    out = _features(config, [datetime(2016, 1, 9, hour, 0)])
    assert out["is_rush_hour"][0] is expected


def test_time_of_day_covers_every_hour_once(config):
    out = _features(config, [datetime(2016, 3, 1, h, 59) for h in range(24)])
    expected = (
        ["EarlyMorning"] * 6 + ["Morning"] * 6 + ["Afternoon"] * 6 + ["Night"] * 6
    )
    assert out["time_of_day"].cast(pl.String).to_list() == expected


def test_weekday_names_and_weekend_flag(config):
    # 2016-01-04 is a Monday
    days = [datetime(2016, 1, 4 + i, 12) for i in range(7)]
    out = _features(config, days)
    assert out["pickup_weekday"].cast(pl.String).to_list() == [
        "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
    ]
    assert out["is_weekday"].to_list() == [True] * 5 + [False] * 2


def test_holiday_ignores_time_of_day(config):
    out = _features(
        config,
        [datetime(2016, 1, 1, 0, 0), datetime(2016, 1, 1, 23, 59), datetime(2016, 1, 2, 0, 0),
         datetime(2016, 5, 30, 9), datetime(2016, 7, 4, 9)],
    )
    assert out["is_holiday"].to_list() == [True, True, False, True, False]


def test_holiday_table_is_configurable():
    config = Config(holidays=(date(2016, 7, 4),))
    out = _features(config, [datetime(2016, 1, 1, 9), datetime(2016, 7, 4, 9)])
    assert out["is_holiday"].to_list() == [False, True]


def test_custom_rush_windows():
    config = Config(weekday_rush_windows=((5, 9),), weekend_rush_windows=())
    out = _features(
        config,
        [datetime(2016, 1, 5, 6), datetime(2016, 1, 5, 18), datetime(2016, 1, 9, 18)],
    )
    assert out["is_rush_hour"].to_list() == [True, False, False]


def test_timezone_aware_pickup_uses_local_calendar(config):
    utc = pl.Series("pickup_datetime", [datetime(2016, 1, 2, 3, 0)]).dt.replace_time_zone("UTC")
    local = utc.dt.convert_time_zone("America/New_York")
    out = TemporalFeatureExtractor(config).transform(local.to_frame())

    # 22:00 on Friday, New Year's Day, in New York
    row = out.row(0, named=True)
    assert row["pickup_weekday"] == "Friday"
    assert row["is_holiday"] is True
    assert row["time_of_day"] == "Night"
    assert row["is_rush_hour"] is False


def test_input_frame_is_not_mutated(config):
    df = pl.DataFrame({"pickup_datetime": [datetime(2016, 1, 5, 8)]})
    TemporalFeatureExtractor(config).transform(df)
    assert df.columns == ["pickup_datetime"]


def test_holiday_lookup_emits_no_deprecation_warning(config):
    with warnings.catch_warnings():
        warnings.simplefilter("error", DeprecationWarning)
        out = _features(config, [datetime(2016, 1, 18, 9), datetime(2016, 1, 19, 9)])
    assert out["is_holiday"].to_list() == [True, False]
