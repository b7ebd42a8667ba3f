import math

import numpy as np
import polars as pl
import pytest

from trip_duration.geo import EARTH_RADIUS_KM, distance_km

PAIRS = [
    ((40.7128, -74.0060), (40.7306, -73.9352)),
    ((40.6413, -73.7781), (40.7769, -73.8740)),
    ((-33.8688, 151.2093), (51.5074, -0.1278)),
    ((0.0, 0.0), (0.0, 179.9)),
]


def _reference(lat1, lon1, lat2, lon2):
    lat1, lon1, lat2, lon2 = map(math.radians, (lat1, lon1, lat2, lon2))
    a = math.sin((lat2 - lat1) / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin((lon2 - lon1) / 2) ** 2
    return 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a)) * 6373


@pytest.mark.parametrize("a, b", PAIRS)
def test_distance_is_symmetric(a, b):
    assert distance_km(*a, *b) == pytest.approx(distance_km(*b, *a), abs=1e-9)


@pytest.mark.parametrize("a, _", PAIRS)
def test_distance_to_self_is_zero(a, _):
    assert distance_km(*a, *a) == pytest.approx(0.0, abs=1e-9)


def test_matches_haversine_with_6373_km_radius():
    assert EARTH_RADIUS_KM == 6373.0
    got = distance_km(40.7128, -74.0060, 40.7306, -73.9352)
    assert got == pytest.approx(_reference(40.7128, -74.0060, 40.7306, -73.9352), rel=1e-12)
    assert got == pytest.approx(6.29, abs=0.01)


def test_scalar_inputs_return_float():
    assert isinstance(distance_km(40.0, -74.0, 41.0, -73.0), float)


def test_vectorized_matches_scalar():
    lat1 = np.array([p[0][0] for p in PAIRS])
    lon1 = np.array([p[0][1] for p in PAIRS])
    lat2 = pl.Series([p[1][0] for p in PAIRS])
    lon2 = pl.Series([p[1][1] for p in PAIRS])

    got = distance_km(lat1, lon1, lat2.to_numpy(), lon2.to_numpy())

    expected = [distance_km(*a, *b) for a, b in PAIRS]
    np.testing.assert_allclose(got, expected, rtol=1e-12)


def test_antipodal_points_do_not_produce_nan():
    got = distance_km(0.0, 0.0, 0.0, 180.0)
    assert got == pytest.approx(math.pi * 6373, rel=1e-12)


def test_out_of_range_coordinates_stay_finite():
    got = distance_km(np.array([95.0, -200.0]), np.array([190.0, 10.0]), np.array([0.0, 0.0]), np.array([0.0, 0.0]))
    assert np.all(np.isfinite(got))
    assert np.all(got >= 0)
