"""Great-circle distance between coordinate pairs."""

from __future__ import annotations

from typing import Any

import numpy as np

EARTH_RADIUS_KM = 6373.0


def distance_km(
    lat1: Any,
    lon1: Any,
    lat2: Any,
    lon2: Any,
    radius_km: float = EARTH_RADIUS_KM,
) -> Any:
    """Haversine distance in kilometres.

    Works on Python floats as well as numpy arrays or polars Series of equal
    length, so the pipeline and single-pair callers share one formula.

    Args:
        lat1: Latitude of the first point, degrees.
        lon1: Longitude of the first point, degrees.
        lat2: Latitude of the second point, degrees.
        lon2: Longitude of the second point, degrees.
        radius_km: Sphere radius.

    Returns:
        ``float`` for scalar inputs, otherwise a float64 ``numpy.ndarray``.
    """
    scalar = all(np.ndim(v) == 0 for v in (lat1, lon1, lat2, lon2))
    lat1, lon1, lat2, lon2 = (
        np.radians(np.asarray(v, dtype=np.float64)) for v in (lat1, lon1, lat2, lon2)
    )

    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = np.sin(dlat / 2) ** 2 + np.cos(lat1) * np.cos(lat2) * np.sin(dlon / 2) ** 2
    # rounding can push a just outside [0, 1]
    a = np.clip(a, 0.0, 1.0)
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))

    distance = c * radius_km
    if scalar:
        return float(distance)
    return distance
