import math

import pytest

from src.gfa.services.geospatial import EARTH_RADIUS_KM, floored_distance_km, haversine_km


def test_haversine_zero_for_identical_points():
    assert haversine_km(21.5, 39.2, 21.5, 39.2) == 0.0


def test_haversine_one_degree_of_longitude_on_equator():
    expected = EARTH_RADIUS_KM * math.radians(1.0)
    assert haversine_km(0.0, 0.0, 0.0, 1.0) == pytest.approx(expected)


def test_haversine_is_symmetric():
    forward = haversine_km(24.7136, 46.6753, 21.4858, 39.1925)
    backward = haversine_km(21.4858, 39.1925, 24.7136, 46.6753)
    assert forward == pytest.approx(backward)
    # Riyadh to Jeddah is roughly 845 km great-circle
    assert 800 < forward < 900


def test_haversine_antipodal_points_do_not_raise():
    distance = haversine_km(0.0, 0.0, 0.0, 180.0)
    assert distance == pytest.approx(math.pi * EARTH_RADIUS_KM)


def test_haversine_out_of_range_is_finite():
    distance = haversine_km(200.0, -400.0, -95.0, 720.0)
    assert math.isfinite(distance)
    assert distance >= 0


def test_floored_distance():
    assert floored_distance_km(0.0) == 0.1
    assert floored_distance_km(0.05) == 0.1
    assert floored_distance_km(12.5) == 12.5
