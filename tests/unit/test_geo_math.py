"""Unit tests for haversine distance."""

import pytest

from discovery.models import Coordinates
from discovery.services.geo_math import distance_miles, haversine_km

POINTS = [
    Coordinates(30.2672, -97.7431),   # Austin
    Coordinates(40.7128, -74.0060),   # New York
    Coordinates(-33.8688, 151.2093),  # Sydney
    Coordinates(0.0, 0.0),
    Coordinates(89.9, 179.9),
]


class TestDistanceMiles:
    @pytest.mark.parametrize("point", POINTS)
    def test_distance_to_self_is_zero(self, point):
        assert distance_miles(point, point) == 0

    @pytest.mark.parametrize("a", POINTS)
    @pytest.mark.parametrize("b", POINTS)
    def test_symmetric(self, a, b):
        assert distance_miles(a, b) == pytest.approx(distance_miles(b, a), rel=1e-12, abs=1e-9)

    def test_one_degree_of_latitude_is_about_69_miles(self):
        d = distance_miles(Coordinates(0.0, 0.0), Coordinates(1.0, 0.0))
        assert d == pytest.approx(69.09, abs=0.05)

    def test_known_city_pair(self):
        # Austin -> New York is roughly 1,515 miles great-circle
        d = distance_miles(POINTS[0], POINTS[1])
        assert 1500 < d < 1530

    def test_miles_use_km_conversion_factor(self):
        a, b = POINTS[0], POINTS[1]
        assert distance_miles(a, b) == pytest.approx(haversine_km(a, b) * 0.621371)

    def test_antipodal_points_do_not_raise(self):
        d = distance_miles(Coordinates(0.0, 0.0), Coordinates(0.0, 180.0))
        # half the earth's circumference
        assert d == pytest.approx(3.14159265 * 6371.0 * 0.621371, rel=1e-6)
