"""
Tests for the haversine proximity filter.
"""

from dataclasses import dataclass

import pytest

from reliatrack.services.geo import EARTH_RADIUS_MILES, filter_within_radius, haversine_miles

# One degree of latitude in miles on a 3958.8 mi sphere
MILES_PER_DEGREE_LAT = EARTH_RADIUS_MILES * 3.141592653589793 / 180


@dataclass
class Candidate:
    name: str
    lat: float
    lng: float
    radius: float


class TestHaversine:
    """Tests for haversine_miles."""

    def test_zero_distance_to_self(self):
        assert haversine_miles(41.88, -87.63, 41.88, -87.63) == 0

    @pytest.mark.parametrize("a,b", [
        ((41.88, -87.63), (40.71, -74.01)),
        ((34.05, -118.24), (47.61, -122.33)),
        ((-33.87, 151.21), (51.51, -0.13)),
    ])
    def test_symmetric(self, a, b):
        assert haversine_miles(*a, *b) == pytest.approx(haversine_miles(*b, *a))

    def test_known_distance(self):
        """Chicago to New York is roughly 711 miles."""
        assert haversine_miles(41.8781, -87.6298, 40.7128, -74.0060) == pytest.approx(711, abs=5)

    def test_one_degree_of_latitude(self):
        assert haversine_miles(0, 0, 1, 0) == pytest.approx(MILES_PER_DEGREE_LAT)


class TestFilterWithinRadius:
    """Tests for filter_within_radius."""

    def test_provider_at_query_point_included(self):
        here = Candidate("here", 41.0, -87.0, radius=10)
        matches = filter_within_radius(41.0, -87.0, [here], radius=10)
        assert [(c.name, d) for c, d in matches] == [("here", 0)]

    def test_provider_eleven_miles_away_excluded(self):
        far = Candidate("far", 41.0 + 11 / MILES_PER_DEGREE_LAT, -87.0, radius=10)
        assert filter_within_radius(41.0, -87.0, [far], radius=10) == []

    def test_provider_radius_extends_reach(self):
        """A provider serving 50 miles is found by a 10 mile search 30 miles away."""
        wide = Candidate("wide", 41.0 + 30 / MILES_PER_DEGREE_LAT, -87.0, radius=50)
        matches = filter_within_radius(41.0, -87.0, [wide], radius=10)
        assert len(matches) == 1
        assert matches[0][1] == pytest.approx(30)

    def test_sorted_nearest_first(self):
        candidates = [
            Candidate("twenty", 41.0 + 20 / MILES_PER_DEGREE_LAT, -87.0, radius=10),
            Candidate("five", 41.0 + 5 / MILES_PER_DEGREE_LAT, -87.0, radius=10),
            Candidate("zero", 41.0, -87.0, radius=10),
        ]
        matches = filter_within_radius(41.0, -87.0, candidates, radius=25)
        assert [c.name for c, _ in matches] == ["zero", "five", "twenty"]
