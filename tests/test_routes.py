"""Tests for route interpolation."""

import sys
import unittest
from pathlib import Path

# Add src to path so we can import railmate
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from railmate.models import RoutePoint, Station, Train
from railmate.registry import TrainRegistry
from railmate.routes import SEGMENT_DIVISIONS, generate_route


class TestGenerateRoute(unittest.TestCase):
    """Test generate_route()."""

    def setUp(self):
        self.registry = TrainRegistry()

    def test_direct_train_has_seven_points(self):
        """Test a train without intermediate stations: source, 5 interpolated, destination."""
        train = self.registry.get_train_by_number("12259")
        route = generate_route(train)

        self.assertEqual(len(route), 7)
        self.assertEqual(route[0], RoutePoint(28.6419, 77.2194))
        self.assertEqual(route[-1], RoutePoint(26.9172, 75.8152))

    def test_length_for_every_train(self):
        """Test length is 6 * (1 + intermediates) + 1 and endpoints match the stations."""
        for train in self.registry.all_trains():
            route = generate_route(train)
            self.assertEqual(len(route), 6 * (1 + len(train.intermediate_stations)) + 1)
            self.assertEqual(route[0], RoutePoint(train.source.latitude, train.source.longitude))
            self.assertEqual(
                route[-1], RoutePoint(train.destination.latitude, train.destination.longitude)
            )

    def test_points_are_linear_interpolations(self):
        """Test every point within a segment equals A + (B - A) * k / 6."""
        train = self.registry.get_train_by_number("12622")
        stations = train.stations()
        route = generate_route(train)

        for segment, (a, b) in enumerate(zip(stations, stations[1:])):
            for k in range(SEGMENT_DIVISIONS):
                point = route[segment * SEGMENT_DIVISIONS + k]
                self.assertAlmostEqual(point.lat, a.latitude + (b.latitude - a.latitude) * k / 6)
                self.assertAlmostEqual(point.lng, a.longitude + (b.longitude - a.longitude) * k / 6)

    def test_intermediate_stations_in_order(self):
        """Test each station appears at the start of its segment, in stored order."""
        train = self.registry.get_train_by_number("12301")
        route = generate_route(train)

        ahmedabad = train.intermediate_stations[0]
        pune = train.intermediate_stations[1]
        self.assertEqual(route[6], RoutePoint(ahmedabad.latitude, ahmedabad.longitude))
        self.assertEqual(route[12], RoutePoint(pune.latitude, pune.longitude))
        self.assertEqual(len(route), 19)

    def test_stored_order_is_not_reordered(self):
        """Test an out-of-path intermediate order is used as given."""
        a = Station("a", "A", "A", 0.0, 0.0)
        b = Station("b", "B", "B", 6.0, 6.0)
        c = Station("c", "C", "C", 12.0, 12.0)
        train = Train("t", "1", "Zigzag", a, b, (c,), "00:00", "01:00", "1h")

        route = generate_route(train)
        self.assertAlmostEqual(route[1].lat, 2.0)
        self.assertEqual(route[6], RoutePoint(12.0, 12.0))
        self.assertAlmostEqual(route[7].lng, 11.0)
        self.assertEqual(route[-1], RoutePoint(6.0, 6.0))

    def test_deterministic(self):
        """Test identical input yields identical output."""
        train = self.registry.get_train_by_number("12951")
        self.assertEqual(generate_route(train), generate_route(train))


if __name__ == "__main__":
    unittest.main()
