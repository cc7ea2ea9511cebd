import unittest

from app.elevation_profile import (
    calculate_elevation_profile,
    calculate_profile_score,
    finish_proximity_weight,
    score_profile,
)
from app.geo import haversine_km
from app.models import GeoPoint, RouteTrack


def make_track(elevations, step_deg=0.0009):
    points = tuple(GeoPoint(55.0 + i * step_deg, 37.0, e) for i, e in enumerate(elevations))
    cumulative = [0.0]
    for a, b in zip(points, points[1:]):
        cumulative.append(cumulative[-1] + haversine_km(a.lat, a.lon, b.lat, b.lon))
    return RouteTrack(
        points=points,
        cumulative_distance_km=tuple(cumulative),
        total_distance_km=cumulative[-1],
        total_ascent_m=0.0,
    )


def ramp_route(start_step, climb_steps=10, rise_per_step=10.0, total_steps=600):
    """Flat ~60 km route with a single climb starting at `start_step`."""
    elevations = []
    level = 100.0
    for i in range(total_steps):
        if start_step <= i < start_step + climb_steps:
            level += rise_per_step
        elevations.append(level)
    return make_track(elevations)


class TestProfileScore(unittest.TestCase):
    def test_flat_route_scores_zero(self):
        self.assertEqual(calculate_profile_score(make_track([120.0] * 300)), 0)

    def test_descending_route_scores_zero(self):
        self.assertEqual(calculate_profile_score(make_track([900 - 2 * i for i in range(300)])), 0)

    def test_degenerate_tracks_score_zero(self):
        self.assertEqual(calculate_profile_score(make_track([])), 0)
        self.assertEqual(calculate_profile_score(make_track([100.0])), 0)
        self.assertEqual(score_profile([]), 0)

    def test_climb_near_finish_scores_higher(self):
        early = calculate_profile_score(ramp_route(start_step=60))
        late = calculate_profile_score(ramp_route(start_step=525))
        self.assertGreater(early, 0)
        self.assertGreater(late, early)

    def test_steeper_climb_scores_higher(self):
        gentle = calculate_profile_score(ramp_route(start_step=300, rise_per_step=5.0))
        steep = calculate_profile_score(ramp_route(start_step=300, rise_per_step=10.0))
        self.assertGreater(steep, gentle)

    def test_longer_climb_scores_higher(self):
        short = calculate_profile_score(ramp_route(start_step=300, climb_steps=10, rise_per_step=8.0))
        long = calculate_profile_score(ramp_route(start_step=300, climb_steps=40, rise_per_step=8.0))
        self.assertGreater(long, short)

    def test_score_uses_default_calibration(self):
        track = ramp_route(start_step=200)
        expected = score_profile(calculate_elevation_profile(track, target_speed=27.0, mountain=False))
        self.assertEqual(calculate_profile_score(track), expected)
        self.assertEqual(calculate_profile_score(track), calculate_profile_score(track))

    def test_finish_proximity_weights(self):
        self.assertEqual(finish_proximity_weight(0.0), 1.0)
        self.assertEqual(finish_proximity_weight(10.0), 1.0)
        self.assertEqual(finish_proximity_weight(10.5), 0.8)
        self.assertEqual(finish_proximity_weight(25.0), 0.8)
        self.assertEqual(finish_proximity_weight(50.0), 0.6)
        self.assertEqual(finish_proximity_weight(75.0), 0.4)
        self.assertEqual(finish_proximity_weight(75.1), 0.2)


if __name__ == "__main__":
    unittest.main()
