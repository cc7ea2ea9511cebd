import asyncio
import unittest

from app.registry import CityRegistry
from app.route_matcher import NOT_BUILT_STATUS, RouteMatcher, candidate_filenames

GPX = (
    '<gpx xmlns="http://www.topografix.com/GPX/1/1"><trk><name>{name}</name><trkseg>'
    '<trkpt lat="55.0" lon="37.0"><ele>100</ele></trkpt>'
    '<trkpt lat="55.1" lon="37.0"><ele>120</ele></trkpt>'
    '</trkseg></trk></gpx>'
)

REGISTRY = CityRegistry.build(
    {"Москва": (55.75, 37.61), "Unmapped": (55.0, 37.0)},
    filename_tokens={"Москва": "Moscow"},
)


class DictRouteSource:
    def __init__(self, files):
        self.files = files
        self.requested = []

    def fetch_text(self, filename):
        self.requested.append(filename)
        return self.files.get(filename)


class RaisingRouteSource:
    def fetch_text(self, filename):
        raise RuntimeError("boom")


class TestRouteMatcher(unittest.TestCase):
    def test_candidate_filenames(self):
        self.assertEqual(
            candidate_filenames("Moscow", "NW"),
            ["Moscow_NW.gpx", "Moscow_NW_1.gpx", "Moscow_NW_2.gpx", "Moscow_NW_3.gpx"],
        )

    def test_only_second_variant_present(self):
        source = DictRouteSource({"Moscow_NW_2.gpx": GPX.format(name="v2")})
        match = asyncio.run(RouteMatcher(source, REGISTRY).match("Москва", 315.0))

        self.assertTrue(match.found)
        self.assertEqual(match.direction, "NW")
        self.assertEqual(len(match.candidates), 1)
        self.assertEqual(match.default.filename, "Moscow_NW_2.gpx")
        self.assertEqual(match.default.suffix, 2)
        self.assertEqual(match.default.track.name, "v2")
        self.assertEqual(sorted(source.requested), sorted(candidate_filenames("Moscow", "NW")))

    def test_candidates_keep_priority_order(self):
        source = DictRouteSource({
            "Moscow_E_3.gpx": GPX.format(name="v3"),
            "Moscow_E.gpx": GPX.format(name="base"),
            "Moscow_E_1.gpx": GPX.format(name="v1"),
        })
        match = asyncio.run(RouteMatcher(source, REGISTRY).match("Москва", 95.0))
        self.assertEqual([c.suffix for c in match.candidates], [0, 1, 3])
        self.assertEqual(match.default.track.name, "base")

    def test_unparseable_candidates_do_not_exist(self):
        source = DictRouteSource({"Moscow_S.gpx": "<not gpx", "Moscow_S_1.gpx": "<gpx/>"})
        match = asyncio.run(RouteMatcher(source, REGISTRY).match("Москва", 180.0))
        self.assertFalse(match.found)
        self.assertIsNone(match.default)
        self.assertEqual(match.status_text, NOT_BUILT_STATUS)

    def test_unmapped_city_uses_its_own_name(self):
        source = DictRouteSource({"Unmapped_N.gpx": GPX.format(name="x")})
        match = asyncio.run(RouteMatcher(source, REGISTRY).match("Unmapped", 10.0))
        self.assertTrue(match.found)

    def test_source_errors_mean_not_found(self):
        match = asyncio.run(RouteMatcher(RaisingRouteSource(), REGISTRY).match("Москва", 0.0))
        self.assertFalse(match.found)
        self.assertEqual(match.direction_full, "North")


if __name__ == "__main__":
    unittest.main()
