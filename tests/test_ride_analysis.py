import datetime as dt
import unittest

from app.data_sources.open_meteo_client import HOURLY_VARIABLES, HourlyForecast
from app.errors import ForecastWindowError
from app.registry import CityRegistry
from app.ride_analysis import (
    build_day_stats,
    format_rain_hours,
    format_sun_time,
    plan_ride,
    ride_duration_minutes,
    round_half_up,
    summarize_day,
)

DEFAULTS = {
    "precipitation": 0.0,
    "precipitation_probability": 10.0,
    "temperature_2m": 20.0,
    "wind_speed_10m": 10.0,
    "wind_gusts_10m": 15.0,
    "apparent_temperature": 19.0,
    "wind_direction_10m": 180.0,
    "sunshine_duration": 3600.0,
    "temperature_900hPa": 12.0,
    "temperature_850hPa": 8.0,
}


def make_forecast(days=1, **overrides):
    """Hourly payload of `days` days; overrides map a variable to {hour_index: value}."""
    hours = 24 * days
    payload = {"time": [f"2025-06-{7 + h // 24:02d}T{h % 24:02d}:00" for h in range(hours)]}
    for name in HOURLY_VARIABLES:
        series = [DEFAULTS[name]] * hours
        for index, value in overrides.get(name, {}).items():
            series[index] = value
        payload[name] = series
    return HourlyForecast.model_validate(payload)


REGISTRY = CityRegistry.build(
    {"Flat": (55.0, 37.0), "Peak": (36.6, 30.5), "Fly": (36.6, 30.6)},
    flight_cities=["Fly"],
    mountain_cities=["Peak", "Fly"],
)
SATURDAY = dt.date(2025, 6, 7)


class TestSummarizeDay(unittest.TestCase):
    def test_dry_sunny_day(self):
        day = summarize_day(make_forecast(), 0)
        self.assertEqual(day.precip_sum, 0.0)
        self.assertEqual(day.wet_hours, ())
        self.assertEqual(day.sun_seconds, 9 * 3600)
        self.assertTrue(day.is_dry)
        self.assertTrue(day.is_morning_ride_suitable)
        self.assertEqual(day.temperature_min, 20.0)
        self.assertEqual(day.temperature_900hpa_min, 12.0)

    def test_wet_hours_are_hours_of_day(self):
        rain = {13: 0.5, 14: 0.2, 15: 1.0, 20: 0.3, 3: 5.0, 9: 0.05}
        day = summarize_day(make_forecast(precipitation=rain), 0)
        self.assertEqual(day.wet_hours, (13, 14, 15, 20))
        # hour 3 is outside the rain window
        self.assertAlmostEqual(day.precip_sum, 0.5 + 0.2 + 1.0 + 0.3 + 0.05)
        self.assertAlmostEqual(day.active_rain, 0.5 + 0.2 + 1.0 + 0.05)
        self.assertFalse(day.is_dry)
        self.assertTrue(day.is_morning_ride_suitable)

    def test_second_day_uses_offset_windows(self):
        forecast = make_forecast(days=2, temperature_2m={24 + 12: 30.0, 12: 5.0})
        self.assertEqual(summarize_day(forecast, 1).temperature_max, 30.0)
        self.assertEqual(summarize_day(forecast, 0).temperature_min, 5.0)

    def test_dominant_bearing_is_first_peak_wind_hour(self):
        winds = {10: 25.0, 14: 25.0}
        directions = {10: 315.0, 14: 90.0}
        day = summarize_day(make_forecast(wind_speed_10m=winds, wind_direction_10m=directions), 0)
        self.assertEqual(day.wind_max, 25.0)
        self.assertEqual(day.wind_deg, 315.0)

    def test_missing_values_are_ignored(self):
        forecast = make_forecast(
            temperature_2m={h: None for h in range(9, 18)},
            sunshine_duration={9: None},
            precipitation={10: None},
        )
        day = summarize_day(forecast, 0)
        self.assertIsNone(day.temperature_min)
        self.assertIsNone(day.temperature_max)
        self.assertEqual(day.sun_seconds, 8 * 3600)
        self.assertEqual(day.precip_sum, 0.0)

    def test_morning_rain_makes_morning_unsuitable(self):
        day = summarize_day(make_forecast(precipitation={10: 0.3}), 0)
        self.assertFalse(day.is_morning_ride_suitable)
        self.assertTrue(day.is_dry)

    def test_window_past_payload_raises(self):
        with self.assertRaises(ForecastWindowError):
            summarize_day(make_forecast(days=1), 1)


class TestFormatting(unittest.TestCase):
    def test_rain_hours(self):
        self.assertEqual(format_rain_hours([13, 14, 15, 20]), "13:00–16:00, 20:00")
        self.assertEqual(format_rain_hours([20, 5, 6]), "05:00–07:00, 20:00")
        self.assertEqual(format_rain_hours([23]), "23:00")
        self.assertIsNone(format_rain_hours([]))

    def test_sun_time(self):
        self.assertEqual(format_sun_time(0), "0 h 0 min")
        self.assertEqual(format_sun_time(-5), "0 h 0 min")
        self.assertEqual(format_sun_time(3 * 3600 + 25 * 60 + 59), "3 h 25 min")
        self.assertEqual(format_sun_time(12 * 3600), "9 h 0 min")

    def test_round_half_up(self):
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(-2.5), -2)
        self.assertEqual(round_half_up(2.4), 2)


class TestPlanRide(unittest.TestCase):
    def test_duration_from_distance(self):
        self.assertEqual(ride_duration_minutes(105.0), 210)
        plan = plan_ride(make_forecast(), 0, distance_km=105.0)
        self.assertEqual(plan.duration, "03:30")

    def test_minutes_never_reach_sixty(self):
        # 59.99 km at 30 km/h is 119.98 min, which rounds to two full hours
        plan = plan_ride(make_forecast(), 0, distance_km=59.99)
        self.assertEqual(plan.duration, "02:00")

    def test_start_and_end_temperatures(self):
        forecast = make_forecast(temperature_2m={10: 14.5, 13: 21.4})
        plan = plan_ride(forecast, 0, distance_km=95.0)  # 3 h 10 min
        self.assertEqual(plan.start_temperature, 15)
        self.assertEqual(plan.end_temperature, 21)
        self.assertIsNone(plan.start_temperature_900hpa)

    def test_flight_plan_is_three_hours(self):
        plan = plan_ride(make_forecast(), 0, mountain=True)
        self.assertEqual(plan.duration, "03:00")
        self.assertEqual(plan.start_temperature_900hpa, 12)
        self.assertEqual(plan.end_temperature_850hpa, 8)

    def test_end_hour_past_forecast_is_none(self):
        plan = plan_ride(make_forecast(), 0, distance_km=500.0)
        self.assertEqual(plan.duration, "16:40")
        self.assertIsNone(plan.end_temperature)


class TestBuildDayStats(unittest.TestCase):
    def test_dry_day_with_route_is_rideable(self):
        forecast = make_forecast()
        day = summarize_day(forecast, 0)
        stats = build_day_stats(
            day,
            date=SATURDAY,
            city="Flat",
            registry=REGISTRY,
            plan=plan_ride(forecast, 0, distance_km=90.0),
            route_distance_km=90.0,
            route_count=2,
            profile_score=14,
        )
        self.assertTrue(stats.is_rideable)
        self.assertEqual(stats.day_name, "Saturday")
        self.assertEqual(stats.ride_duration, "03:00")
        self.assertEqual(stats.route_count, 2)
        self.assertEqual(stats.profile_score, 14)
        self.assertEqual(stats.wind_direction, "S")
        self.assertEqual(stats.wind_direction_full, "South")
        self.assertEqual(stats.sun_str, "9 h 0 min")
        self.assertIsNone(stats.temperature_900hpa)

    def test_dry_day_without_route_is_not_rideable(self):
        day = summarize_day(make_forecast(), 0)
        stats = build_day_stats(day, date=SATURDAY, city="Flat", registry=REGISTRY)
        self.assertTrue(stats.is_dry)
        self.assertFalse(stats.has_route)
        self.assertFalse(stats.is_rideable)
        self.assertIsNone(stats.ride_duration)

    def test_wet_day_ignores_plan(self):
        forecast = make_forecast(precipitation={h: 1.0 for h in range(9, 18)})
        day = summarize_day(forecast, 0)
        stats = build_day_stats(
            day, date=SATURDAY, city="Flat", registry=REGISTRY, plan=plan_ride(forecast, 0, distance_km=90.0)
        )
        self.assertFalse(stats.is_rideable)
        self.assertEqual(stats.rain_hours, "09:00–18:00")
        self.assertIsNone(stats.ride_duration)

    def test_mountain_city_reports_free_air_temperatures(self):
        forecast = make_forecast(temperature_900hPa={12: 9.5})
        day = summarize_day(forecast, 0)
        stats = build_day_stats(
            day, date=SATURDAY + dt.timedelta(days=1), city="Fly", registry=REGISTRY,
            plan=plan_ride(forecast, 0, mountain=True),
        )
        self.assertEqual(stats.day_name, "Sunday")
        self.assertEqual(stats.temperature_900hpa, 10)
        self.assertEqual(stats.temperature_850hpa, 8)
        self.assertEqual(stats.ride_duration, "03:00")
        self.assertTrue(stats.is_rideable)


if __name__ == "__main__":
    unittest.main()
