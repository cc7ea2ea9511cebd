import datetime as dt

import pytest

from app.domain import CityAnalysisResult, WeatherDayStats, WeekendStats
from app.ranking import max_profile_score, rank_cities, sunny_cities, total_sun_seconds


def _stats(sun_hours, rideable=True, score=None, date=dt.date(2025, 6, 7)):
    return WeatherDayStats(
        date=date,
        day_name="Saturday",
        precip_sum=0.0,
        wind_direction="S",
        wind_direction_full="South",
        sun_seconds=sun_hours * 3600,
        sun_str=f"{int(sun_hours)} h 0 min",
        is_dry=True,
        is_morning_ride_suitable=True,
        has_route=rideable,
        is_rideable=rideable,
        profile_score=score,
    )


def _city(name, sat=None, sun=None, sat2=None, sun2=None, extra=()):
    return CityAnalysisResult(
        city_name=name,
        weekend1=WeekendStats(saturday=sat, sunday=sun),
        weekend2=WeekendStats(saturday=sat2, sunday=sun2),
        extra_days=list(extra),
    )


DATASET = [
    _city("Tula", sat=_stats(7, score=3), sun=_stats(2)),
    _city("Kaluga", sat=_stats(8.5, score=12), sat2=_stats(9)),
    _city("Ryazan", sat=_stats(7)),
    _city("Vladimir", sat=_stats(9, rideable=False), sun=_stats(6)),
    _city("Tver", sat=_stats(5.5, score=40), extra=[_stats(9, score=99)]),
]


def test_sunny_cities_filters_and_sorts():
    picked = sunny_cities(DATASET, 1, "saturday")
    # Vladimir has no route, Tver is below the threshold
    assert [name for name, _ in picked] == ["Kaluga", "Ryazan", "Tula"]


def test_sunny_cities_threshold_and_other_day():
    assert [name for name, _ in sunny_cities(DATASET, 1, "sunday")] == ["Vladimir"]
    assert [name for name, _ in sunny_cities(DATASET, 1, "saturday", min_sun_hours=5)] == [
        "Kaluga", "Ryazan", "Tula", "Tver",
    ]
    assert [name for name, _ in sunny_cities(DATASET, 2, "saturday")] == ["Kaluga"]


def test_sunny_cities_rejects_bad_weekend():
    with pytest.raises(ValueError):
        sunny_cities(DATASET, 3, "saturday")


def test_rank_by_sun_counts_weekend_slots_only():
    assert total_sun_seconds(DATASET[1]) == (8.5 + 9) * 3600
    assert total_sun_seconds(DATASET[4]) == 5.5 * 3600
    ranked = rank_cities(DATASET, by="sun")
    assert [name for name, _ in ranked] == ["Kaluga", "Vladimir", "Tula", "Ryazan", "Tver"]


def test_rank_by_score_missing_counts_as_zero():
    assert max_profile_score(DATASET[2]) == 0
    assert max_profile_score(_city("Empty")) == 0
    ranked = rank_cities(DATASET, by="score")
    # holiday routes count too
    assert max_profile_score(DATASET[4]) == 99
    assert ranked[0] == ("Tver", 99)
    assert ranked[1] == ("Kaluga", 12)
    assert ranked[2] == ("Tula", 3)
    # ties at zero fall back to name order
    assert [name for name, _ in ranked[3:]] == ["Ryazan", "Vladimir"]


def test_rank_unknown_criterion():
    with pytest.raises(ValueError):
        rank_cities(DATASET, by="wind")


def test_rank_by_sun_ties_are_alphabetical():
    # equal four-slot totals reached through different days
    tied = [
        _city("Zaraysk", sat=_stats(8), sun=_stats(4)),
        _city("Aleksin", sat=_stats(6), sun2=_stats(6)),
        _city("Mozhaysk", sat2=_stats(12)),
        _city("Bronnitsy", sat=_stats(13)),
    ]
    ranked = rank_cities(tied, by="sun")
    assert [name for name, _ in ranked] == ["Bronnitsy", "Aleksin", "Mozhaysk", "Zaraysk"]
    assert ranked[1][1] == ranked[2][1] == ranked[3][1] == 12 * 3600
