"""Summary filtering and global city rankings over an analysis dataset.

Pure functions: the dataset is only read, and every call recomputes from it.
"""

from __future__ import annotations

from typing import Iterable

from app.domain import CityAnalysisResult, DaySlot, RankBy, WeatherDayStats

DEFAULT_MIN_SUN_HOURS = 6.0


def sunny_cities(
    dataset: Iterable[CityAnalysisResult],
    weekend: int,
    day: DaySlot | str,
    min_sun_hours: float = DEFAULT_MIN_SUN_HOURS,
) -> list[tuple[str, WeatherDayStats]]:
    """Rideable cities with at least `min_sun_hours` of sun, sunniest first."""
    min_sun_seconds = min_sun_hours * 3600
    picked = []
    for result in dataset:
        stats = result.weekend(weekend).get(day)
        if stats is None or not stats.is_rideable:
            continue
        if stats.sun_seconds < min_sun_seconds:
            continue
        picked.append((result.city_name, stats))
    return sorted(picked, key=lambda item: (-item[1].sun_seconds, item[0]))


def total_sun_seconds(result: CityAnalysisResult) -> float:
    return sum(stats.sun_seconds for stats in result.weekend_slots() if stats is not None)


def max_profile_score(result: CityAnalysisResult) -> int:
    """Highest route score over every analyzed day; missing scores count as 0."""
    scores = [stats.profile_score or 0 for stats in result.all_days()]
    return max(scores, default=0)


def rank_cities(
    dataset: Iterable[CityAnalysisResult],
    by: RankBy | str = RankBy.SUN,
) -> list[tuple[str, float]]:
    """Order every city by total sunshine or by max profile score, descending.

    Ties are broken alphabetically by city name.
    """
    criterion = RankBy(by)
    key = total_sun_seconds if criterion is RankBy.SUN else max_profile_score
    ranked = [(result.city_name, key(result)) for result in dataset]
    return sorted(ranked, key=lambda item: (-item[1], item[0]))
