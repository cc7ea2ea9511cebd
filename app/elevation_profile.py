"""Elevation, speed and time model for a GPX route.

The pipeline is: fill gaps in the raw elevation series, Gaussian-smooth it
against cumulative distance, take a windowed gradient, calibrate a single
climbing factor `k` so the modeled average speed lands on the target, apply
the capped descent model, then integrate time and climb along the route.

`calculate_profile_score` reduces the default-calibrated profile to one
integer that grows with climb steepness, climb length and closeness to the
finish.
"""

from __future__ import annotations

import math
from bisect import bisect_left, bisect_right
from typing import Sequence

from app.models import ElevationProfilePoint, RouteTrack

DEFAULT_TARGET_SPEED_KMH = 27.0
# flat cruising speed is 32 km/h when the target average is 27 km/h
FLAT_SPEED_RATIO = 32.0 / 27.0

SMOOTHING_SIGMA_KM = 0.6
SMOOTHING_RADIUS_KM = 3 * SMOOTHING_SIGMA_KM

GRADIENT_HALF_WINDOW_M = 100.0
MIN_GRADIENT_RUN_M = 10.0

CLIMB_FACTOR_GRID = tuple(0.05 + 0.045 * i for i in range(11))

DESCENT_THRESHOLD_PCT = -0.5
DESCENT_GAIN_PER_PCT = 0.05
LONG_DESCENT_KM = 1.0
# cap coefficients in km/h per percent of descent
MOUNTAIN_LONG_DESCENT_CAP = 9.5  # 95 km/h at 10 %
MOUNTAIN_SHORT_DESCENT_CAP = 7.5  # 75 km/h at 10 %
LOWLAND_DESCENT_CAP = 75.0 / 11.0  # 75 km/h at 11 %
MIN_SPEED_KMH = 1.0

SCORE_GRADIENT_THRESHOLD_PCT = 0.5
# (remaining km after the leg, weight); anything farther out gets FAR_FROM_FINISH_WEIGHT
FINISH_PROXIMITY_WEIGHTS = ((10.0, 1.0), (25.0, 0.8), (50.0, 0.6), (75.0, 0.4))
FAR_FROM_FINISH_WEIGHT = 0.2


def fill_missing_elevations(elevations: Sequence[float | None]) -> list[float]:
    """Replace unknown elevations with the nearest previous known value.

    Leading gaps take the first known value; a series with no known value
    becomes all zeros.
    """
    first_known = next((e for e in elevations if e is not None), 0.0)
    filled: list[float] = []
    last = first_known
    for ele in elevations:
        if ele is not None:
            last = ele
        filled.append(last)
    return filled


def sample_spacing(distances_km: Sequence[float]) -> list[float]:
    """Distance each sample stands for: half of each adjacent leg (trapezoid rule)."""
    n = len(distances_km)
    return [
        (distances_km[min(j + 1, n - 1)] - distances_km[max(j - 1, 0)]) / 2
        for j in range(n)
    ]


def smooth_elevations(
    distances_km: Sequence[float],
    elevations: Sequence[float],
    sigma_km: float = SMOOTHING_SIGMA_KM,
) -> list[float]:
    """Gaussian-weighted moving average of elevation against distance.

    The window for each point covers every sample within 3 sigma on both
    sides, found by bisection on the cumulative distance table. Each sample's
    kernel weight is scaled by the distance it covers, so a densely sampled
    stretch counts no more than a sparse one of the same length.
    """
    if not elevations:
        return []
    radius = 3 * sigma_km
    two_sigma_sq = 2 * sigma_km * sigma_km
    spacing = sample_spacing(distances_km)

    smoothed: list[float] = []
    for i, d in enumerate(distances_km):
        lo = bisect_left(distances_km, d - radius)
        hi = bisect_right(distances_km, d + radius)
        center = elevations[i]
        weight_sum = 0.0
        delta_sum = 0.0
        for j in range(lo, hi):
            offset = distances_km[j] - d
            w = math.exp(-(offset * offset) / two_sigma_sq) * spacing[j]
            weight_sum += w
            delta_sum += w * (elevations[j] - center)
        # weighting deviations from the center keeps a constant series exact
        smoothed.append(center + delta_sum / weight_sum if weight_sum > 0 else center)
    return smoothed


def compute_gradients(distances_km: Sequence[float], elevations: Sequence[float]) -> list[float]:
    """Percent gradient at each point over a ~200 m distance window."""
    n = len(elevations)
    dists_m = [d * 1000.0 for d in distances_km]
    gradients = [0.0] * n

    for i in range(n):
        prev_idx = i
        while prev_idx > 0 and dists_m[i] - dists_m[prev_idx] < GRADIENT_HALF_WINDOW_M:
            prev_idx -= 1
        next_idx = i
        while next_idx < n - 1 and dists_m[next_idx] - dists_m[i] < GRADIENT_HALF_WINDOW_M:
            next_idx += 1

        run = dists_m[next_idx] - dists_m[prev_idx]
        if run > MIN_GRADIENT_RUN_M:
            gradients[i] = (elevations[next_idx] - elevations[prev_idx]) / run * 100.0
    return gradients


def descent_run_lengths(distances_km: Sequence[float], gradients: Sequence[float]) -> list[float]:
    """Length of the contiguous descent covered so far at each point, in km."""
    runs: list[float] = []
    run = 0.0
    for i, g in enumerate(gradients):
        if g < DESCENT_THRESHOLD_PCT:
            if i > 0:
                run += distances_km[i] - distances_km[i - 1]
        else:
            run = 0.0
        runs.append(run)
    return runs


def descent_speed(gradient: float, flat_speed: float, run_km: float, mountain: bool) -> float:
    """Modeled speed on a negative gradient, capped by the regional ceiling."""
    steepness = abs(gradient)
    uncapped = flat_speed * (1 + DESCENT_GAIN_PER_PCT * steepness)
    if mountain:
        coeff = MOUNTAIN_LONG_DESCENT_CAP if run_km > LONG_DESCENT_KM else MOUNTAIN_SHORT_DESCENT_CAP
    else:
        coeff = LOWLAND_DESCENT_CAP
    cap = max(flat_speed, coeff * steepness)
    return max(MIN_SPEED_KMH, min(uncapped, cap))


def _model_speeds(
    gradients: Sequence[float],
    runs: Sequence[float],
    flat_speed: float,
    k: float,
    mountain: bool,
) -> list[float]:
    speeds = []
    for g, run in zip(gradients, runs):
        if g >= 0:
            speeds.append(max(MIN_SPEED_KMH, flat_speed / (1 + k * g)))
        else:
            speeds.append(descent_speed(g, flat_speed, run, mountain))
    return speeds


def _moving_time_h(distances_km: Sequence[float], speeds: Sequence[float]) -> float:
    time_h = 0.0
    for i in range(1, len(distances_km)):
        leg = distances_km[i] - distances_km[i - 1]
        if leg > 0:
            time_h += leg / speeds[i]
    return time_h


def calibrate_speeds(
    distances_km: Sequence[float],
    gradients: Sequence[float],
    target_speed: float,
    mountain: bool = False,
) -> tuple[float, list[float]]:
    """Pick the climbing factor `k` and return it with the per-point speeds.

    `k` comes from a fixed grid and minimizes the gap between the modeled
    route average and `target_speed`. If the best average is still above
    target, every speed is scaled down so the route averages the target.
    """
    flat_speed = target_speed * FLAT_SPEED_RATIO
    runs = descent_run_lengths(distances_km, gradients)
    total_km = distances_km[-1] - distances_km[0] if distances_km else 0.0

    best_k = CLIMB_FACTOR_GRID[0]
    best_speeds = _model_speeds(gradients, runs, flat_speed, best_k, mountain)
    if total_km <= 0:
        return best_k, best_speeds

    best_error = math.inf
    best_avg = 0.0
    for k in CLIMB_FACTOR_GRID:
        speeds = _model_speeds(gradients, runs, flat_speed, k, mountain)
        avg = total_km / _moving_time_h(distances_km, speeds)
        error = abs(avg - target_speed)
        if error < best_error:
            best_k, best_speeds, best_error, best_avg = k, speeds, error, avg

    if best_avg > target_speed:
        factor = target_speed / best_avg
        best_speeds = [max(MIN_SPEED_KMH, s * factor) for s in best_speeds]
    return best_k, best_speeds


def calculate_elevation_profile(
    track: RouteTrack,
    target_speed: float = DEFAULT_TARGET_SPEED_KMH,
    mountain: bool = False,
) -> list[ElevationProfilePoint]:
    """Model elevation, gradient, speed, time and climb at every track point.

    Routes with fewer than two points yield an empty profile.
    """
    if len(track.points) < 2:
        return []

    distances = list(track.cumulative_distance_km)
    raw = [p.elevation for p in track.points]
    smoothed = smooth_elevations(distances, fill_missing_elevations(raw))
    gradients = compute_gradients(distances, smoothed)
    _, speeds = calibrate_speeds(distances, gradients, target_speed, mountain)

    profile: list[ElevationProfilePoint] = []
    time_h = 0.0
    climb = 0.0
    raw_climb = 0.0
    for i, point in enumerate(track.points):
        if i > 0:
            leg = distances[i] - distances[i - 1]
            if leg > 0:
                time_h += leg / speeds[i]
            rise = smoothed[i] - smoothed[i - 1]
            if rise > 0:
                climb += rise
            prev_raw = raw[i - 1]
            if raw[i] is not None and prev_raw is not None and raw[i] > prev_raw:
                raw_climb += raw[i] - prev_raw

        profile.append(
            ElevationProfilePoint(
                dist_km=distances[i],
                elevation=smoothed[i],
                raw_elevation=raw[i],
                gradient=gradients[i],
                speed_kmh=speeds[i],
                time_h=time_h,
                climb_m=climb,
                raw_climb_m=raw_climb,
                lat=point.lat,
                lon=point.lon,
            )
        )
    return profile


def finish_proximity_weight(remaining_km: float) -> float:
    """Weight for a climbing leg given the distance left after it."""
    for limit, weight in FINISH_PROXIMITY_WEIGHTS:
        if remaining_km <= limit:
            return weight
    return FAR_FROM_FINISH_WEIGHT


def score_profile(profile: Sequence[ElevationProfilePoint]) -> int:
    """Finish-weighted climb difficulty of an already computed profile."""
    if len(profile) < 2:
        return 0
    total_km = profile[-1].dist_km
    score = 0.0
    for prev, point in zip(profile, profile[1:]):
        if point.gradient <= SCORE_GRADIENT_THRESHOLD_PCT:
            continue
        leg = point.dist_km - prev.dist_km
        score += (point.gradient / 2) ** 2 * leg * finish_proximity_weight(total_km - point.dist_km)
    return int(math.floor(score + 0.5))


def calculate_profile_score(track: RouteTrack) -> int:
    """Difficulty score of a route.

    Always computed at the default calibration (27 km/h, lowland descents) so
    the score is a property of the route, not of the rider's chosen pace.
    """
    return score_profile(calculate_elevation_profile(track))


def gradient_band(gradient: float) -> str:
    """Human label for a gradient in percent."""
    if gradient < 1:
        return "flat"
    if gradient < 3:
        return "easy"
    if gradient < 6:
        return "moderate"
    if gradient < 10:
        return "steep"
    if gradient < 15:
        return "very steep"
    return "extreme"


def distance_label(distance_km: float) -> str:
    """Classify a route by length: long (>160 km), big (120-160 km) or short."""
    if distance_km > 160:
        return "long"
    if distance_km >= 120:
        return "big"
    return "short"
