"""
Statistics Module

Shared numeric primitives for the trend and plateau analyzers. Both
analyzers go through these functions so that a slope or a standard
deviation computed by one is identical to the one computed by the other.
"""

import hashlib
from datetime import date, timedelta
from typing import Iterable, List, Sequence

import numpy as np
import pandas as pd
from scipy import stats

from ..models import WeightObservation


def sort_observations(observations: Iterable[WeightObservation]) -> List[WeightObservation]:
    """Chronological copy of the input; same-day entries ordered by value."""
    return sorted(observations, key=lambda o: (o.date, o.value))


def series_fingerprint(observations: Sequence[WeightObservation]) -> str:
    """
    Deterministic content hash of an (already sorted) series.

    Order and content sensitive: appending, removing or editing a single
    observation changes the fingerprint.
    """
    digest = hashlib.sha256()
    for obs in observations:
        digest.update(f"{obs.date.isoformat()}|{obs.value!r};".encode())
    return digest.hexdigest()


def weights_of(observations: Sequence[WeightObservation]) -> List[float]:
    return [o.value for o in observations]


def mean(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.mean(np.asarray(values, dtype=float)))


def population_std(values: Sequence[float]) -> float:
    """Population standard deviation (ddof=0); 0 for an empty input."""
    if len(values) == 0:
        return 0.0
    return float(np.std(np.asarray(values, dtype=float)))


def regression_slope(values: Sequence[float]) -> float:
    """
    Ordinary least-squares slope of ``values`` against their index.

    The index rather than the date is the regressor, so the slope is in
    units per observation. Fewer than two points give 0.
    """
    n = len(values)
    if n < 2:
        return 0.0
    result = stats.linregress(np.arange(n, dtype=float), np.asarray(values, dtype=float))
    slope = float(result.slope)
    if not np.isfinite(slope):
        return 0.0
    return slope


def days_between(start: date, end: date) -> int:
    """Whole calendar days from ``start`` to ``end``."""
    return (end - start).days


def weeks_between(start: date, end: date) -> float:
    return days_between(start, end) / 7.0


def recent_window(observations: Sequence[WeightObservation], days: int) -> List[WeightObservation]:
    """
    Observations dated strictly after ``latest - days``.

    The window is anchored at the most recent observation, not at today,
    so an old history still has a populated trailing window.
    """
    if not observations:
        return []
    cutoff = observations[-1].date - timedelta(days=days)
    return [o for o in observations if o.date > cutoff]


def moving_average(values: Sequence[float], window: int) -> List[float]:
    """
    Centred moving average clipped at the series boundaries.

    Series no longer than ``window`` are returned unchanged.
    """
    if len(values) <= window:
        return [float(v) for v in values]
    smoothed = pd.Series(values, dtype=float).rolling(
        window=2 * (window // 2) + 1, center=True, min_periods=1
    ).mean()
    return smoothed.tolist()
