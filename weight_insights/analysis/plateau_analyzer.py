"""
Plateau Analyzer Module

Detects current and historical weight plateaus on a smoothed series,
grades their severity and estimates how likely and how long-lived they
are.
"""

import logging
from dataclasses import replace
from typing import List, Optional, Sequence

from ..config_loader import PlateauConfig
from ..constants import (
    ADAPTATION_TRIGGERS,
    BREAKOUT_NOT_APPLICABLE,
    BREAKOUT_STRATEGIES,
    BREAKOUT_TIMEFRAME_LONGER,
    BREAKOUT_TIMEFRAMES,
    GENERAL_TRIGGERS,
    MAX_TRIGGERS,
    NO_PLATEAU_STRATEGY,
    PLATEAU_PROBABILITY_WEIGHTS,
    SEVERITY_THRESHOLDS,
)
from ..models import PlateauPeriod, PlateauResult, PlateauSeverity, WeightObservation
from ..utils import CancellationToken, PerformanceTimer, check_cancelled, clamp, metrics_logger, safe_divide
from .cache import ResultCache
from .statistics import (
    mean,
    moving_average,
    population_std,
    recent_window,
    regression_slope,
    series_fingerprint,
    sort_observations,
    weights_of,
)

logger = logging.getLogger(__name__)


def grade_severity(plateau: Optional[PlateauPeriod]) -> PlateauSeverity:
    """Severity from the current plateau's duration alone."""
    if plateau is None:
        return PlateauSeverity.NONE
    for name, min_days in SEVERITY_THRESHOLDS.items():
        if plateau.duration_days >= min_days:
            return PlateauSeverity[name]
    return PlateauSeverity.NONE


class PlateauAnalyzer:
    """
    Plateau detection and breakout guidance.

    All window maths runs on a centred moving average of the history, so
    reported plateau weights are smoothed values as well.
    """

    def __init__(self, config: Optional[PlateauConfig] = None, cache: Optional[ResultCache] = None):
        self.config = config or PlateauConfig()
        self.cache = cache or ResultCache(ttl_seconds=self.config.cache_ttl_seconds, name="plateau")

    def analyze(
        self,
        observations: Sequence[WeightObservation],
        cancel_token: Optional[CancellationToken] = None
    ) -> PlateauResult:
        """
        Analyze a weight history for plateaus.

        Args:
            observations: The user's full history, in any order
            cancel_token: Optional cooperative cancellation flag

        Returns:
            PlateauResult, possibly the cached instance for an identical series

        Raises:
            AnalysisCancelledError: If cancel_token is set during the analysis
        """
        if len(observations) < self.config.min_plateau_days:
            return PlateauResult.insufficient_data()

        series = sort_observations(observations)
        key = series_fingerprint(series)
        return self.cache.get_or_compute(
            key, self.config.cache_ttl_seconds,
            lambda: self._compute(series, cancel_token)
        )

    def _compute(self, series: List[WeightObservation], cancel_token: Optional[CancellationToken]) -> PlateauResult:
        with PerformanceTimer(metrics_logger, "plateau_analysis", points=len(series)):
            smoothed = self.smooth(series)

            current = self.detect_current_plateau(smoothed, cancel_token)
            historical = self.detect_historical_plateaus(smoothed, cancel_token)
            probability = self.plateau_probability(smoothed)
            severity = grade_severity(current)

            result = PlateauResult(
                is_in_plateau=current is not None,
                current_plateau=current,
                historical_plateaus=tuple(historical),
                plateau_probability=probability,
                severity=severity,
                breakout_strategies=tuple(self.breakout_strategies(current, severity)),
                triggers=tuple(self.possible_triggers(severity)),
                expected_breakout_timeframe=self.estimate_breakout_timeframe(current, historical),
            )

        logger.debug(
            f"Plateau analysis of {len(series)} points: severity={severity.value}, "
            f"historical={len(historical)}, probability={probability:.2f}"
        )
        return result

    def smooth(self, series: Sequence[WeightObservation]) -> List[WeightObservation]:
        """Same dates, values replaced by their centred moving average."""
        smoothed = moving_average(weights_of(series), self.config.moving_average_window)
        return [replace(obs, value=value) for obs, value in zip(series, smoothed)]

    def is_plateau(self, values: Sequence[float]) -> bool:
        if len(values) < self.config.min_plateau_days:
            return False
        return (population_std(values) <= self.config.max_plateau_variation
                and abs(regression_slope(values)) <= self.config.max_plateau_slope)

    # ------------------------------------------------------------------
    # Detection
    # ------------------------------------------------------------------

    def detect_current_plateau(
        self,
        smoothed: Sequence[WeightObservation],
        cancel_token: Optional[CancellationToken] = None
    ) -> Optional[PlateauPeriod]:
        """
        Largest trailing plateau window within the last 2x strict days.

        When the whole anchored window qualifies, the plateau is followed
        further back through older history while it still qualifies.
        """
        if len(smoothed) < self.config.min_plateau_days:
            return None

        anchor = recent_window(smoothed, self.config.strict_plateau_days * 2)
        if len(anchor) < self.config.min_plateau_days:
            return None

        values = weights_of(smoothed)
        total = len(values)

        for size in range(len(anchor), self.config.strict_plateau_days - 1, -1):
            check_cancelled(cancel_token)
            start = total - size
            if not self.is_plateau(values[start:]):
                continue

            if size == len(anchor):
                while start > 0 and self.is_plateau(values[start - 1:]):
                    check_cancelled(cancel_token)
                    start -= 1
            return self._build_period(smoothed[start:])

        return None

    def detect_historical_plateaus(
        self,
        smoothed: Sequence[WeightObservation],
        cancel_token: Optional[CancellationToken] = None
    ) -> List[PlateauPeriod]:
        """
        Greedy left-to-right scan for non-overlapping plateaus.

        From each start index the longest qualifying window wins and the
        scan resumes after it. Worst case is quadratic in windows.
        """
        min_days = self.config.min_plateau_days
        values = weights_of(smoothed)
        total = len(values)
        plateaus = []
        start = 0

        while start < total - min_days:
            check_cancelled(cancel_token)
            best_end = -1

            for size in range(min_days, total - start + 1):
                if self.is_plateau(values[start:start + size]):
                    best_end = start + size - 1

            if best_end >= 0:
                plateaus.append(self._build_period(smoothed[start:best_end + 1]))
                start = best_end + 1
            else:
                start += 1

        return plateaus

    def plateau_probability(self, smoothed: Sequence[WeightObservation]) -> float:
        """Weighted blend of low variation, flat trend and duration, in [0, 1]."""
        if len(smoothed) < self.config.trend_analysis_window:
            return 0.0

        recent = weights_of(recent_window(smoothed, self.config.trend_analysis_window * 2))
        variation = population_std(recent)
        slope = regression_slope(recent)

        max_variation = self.config.max_plateau_variation
        slope_threshold = self.config.probability_slope_threshold
        low_variation = safe_divide(max(max_variation - variation, 0.0), max_variation)
        flat_trend = safe_divide(max(slope_threshold - abs(slope), 0.0), slope_threshold)
        duration = min(safe_divide(len(recent), self.config.strict_plateau_days), 1.0)

        score = (low_variation * PLATEAU_PROBABILITY_WEIGHTS['low_variation']
                 + flat_trend * PLATEAU_PROBABILITY_WEIGHTS['flat_trend']
                 + duration * PLATEAU_PROBABILITY_WEIGHTS['duration'])
        return clamp(score, 0.0, 1.0)

    # ------------------------------------------------------------------
    # Guidance
    # ------------------------------------------------------------------

    def breakout_strategies(self, plateau: Optional[PlateauPeriod], severity: PlateauSeverity) -> List[str]:
        if plateau is None:
            return [NO_PLATEAU_STRATEGY]
        return list(BREAKOUT_STRATEGIES[severity.name])

    def possible_triggers(self, severity: PlateauSeverity) -> List[str]:
        triggers = []
        if severity.name in ADAPTATION_TRIGGERS:
            triggers.append(ADAPTATION_TRIGGERS[severity.name])
        triggers.extend(GENERAL_TRIGGERS)
        return triggers[:MAX_TRIGGERS]

    def estimate_breakout_timeframe(
        self,
        current: Optional[PlateauPeriod],
        historical: Sequence[PlateauPeriod]
    ) -> str:
        if current is None:
            return BREAKOUT_NOT_APPLICABLE

        if historical:
            expected = mean([p.duration_days for p in historical])
        else:
            expected = self.config.default_plateau_duration

        days_remaining = int(expected - current.duration_days)
        for limit, label in BREAKOUT_TIMEFRAMES:
            if days_remaining <= limit:
                return label
        return BREAKOUT_TIMEFRAME_LONGER

    @staticmethod
    def _build_period(window: Sequence[WeightObservation]) -> PlateauPeriod:
        values = weights_of(window)
        return PlateauPeriod(
            start_date=window[0].date,
            end_date=window[-1].date,
            duration_days=len(window),
            average_weight=mean(values),
            weight_variation=population_std(values),
            min_weight=min(values),
            max_weight=max(values),
        )
