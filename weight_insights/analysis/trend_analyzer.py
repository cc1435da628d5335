"""
Trend Analyzer Module

Turns a weight history into trend classifications, streaks, patterns,
milestones, short-horizon predictions and personalised tips.
"""

import logging
from typing import Dict, List, Optional, Sequence

from ..config_loader import TrendConfig
from ..constants import (
    PREDICTION_HORIZONS,
    TIPS,
    TRACKING_MILESTONES,
    WEIGHT_LOSS_MILESTONES,
)
from ..models import (
    InsightResult,
    PlateauPattern,
    ProgressPattern,
    RapidChangePattern,
    WeeklyCyclePattern,
    WeightObservation,
    WeightTrend,
)
from ..utils import CancellationToken, PerformanceTimer, check_cancelled, clamp, metrics_logger, safe_divide
from .cache import BoundedMemo, ResultCache
from .statistics import (
    days_between,
    mean,
    population_std,
    recent_window,
    regression_slope,
    series_fingerprint,
    sort_observations,
    weeks_between,
    weights_of,
)

logger = logging.getLogger(__name__)


def classify_slope(slope: float, threshold: float = 0.1) -> WeightTrend:
    """Strict comparison: a slope of exactly +/-threshold is STABLE."""
    if slope < -threshold:
        return WeightTrend.LOSING
    if slope > threshold:
        return WeightTrend.GAINING
    return WeightTrend.STABLE


class TrendAnalyzer:
    """Computes InsightResult reports, memoised per input series"""

    def __init__(self, config: Optional[TrendConfig] = None, cache: Optional[ResultCache] = None):
        self.config = config or TrendConfig()
        self.cache = cache or ResultCache(ttl_seconds=self.config.cache_ttl_seconds, name="insights")
        self._slopes = BoundedMemo(max_entries=self.config.slope_cache_size)

    def analyze(
        self,
        observations: Sequence[WeightObservation],
        cancel_token: Optional[CancellationToken] = None
    ) -> InsightResult:
        """
        Analyze a weight history.

        Args:
            observations: The user's full history, in any order
            cancel_token: Optional cooperative cancellation flag

        Returns:
            InsightResult, possibly the cached instance for an identical series

        Raises:
            AnalysisCancelledError: If cancel_token is set during the analysis
        """
        if len(observations) < self.config.min_data_points:
            return InsightResult.insufficient_data()

        series = sort_observations(observations)
        key = series_fingerprint(series)
        return self.cache.get_or_compute(
            key, self.config.cache_ttl_seconds,
            lambda: self._compute(series, cancel_token)
        )

    def _compute(self, series: List[WeightObservation], cancel_token: Optional[CancellationToken]) -> InsightResult:
        with PerformanceTimer(metrics_logger, "trend_analysis", points=len(series)):
            check_cancelled(cancel_token)
            overall = self.overall_trend(series)
            recent = self.recent_trend(series)
            total = self.total_change(series)

            check_cancelled(cancel_token)
            best_week = self.best_week_progress(series)
            streak = self.current_streak(series)

            check_cancelled(cancel_token)
            patterns = self.detect_patterns(series)
            milestones = self.detect_milestones(series)
            predictions = self.predict(series)

            check_cancelled(cancel_token)
            result = InsightResult(
                overall_trend=overall,
                recent_trend=recent,
                total_change=total,
                average_weekly_change=self.average_weekly_change(series),
                best_week_progress=best_week,
                current_streak=streak,
                patterns=tuple(patterns),
                milestones=tuple(milestones),
                predictions=predictions,
                tips=tuple(self.personalized_tips(recent, overall)),
            )

        logger.debug(f"Trend analysis of {len(series)} points: {overall.value}/{recent.value}")
        return result

    # ------------------------------------------------------------------
    # Trend direction
    # ------------------------------------------------------------------

    def slope(self, series: Sequence[WeightObservation]) -> float:
        values = tuple(weights_of(series))
        return self._slopes.get_or_compute(values, lambda: regression_slope(values))

    def overall_trend(self, series: Sequence[WeightObservation]) -> WeightTrend:
        if len(series) < 2:
            return WeightTrend.STABLE
        return classify_slope(self.slope(series), self.config.trend_slope_threshold)

    def recent_trend(self, series: Sequence[WeightObservation]) -> WeightTrend:
        return self.overall_trend(recent_window(series, self.config.trend_window_days))

    # ------------------------------------------------------------------
    # Change metrics
    # ------------------------------------------------------------------

    def total_change(self, series: Sequence[WeightObservation]) -> float:
        if not series:
            return 0.0
        return series[-1].value - series[0].value

    def average_weekly_change(self, series: Sequence[WeightObservation]) -> float:
        """Average weekly loss; positive means losing."""
        if len(series) < 2:
            return 0.0
        weeks = weeks_between(series[0].date, series[-1].date)
        if weeks <= 0:
            return 0.0
        return safe_divide(-self.total_change(series), weeks)

    def best_week_progress(self, series: Sequence[WeightObservation]) -> float:
        """
        Largest loss between two entries 6-8 days apart, found in one pass.

        The start pointer only moves forward, so some qualifying pairs are
        never tested. That is accepted for linear time.
        """
        if len(series) < 2:
            return 0.0

        min_gap = self.config.best_week_min_gap_days
        max_gap = self.config.best_week_max_gap_days
        best = 0.0
        start = 0

        for end in range(1, len(series)):
            gap = days_between(series[start].date, series[end].date)
            if min_gap <= gap <= max_gap:
                best = max(best, series[start].value - series[end].value)
                start += 1
            elif gap > max_gap:
                start += 1
                if start >= end:
                    start = end - 1
            # gap < min_gap: widen the window by moving end only

        return best

    def current_streak(self, series: Sequence[WeightObservation]) -> int:
        """
        Consecutive same-direction changes, newest first.

        Stable pairs before the first directional change are skipped; after
        it, any stable or opposite pair ends the streak.
        """
        if len(series) < 2:
            return 0

        threshold = self.config.streak_change_threshold
        direction = None
        streak = 0

        for i in range(len(series) - 1, 0, -1):
            change = series[i - 1].value - series[i].value
            if change > threshold:
                step = WeightTrend.LOSING
            elif change < -threshold:
                step = WeightTrend.GAINING
            else:
                step = WeightTrend.STABLE

            if direction is None:
                if step is WeightTrend.STABLE:
                    continue
                direction = step
                streak = 1
            elif step is direction:
                streak += 1
            else:
                break

        return streak

    # ------------------------------------------------------------------
    # Patterns
    # ------------------------------------------------------------------

    def detect_patterns(self, series: Sequence[WeightObservation]) -> List[ProgressPattern]:
        patterns = []
        for detector in (self._detect_plateau, self._detect_weekly_cycle, self._detect_rapid_change):
            pattern = detector(series)
            if pattern is not None:
                patterns.append(pattern)
        return patterns

    def _detect_plateau(self, series: Sequence[WeightObservation]) -> Optional[PlateauPattern]:
        days = self.config.plateau_threshold_days
        if len(series) < days:
            return None

        recent = weights_of(recent_window(series, days))
        if population_std(recent) < self.config.plateau_max_variation:
            return PlateauPattern(duration=days, average_weight=mean(recent))
        return None

    def _detect_weekly_cycle(self, series: Sequence[WeightObservation]) -> Optional[WeeklyCyclePattern]:
        """Weekly cycles are not detected yet; this always returns None."""
        return None

    def _detect_rapid_change(self, series: Sequence[WeightObservation]) -> Optional[RapidChangePattern]:
        days = self.config.rapid_change_days
        if len(series) < days:
            return None

        recent = recent_window(series, days)
        change = recent[-1].value - recent[0].value
        if abs(change) > self.config.significant_weight_change * 2:
            return RapidChangePattern(change=change, days=days)
        return None

    # ------------------------------------------------------------------
    # Milestones, predictions, tips
    # ------------------------------------------------------------------

    def detect_milestones(self, series: Sequence[WeightObservation]) -> List[str]:
        milestones = []
        if len(series) < 2:
            return milestones

        total_loss = series[0].value - series[-1].value
        days_tracking = days_between(series[0].date, series[-1].date)

        for threshold, message in WEIGHT_LOSS_MILESTONES:
            if total_loss >= threshold:
                milestones.append(message)
                break

        for threshold, message in TRACKING_MILESTONES:
            if days_tracking >= threshold:
                milestones.append(message)
                break

        return milestones

    def predict(self, series: Sequence[WeightObservation]) -> Dict[str, float]:
        """Linear extrapolation from the latest value, clamped to the observed range +/- margin."""
        if len(series) < self.config.min_data_points:
            return {}

        slope = self.slope(series)
        current = series[-1].value
        values = weights_of(series)
        lower = min(values) - self.config.prediction_margin
        upper = max(values) + self.config.prediction_margin

        return {
            label: clamp(current + slope * steps, lower, upper)
            for label, steps in PREDICTION_HORIZONS.items()
        }

    def personalized_tips(self, recent: WeightTrend, overall: WeightTrend) -> List[str]:
        if recent is WeightTrend.LOSING and overall is WeightTrend.LOSING:
            key = 'steady_loss'
        elif recent is WeightTrend.STABLE and overall is WeightTrend.LOSING:
            key = 'plateau_warning'
        elif recent is WeightTrend.GAINING:
            key = 'recent_gain'
        else:
            key = 'default'
        return list(TIPS[key])
