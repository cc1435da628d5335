"""
Unit tests for PlateauAnalyzer - detection, severity, probability,
breakout guidance and caching.
"""

import pytest
from datetime import date, timedelta

from weight_insights.analysis.plateau_analyzer import PlateauAnalyzer, grade_severity
from weight_insights.config_loader import PlateauConfig
from weight_insights.constants import (
    ADAPTATION_TRIGGERS,
    BREAKOUT_INSUFFICIENT_DATA,
    BREAKOUT_NOT_APPLICABLE,
    BREAKOUT_STRATEGIES,
    GENERAL_TRIGGERS,
    INSUFFICIENT_DATA_STRATEGIES,
    NO_PLATEAU_STRATEGY,
)
from weight_insights.exceptions import AnalysisCancelledError
from weight_insights.models import PlateauPeriod, PlateauSeverity
from weight_insights.utils import CancellationToken


def period(duration, start=date(2024, 1, 1), weight=70.0):
    return PlateauPeriod(
        start_date=start,
        end_date=start + timedelta(days=duration - 1),
        duration_days=duration,
        average_weight=weight,
        weight_variation=0.1,
        min_weight=weight - 0.2,
        max_weight=weight + 0.2,
    )


class TestPlateauAnalyzer:
    """Test suite for PlateauAnalyzer."""

    @pytest.fixture
    def analyzer(self):
        return PlateauAnalyzer()

    # ============= Insufficient data =============

    def test_insufficient_data(self, analyzer, constant_series):
        result = analyzer.analyze(constant_series(13))

        assert result.has_insufficient_data
        assert not result.is_in_plateau
        assert result.severity is PlateauSeverity.NONE
        assert result.plateau_probability == 0.0
        assert list(result.breakout_strategies) == INSUFFICIENT_DATA_STRATEGIES
        assert result.triggers == ()
        assert result.expected_breakout_timeframe == BREAKOUT_INSUFFICIENT_DATA
        assert len(analyzer.cache) == 0

    # ============= Current plateau =============

    def test_mild_plateau(self, analyzer, constant_series):
        result = analyzer.analyze(constant_series(25))

        assert result.is_in_plateau
        assert result.severity is PlateauSeverity.MILD
        assert result.current_plateau.duration_days == 25
        assert result.current_plateau.average_weight == pytest.approx(70.0)
        assert result.days_since_plateau_start == 25
        assert result.plateau_probability == pytest.approx(0.4 + 0.4 + 0.2 * 14 / 21)
        assert result.status_message() == "⚖️ Minor plateau detected (25 days)"
        assert result.probability_percent() == "93%"

    def test_moderate_plateau(self, analyzer, constant_series):
        result = analyzer.analyze(constant_series(35))

        assert result.severity is PlateauSeverity.MODERATE
        assert list(result.breakout_strategies) == BREAKOUT_STRATEGIES['MODERATE']

    @pytest.mark.critical
    def test_severe_plateau_extends_past_search_window(self, analyzer, constant_series):
        series = constant_series(60)
        result = analyzer.analyze(series)

        assert result.severity is PlateauSeverity.SEVERE
        assert result.current_plateau.duration_days == 60
        assert result.current_plateau.start_date == series[0].date
        assert result.priority_action() == "Time for significant strategy changes"

    def test_plateau_after_loss(self, analyzer, make_series):
        series = make_series([120.0 - 2.0 * i for i in range(20)] + [80.0] * 30)
        result = analyzer.analyze(series)

        assert result.is_in_plateau
        assert result.severity is PlateauSeverity.MILD
        assert 21 <= result.current_plateau.duration_days < 35
        assert result.current_plateau.end_date == series[-1].date

    def test_steady_loss_is_not_a_plateau(self, analyzer, make_series):
        result = analyzer.analyze(make_series([90.0 - 0.5 * i for i in range(30)]))

        assert not result.is_in_plateau
        assert result.current_plateau is None
        assert result.historical_plateaus == ()
        assert result.severity is PlateauSeverity.NONE
        assert list(result.breakout_strategies) == [NO_PLATEAU_STRATEGY]
        assert list(result.triggers) == GENERAL_TRIGGERS[:3]
        assert result.expected_breakout_timeframe == BREAKOUT_NOT_APPLICABLE
        assert result.plateau_probability == pytest.approx(0.2 * 14 / 21)
        assert result.status_message() == "🎯 Progress on track"

    # ============= Historical plateaus =============

    def test_historical_plateau_before_loss(self, analyzer, make_series, base_date):
        series = make_series([80.0] * 20 + [79.5 - 0.5 * i for i in range(20)])
        result = analyzer.analyze(series)

        assert not result.is_in_plateau
        assert len(result.historical_plateaus) == 1

        earlier = result.historical_plateaus[0]
        assert earlier.start_date == base_date
        assert 14 <= earlier.duration_days <= 25
        assert earlier.average_weight == pytest.approx(80.0, abs=0.3)
        assert result.encouragement_message() == "💪 You've broken through plateaus before!"
        assert result.historical_summary() == "1 previous plateau overcome"

    def test_historical_scan_takes_longest_window(self, analyzer, constant_series):
        smoothed = analyzer.smooth(constant_series(30))
        plateaus = analyzer.detect_historical_plateaus(smoothed)

        assert len(plateaus) == 1
        assert plateaus[0].duration_days == 30

    def test_historical_scan_honours_cancellation(self, analyzer, constant_series):
        token = CancellationToken()
        token.cancel()
        with pytest.raises(AnalysisCancelledError):
            analyzer.detect_historical_plateaus(constant_series(30), token)

    # ============= Plateau predicate =============

    def test_is_plateau_needs_minimum_length(self, analyzer):
        assert not analyzer.is_plateau([70.0] * 13)
        assert analyzer.is_plateau([70.0] * 14)

    def test_variation_bound_is_inclusive(self, analyzer):
        assert analyzer.is_plateau([69.0, 71.0] * 7)
        assert not analyzer.is_plateau([68.9, 71.1] * 7)

    def test_sloped_window_is_not_plateau(self, analyzer):
        assert not analyzer.is_plateau([70.0 + 0.06 * i for i in range(14)])

    def test_smoothing_keeps_dates(self, analyzer, make_series):
        series = make_series([70.0, 72.0, 70.0, 72.0, 70.0, 72.0, 70.0])
        smoothed = analyzer.smooth(series)

        assert [o.date for o in smoothed] == [o.date for o in series]
        assert smoothed[3].value == pytest.approx(71.2)

    # ============= Probability =============

    def test_probability_short_series(self, analyzer, constant_series):
        assert analyzer.plateau_probability(constant_series(6)) == 0.0

    def test_probability_within_bounds(self, analyzer, make_series, weight_generator):
        series = make_series(weight_generator(days=40, daily_variation=1.5))
        assert 0.0 <= analyzer.plateau_probability(analyzer.smooth(series)) <= 1.0

    # ============= Severity =============

    @pytest.mark.critical
    @pytest.mark.parametrize("duration,expected", [
        (20, PlateauSeverity.NONE),
        (21, PlateauSeverity.MILD),
        (34, PlateauSeverity.MILD),
        (35, PlateauSeverity.MODERATE),
        (59, PlateauSeverity.MODERATE),
        (60, PlateauSeverity.SEVERE),
        (200, PlateauSeverity.SEVERE),
    ])
    def test_grade_severity(self, duration, expected):
        assert grade_severity(period(duration)) is expected

    def test_no_plateau_grades_none(self):
        assert grade_severity(None) is PlateauSeverity.NONE

    # ============= Guidance =============

    @pytest.mark.parametrize("severity", list(PlateauSeverity))
    def test_triggers_capped_at_three(self, analyzer, severity):
        triggers = analyzer.possible_triggers(severity)

        assert len(triggers) == 3
        if severity is PlateauSeverity.NONE:
            assert triggers == GENERAL_TRIGGERS[:3]
        else:
            assert triggers[0] == ADAPTATION_TRIGGERS[severity.name]

    def test_strategies_follow_severity(self, analyzer):
        assert analyzer.breakout_strategies(None, PlateauSeverity.NONE) == [NO_PLATEAU_STRATEGY]
        assert analyzer.breakout_strategies(period(60), PlateauSeverity.SEVERE) == BREAKOUT_STRATEGIES['SEVERE']

    def test_strategy_table_covers_plateau_severities(self):
        assert set(BREAKOUT_STRATEGIES) == {'MILD', 'MODERATE', 'SEVERE'}

    @pytest.mark.parametrize("current,history,expected", [
        (25, [], "Plateau should break soon with consistent effort"),
        (21, [], "Expected to break within 1 week"),
        (21, [30], "Expected to break within 2 weeks"),
        (21, [40], "Expected to break within 1 month"),
        (21, [60, 60], "May take several weeks - consider strategy changes"),
        (23, [30, 31], "Expected to break within 1 week"),  # 7.5 days truncates to 7
    ])
    def test_breakout_timeframe(self, analyzer, current, history, expected):
        historical = [period(d) for d in history]
        assert analyzer.estimate_breakout_timeframe(period(current), historical) == expected

    def test_breakout_timeframe_without_plateau(self, analyzer):
        assert analyzer.estimate_breakout_timeframe(None, [period(30)]) == BREAKOUT_NOT_APPLICABLE

    # ============= Caching and cancellation =============

    def test_repeated_analysis_returns_cached_result(self, analyzer, constant_series):
        series = constant_series(25)
        assert analyzer.analyze(series) is analyzer.analyze(list(reversed(series)))

    def test_cancelled_analysis_caches_nothing(self, analyzer, constant_series):
        token = CancellationToken()
        token.cancel()

        with pytest.raises(AnalysisCancelledError):
            analyzer.analyze(constant_series(25), cancel_token=token)

        assert len(analyzer.cache) == 0

    def test_custom_sensitivity(self, make_series):
        strict = PlateauAnalyzer(PlateauConfig(max_plateau_variation=0.05))
        noisy = make_series([70.0, 70.8] * 15)

        assert not strict.analyze(noisy).is_in_plateau
        assert PlateauAnalyzer().analyze(noisy).is_in_plateau
