"""
Data models for the weight insights engine.

Observations come in, InsightResult and PlateauResult come out. All of
them are frozen: a result handed out from the cache is the same object
every caller sees.
"""

from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType
from enum import Enum
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple

from .constants import (
    BREAKOUT_INSUFFICIENT_DATA,
    INSUFFICIENT_DATA_STRATEGIES,
    INSUFFICIENT_DATA_TIPS,
)


@dataclass(frozen=True)
class WeightObservation:
    """A single weight reading with day granularity."""

    date: date
    value: float

    def __post_init__(self):
        if not self.value > 0:
            raise ValueError(f"Weight must be positive, got {self.value}")

    def to_dict(self) -> Dict[str, Any]:
        return {'date': self.date.isoformat(), 'value': self.value}


class WeightTrend(Enum):
    """Direction of weight change."""
    LOSING = "losing"
    GAINING = "gaining"
    STABLE = "stable"

    @property
    def description(self) -> str:
        return {
            WeightTrend.LOSING: "Losing Weight",
            WeightTrend.GAINING: "Gaining Weight",
            WeightTrend.STABLE: "Weight Stable",
        }[self]

    @property
    def emoji(self) -> str:
        return {
            WeightTrend.LOSING: "📉",
            WeightTrend.GAINING: "📈",
            WeightTrend.STABLE: "⚖️",
        }[self]

    @property
    def is_positive(self) -> bool:
        """Losing counts as positive progress for weight-loss goals."""
        return self is WeightTrend.LOSING


class PlateauSeverity(Enum):
    """Severity of the current plateau, graded on its duration."""
    NONE = "none"          # no plateau
    MILD = "mild"          # 3-5 weeks
    MODERATE = "moderate"  # 5-8 weeks
    SEVERE = "severe"      # 8+ weeks

    @property
    def description(self) -> str:
        return {
            PlateauSeverity.NONE: "No Plateau",
            PlateauSeverity.MILD: "Mild Plateau",
            PlateauSeverity.MODERATE: "Moderate Plateau",
            PlateauSeverity.SEVERE: "Extended Plateau",
        }[self]

    @property
    def emoji(self) -> str:
        return {
            PlateauSeverity.NONE: "✅",
            PlateauSeverity.MILD: "⚠️",
            PlateauSeverity.MODERATE: "🟡",
            PlateauSeverity.SEVERE: "🔴",
        }[self]

    @property
    def urgency_level(self) -> int:
        return list(PlateauSeverity).index(self)

    @property
    def action_frequency(self) -> str:
        return {
            PlateauSeverity.NONE: "Continue routine",
            PlateauSeverity.MILD: "Weekly adjustments",
            PlateauSeverity.MODERATE: "Bi-weekly reviews",
            PlateauSeverity.SEVERE: "Immediate changes needed",
        }[self]

    @property
    def requires_immediate_action(self) -> bool:
        return self is PlateauSeverity.SEVERE

    @property
    def expected_resolution_time(self) -> str:
        return {
            PlateauSeverity.NONE: "N/A",
            PlateauSeverity.MILD: "1-2 weeks with adjustments",
            PlateauSeverity.MODERATE: "2-4 weeks with strategy changes",
            PlateauSeverity.SEVERE: "4+ weeks with significant changes",
        }[self]


# ============================================================================
# Progress patterns (tagged union)
# ============================================================================

class PatternKind(Enum):
    PLATEAU = "plateau"
    RAPID_CHANGE = "rapid_change"
    WEEKLY_CYCLE = "weekly_cycle"


class ProgressPattern:
    """Base for pattern variants; each subclass sets ``kind``."""

    kind: ClassVar[PatternKind]

    def description(self) -> str:
        raise NotImplementedError

    def advice(self) -> str:
        raise NotImplementedError

    def to_dict(self) -> Dict[str, Any]:
        payload = {k: v for k, v in self.__dict__.items()}
        payload['kind'] = self.kind.value
        return payload


@dataclass(frozen=True)
class PlateauPattern(ProgressPattern):
    """Minimal change over an extended period."""

    duration: int
    average_weight: float

    kind: ClassVar[PatternKind] = PatternKind.PLATEAU

    def description(self) -> str:
        return f"⚖️ Weight plateau detected for {self.duration} days"

    def advice(self) -> str:
        return ("Consider changing your routine to break through the plateau. "
                "Try adjusting your calorie intake or adding new exercises.")


@dataclass(frozen=True)
class RapidChangePattern(ProgressPattern):
    """Large change in a short time. Positive change is a gain."""

    change: float
    days: int

    kind: ClassVar[PatternKind] = PatternKind.RAPID_CHANGE

    def description(self) -> str:
        direction = "gain" if self.change > 0 else "loss"
        return f"⚡ Rapid weight {direction}: {abs(self.change):.1f}kg in {self.days} days"

    def advice(self) -> str:
        if self.change > 0:
            return ("Rapid weight gain detected. Consider reviewing your recent "
                    "diet and exercise habits.")
        return ("Rapid weight loss detected. Ensure you're losing weight in a "
                "healthy, sustainable way.")


@dataclass(frozen=True)
class WeeklyCyclePattern(ProgressPattern):
    """Weight that rises and falls on a weekly rhythm."""

    average_fluctuation: float
    peak_day: str
    low_day: str

    kind: ClassVar[PatternKind] = PatternKind.WEEKLY_CYCLE

    def description(self) -> str:
        return f"📅 Weekly pattern: Weight peaks on {self.peak_day}, lowest on {self.low_day}"

    def advice(self) -> str:
        return ("You have a weekly weight pattern. This is often related to weekend "
                "habits or water retention. Focus on consistency throughout the week.")


# ============================================================================
# Trend insights
# ============================================================================

@dataclass(frozen=True)
class InsightResult:
    """Everything TrendAnalyzer reports about a weight history."""

    overall_trend: WeightTrend
    recent_trend: WeightTrend
    total_change: float
    average_weekly_change: float
    best_week_progress: float
    current_streak: int
    patterns: Tuple[ProgressPattern, ...] = ()
    milestones: Tuple[str, ...] = ()
    predictions: Mapping[str, float] = field(default_factory=dict)
    tips: Tuple[str, ...] = ()
    has_insufficient_data: bool = False

    def __post_init__(self):
        # Cached results are shared between callers
        object.__setattr__(self, 'predictions', MappingProxyType(dict(self.predictions)))

    @classmethod
    def insufficient_data(cls) -> 'InsightResult':
        return cls(
            overall_trend=WeightTrend.STABLE,
            recent_trend=WeightTrend.STABLE,
            total_change=0.0,
            average_weekly_change=0.0,
            best_week_progress=0.0,
            current_streak=0,
            tips=tuple(INSUFFICIENT_DATA_TIPS),
            has_insufficient_data=True,
        )

    def progress_summary(self) -> str:
        if self.has_insufficient_data:
            return "Start tracking to see your progress!"
        if self.total_change < -0.5:
            return f"You're making great progress! {abs(self.total_change):.1f}kg lost!"
        if self.total_change > 0.5:
            return f"Focus on consistency. {self.total_change:.1f}kg gained recently."
        return "Your weight is stable. Keep up the good work!"

    def trend_description(self) -> str:
        return {
            WeightTrend.LOSING: "📉 Recent trend: Losing weight",
            WeightTrend.GAINING: "📈 Recent trend: Gaining weight",
            WeightTrend.STABLE: "⚖️ Recent trend: Weight stable",
        }[self.recent_trend]

    def motivation_message(self) -> str:
        if self.has_insufficient_data:
            return "🚀 Start your journey today!"
        if self.current_streak >= 7:
            return f"🔥 You're on fire! {self.current_streak} day streak!"
        if self.total_change < -5.0:
            return "🌟 Amazing transformation! Keep going!"
        if self.average_weekly_change > 0.5:
            return "💪 Consistent progress! Great work!"
        return "🎯 Stay focused on your goals!"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'overall_trend': self.overall_trend.value,
            'recent_trend': self.recent_trend.value,
            'total_change': self.total_change,
            'average_weekly_change': self.average_weekly_change,
            'best_week_progress': self.best_week_progress,
            'current_streak': self.current_streak,
            'patterns': [p.to_dict() for p in self.patterns],
            'milestones': list(self.milestones),
            'predictions': dict(self.predictions),
            'tips': list(self.tips),
            'has_insufficient_data': self.has_insufficient_data,
        }


# ============================================================================
# Plateau analysis
# ============================================================================

@dataclass(frozen=True)
class PlateauPeriod:
    """A contiguous stable window. Duration counts observations."""

    start_date: date
    end_date: date
    duration_days: int
    average_weight: float
    weight_variation: float
    min_weight: float
    max_weight: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'start_date': self.start_date.isoformat(),
            'end_date': self.end_date.isoformat(),
            'duration_days': self.duration_days,
            'average_weight': self.average_weight,
            'weight_variation': self.weight_variation,
            'min_weight': self.min_weight,
            'max_weight': self.max_weight,
        }


@dataclass(frozen=True)
class PlateauResult:
    """Everything PlateauAnalyzer reports about a weight history."""

    is_in_plateau: bool
    current_plateau: Optional[PlateauPeriod]
    historical_plateaus: Tuple[PlateauPeriod, ...]
    plateau_probability: float
    severity: PlateauSeverity
    breakout_strategies: Tuple[str, ...]
    triggers: Tuple[str, ...]
    expected_breakout_timeframe: str
    has_insufficient_data: bool = False

    @property
    def days_since_plateau_start(self) -> int:
        return self.current_plateau.duration_days if self.current_plateau else 0

    @property
    def average_plateau_weight(self) -> float:
        return self.current_plateau.average_weight if self.current_plateau else 0.0

    @classmethod
    def insufficient_data(cls) -> 'PlateauResult':
        return cls(
            is_in_plateau=False,
            current_plateau=None,
            historical_plateaus=(),
            plateau_probability=0.0,
            severity=PlateauSeverity.NONE,
            breakout_strategies=tuple(INSUFFICIENT_DATA_STRATEGIES),
            triggers=(),
            expected_breakout_timeframe=BREAKOUT_INSUFFICIENT_DATA,
            has_insufficient_data=True,
        )

    def status_message(self) -> str:
        days = self.days_since_plateau_start
        if self.has_insufficient_data:
            return "📊 Track more data to analyze plateaus"
        if self.is_in_plateau:
            return {
                PlateauSeverity.MILD: f"⚖️ Minor plateau detected ({days} days)",
                PlateauSeverity.MODERATE: f"⚠️ Plateau in progress ({days} days)",
                PlateauSeverity.SEVERE: f"🚨 Extended plateau ({days} days)",
                PlateauSeverity.NONE: "📈 Progress continues",
            }[self.severity]
        if self.plateau_probability > 0.7:
            return "⚠️ Possible plateau forming"
        if self.plateau_probability > 0.5:
            return "👀 Watch for plateau signs"
        return "🎯 Progress on track"

    def priority_action(self) -> str:
        if self.has_insufficient_data:
            return "Keep tracking daily to unlock insights"
        if self.severity is PlateauSeverity.SEVERE:
            return "Time for significant strategy changes"
        if self.severity is PlateauSeverity.MODERATE:
            return "Consider adjusting your approach"
        if self.severity is PlateauSeverity.MILD:
            return "Small tweaks may help break through"
        if self.plateau_probability > 0.7:
            return "Be proactive - make small changes now"
        return "Continue your current successful approach"

    def encouragement_message(self) -> str:
        if self.has_insufficient_data:
            return "🚀 Every expert was once a beginner"
        if self.historical_plateaus and not self.is_in_plateau:
            return "💪 You've broken through plateaus before!"
        if self.is_in_plateau and self.days_since_plateau_start < 30:
            return "🎯 Plateaus are normal - stay consistent"
        if self.is_in_plateau:
            return "🌟 This is when mental strength matters most"
        return "🔥 You're crushing your goals!"

    def probability_percent(self) -> str:
        return f"{int(self.plateau_probability * 100)}%"

    def top_strategy(self) -> str:
        if self.breakout_strategies:
            return self.breakout_strategies[0]
        return "🎯 Stay consistent with your current routine"

    def historical_summary(self) -> str:
        count = len(self.historical_plateaus)
        if count == 0:
            return "No previous plateaus detected"
        if count == 1:
            return "1 previous plateau overcome"
        return f"{count} previous plateaus overcome"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'is_in_plateau': self.is_in_plateau,
            'current_plateau': self.current_plateau.to_dict() if self.current_plateau else None,
            'historical_plateaus': [p.to_dict() for p in self.historical_plateaus],
            'plateau_probability': self.plateau_probability,
            'days_since_plateau_start': self.days_since_plateau_start,
            'average_plateau_weight': self.average_plateau_weight,
            'severity': self.severity.value,
            'breakout_strategies': list(self.breakout_strategies),
            'triggers': list(self.triggers),
            'expected_breakout_timeframe': self.expected_breakout_timeframe,
            'has_insufficient_data': self.has_insufficient_data,
        }
