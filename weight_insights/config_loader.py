"""
Configuration records and a loader that interprets high-level profiles.

The analyzers own frozen config records instead of reading module
globals, so two analyzers with different settings can live side by side.
"""
import dataclasses
import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .constants import PLATEAU_DEFAULTS, TREND_DEFAULTS
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrendConfig:
    """Thresholds for TrendAnalyzer."""

    min_data_points: int = TREND_DEFAULTS['min_data_points']
    trend_window_days: int = TREND_DEFAULTS['trend_window_days']
    trend_slope_threshold: float = TREND_DEFAULTS['trend_slope_threshold']
    streak_change_threshold: float = TREND_DEFAULTS['streak_change_threshold']
    plateau_threshold_days: int = TREND_DEFAULTS['plateau_threshold_days']
    plateau_max_variation: float = TREND_DEFAULTS['plateau_max_variation']
    significant_weight_change: float = TREND_DEFAULTS['significant_weight_change']
    rapid_change_days: int = TREND_DEFAULTS['rapid_change_days']
    best_week_min_gap_days: int = TREND_DEFAULTS['best_week_min_gap_days']
    best_week_max_gap_days: int = TREND_DEFAULTS['best_week_max_gap_days']
    prediction_margin: float = TREND_DEFAULTS['prediction_margin']
    cache_ttl_seconds: float = TREND_DEFAULTS['cache_ttl_seconds']
    slope_cache_size: int = TREND_DEFAULTS['slope_cache_size']

    def __post_init__(self):
        _require_positive(self, ['min_data_points', 'trend_window_days',
                                 'plateau_threshold_days', 'rapid_change_days',
                                 'slope_cache_size'])
        if self.best_week_min_gap_days > self.best_week_max_gap_days:
            raise ConfigurationError(
                f"best_week_min_gap_days ({self.best_week_min_gap_days}) exceeds "
                f"best_week_max_gap_days ({self.best_week_max_gap_days})"
            )


@dataclass(frozen=True)
class PlateauConfig:
    """Thresholds for PlateauAnalyzer."""

    min_plateau_days: int = PLATEAU_DEFAULTS['min_plateau_days']
    strict_plateau_days: int = PLATEAU_DEFAULTS['strict_plateau_days']
    max_plateau_variation: float = PLATEAU_DEFAULTS['max_plateau_variation']
    max_plateau_slope: float = PLATEAU_DEFAULTS['max_plateau_slope']
    probability_slope_threshold: float = PLATEAU_DEFAULTS['probability_slope_threshold']
    trend_analysis_window: int = PLATEAU_DEFAULTS['trend_analysis_window']
    moving_average_window: int = PLATEAU_DEFAULTS['moving_average_window']
    default_plateau_duration: float = PLATEAU_DEFAULTS['default_plateau_duration']
    cache_ttl_seconds: float = PLATEAU_DEFAULTS['cache_ttl_seconds']

    def __post_init__(self):
        _require_positive(self, ['min_plateau_days', 'strict_plateau_days',
                                 'trend_analysis_window', 'moving_average_window'])


@dataclass(frozen=True)
class AnalysisConfig:
    """Complete engine configuration."""

    trend: TrendConfig = field(default_factory=TrendConfig)
    plateau: PlateauConfig = field(default_factory=PlateauConfig)


def _require_positive(config: Any, names):
    for name in names:
        value = getattr(config, name)
        if value <= 0:
            raise ConfigurationError(f"{type(config).__name__}.{name} must be positive, got {value}")


class ConfigLoader:
    """Loads and interprets configuration with profile support."""

    # Plateau predicate strictness; 'moderate' keeps the defaults
    PLATEAU_SENSITIVITY_MAP = {
        "strict": {"max_plateau_variation": 0.75, "max_plateau_slope": 0.03},
        "moderate": {"max_plateau_variation": 1.0, "max_plateau_slope": 0.05},
        "lenient": {"max_plateau_variation": 1.5, "max_plateau_slope": 0.08},
    }

    KNOWN_SECTIONS = {"profile", "profiles", "trend", "plateau"}

    @classmethod
    def load(cls, config_path: Union[str, Path] = "config.toml") -> AnalysisConfig:
        """Load and interpret a configuration file."""
        path = Path(config_path)
        if not path.exists():
            logger.warning(f"Config file {path} not found, using defaults")
            return AnalysisConfig()

        with open(path, "rb") as f:
            try:
                raw_config = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ConfigurationError(f"Invalid TOML in {path}: {e}") from e

        return cls.from_dict(raw_config)

    @classmethod
    def from_dict(cls, raw_config: Dict[str, Any]) -> AnalysisConfig:
        """Interpret an already-parsed configuration mapping."""
        unknown = set(raw_config) - cls.KNOWN_SECTIONS
        if unknown:
            raise ConfigurationError(f"Unknown configuration sections: {sorted(unknown)}")

        profile = cls._resolve_profile(raw_config)

        plateau_overrides = dict(cls._sensitivity_settings(profile))
        plateau_overrides.update(raw_config.get("plateau", {}))
        trend_overrides = dict(raw_config.get("trend", {}))

        return AnalysisConfig(
            trend=cls._build(TrendConfig, trend_overrides),
            plateau=cls._build(PlateauConfig, plateau_overrides),
        )

    @classmethod
    def _resolve_profile(cls, raw_config: Dict[str, Any]) -> Dict[str, Any]:
        profile_name = raw_config.get("profile", "balanced")
        profiles = raw_config.get("profiles", {})
        if profile_name not in profiles:
            if profiles:
                logger.warning(f"Unknown profile '{profile_name}', using defaults")
            return {}
        return profiles[profile_name]

    @classmethod
    def _sensitivity_settings(cls, profile: Dict[str, Any]) -> Dict[str, Any]:
        sensitivity = profile.get("plateau_sensitivity", "moderate")
        if sensitivity not in cls.PLATEAU_SENSITIVITY_MAP:
            logger.warning(f"Unknown plateau_sensitivity '{sensitivity}', using moderate")
            sensitivity = "moderate"
        return cls.PLATEAU_SENSITIVITY_MAP[sensitivity]

    @staticmethod
    def _build(config_cls, overrides: Dict[str, Any]):
        valid = {f.name for f in dataclasses.fields(config_cls)}
        unknown = set(overrides) - valid
        if unknown:
            raise ConfigurationError(
                f"Unknown {config_cls.__name__} keys: {sorted(unknown)}"
            )
        return config_cls(**overrides)


def load_config(config_path: Optional[Union[str, Path]] = "config.toml") -> AnalysisConfig:
    """Load configuration with profile interpretation."""
    if config_path is None:
        return AnalysisConfig()
    return ConfigLoader.load(config_path)
