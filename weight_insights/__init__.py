"""
Weight Insights Package
"""

# Data model
from .models import (
    WeightObservation,
    WeightTrend,
    PlateauSeverity,
    PatternKind,
    ProgressPattern,
    PlateauPattern,
    RapidChangePattern,
    WeeklyCyclePattern,
    InsightResult,
    PlateauPeriod,
    PlateauResult,
)

# Analyzers
from .analysis import (
    TrendAnalyzer,
    PlateauAnalyzer,
    ResultCache,
    BoundedMemo,
    classify_slope,
    grade_severity,
)

# Configuration
from .config_loader import (
    AnalysisConfig,
    TrendConfig,
    PlateauConfig,
    ConfigLoader,
    load_config,
)

# History providers and engine
from .database import WeightHistoryDB, WeightHistoryProvider, get_history_db
from .engine import InsightsEngine, UserReport

# Errors and utilities
from .exceptions import AnalysisCancelledError, ConfigurationError
from .utils import (
    StructuredLogger,
    PerformanceTimer,
    CancellationToken,
    safe_divide,
)

__all__ = [
    # Data model
    'WeightObservation',
    'WeightTrend',
    'PlateauSeverity',
    'PatternKind',
    'ProgressPattern',
    'PlateauPattern',
    'RapidChangePattern',
    'WeeklyCyclePattern',
    'InsightResult',
    'PlateauPeriod',
    'PlateauResult',

    # Analyzers
    'TrendAnalyzer',
    'PlateauAnalyzer',
    'ResultCache',
    'BoundedMemo',
    'classify_slope',
    'grade_severity',

    # Configuration
    'AnalysisConfig',
    'TrendConfig',
    'PlateauConfig',
    'ConfigLoader',
    'load_config',

    # Providers and engine
    'WeightHistoryDB',
    'WeightHistoryProvider',
    'get_history_db',
    'InsightsEngine',
    'UserReport',

    # Errors and utilities
    'AnalysisCancelledError',
    'ConfigurationError',
    'StructuredLogger',
    'PerformanceTimer',
    'CancellationToken',
    'safe_divide',
]
