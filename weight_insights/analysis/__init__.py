"""Weight progress analysis module"""

from .cache import BoundedMemo, CacheEntry, ResultCache
from .plateau_analyzer import PlateauAnalyzer, grade_severity
from .trend_analyzer import TrendAnalyzer, classify_slope

__all__ = [
    'TrendAnalyzer',
    'PlateauAnalyzer',
    'ResultCache',
    'CacheEntry',
    'BoundedMemo',
    'classify_slope',
    'grade_severity',
]
