"""
Utility functions for the weight insights engine.
Structured metric logging, timing, cancellation and numeric guards.
"""

import json
import logging
import threading
import time
from datetime import datetime
from enum import Enum
from typing import Optional

from .exceptions import AnalysisCancelledError


# ============================================================================
# Logging Utilities
# ============================================================================

class LogLevel(Enum):
    ERROR = "ERROR"
    INFO = "INFO"
    METRIC = "METRIC"


_LEVEL_MAP = {
    LogLevel.ERROR: logging.ERROR,
    LogLevel.INFO: logging.INFO,
    LogLevel.METRIC: logging.INFO,
}


class StructuredLogger:
    """JSON-line logger for analysis metrics, routed through ``logging``."""

    def __init__(self, name: str, enabled: bool = True):
        self.name = name
        self.enabled = enabled
        self._logger = logging.getLogger(f"weight_insights.{name}")

    def _log(self, level: LogLevel, message: str, **kwargs):
        if not self.enabled:
            return

        log_entry = {
            "timestamp": datetime.now().isoformat(),
            "level": level.value,
            "logger": self.name,
            "message": message,
            **kwargs
        }
        self._logger.log(_LEVEL_MAP[level], json.dumps(log_entry, default=str))

    def error(self, message: str, **kwargs):
        self._log(LogLevel.ERROR, message, **kwargs)

    def info(self, message: str, **kwargs):
        self._log(LogLevel.INFO, message, **kwargs)

    def metric(self, metric_name: str, value: float, **tags):
        self._log(LogLevel.METRIC, f"Metric: {metric_name}",
                  metric=metric_name, value=value, tags=tags)


class PerformanceTimer:
    """Context manager that records ``<operation>_duration_ms``."""

    def __init__(self, logger: StructuredLogger, operation: str, **tags):
        self.logger = logger
        self.operation = operation
        self.tags = tags
        self.start_time: Optional[float] = None
        self.duration_ms: Optional[float] = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.start_time is not None:
            self.duration_ms = (time.perf_counter() - self.start_time) * 1000
            self.logger.metric(f"{self.operation}_duration_ms", self.duration_ms,
                               operation=self.operation,
                               completed=exc_type is None,
                               **self.tags)
        return False


metrics_logger = StructuredLogger("metrics")


# ============================================================================
# Cancellation
# ============================================================================

class CancellationToken:
    """
    Cooperative cancellation flag shared between a caller and an analysis.

    The analyzers call ``raise_if_cancelled`` between stages and inside
    their window scans. A child token is also cancelled by its parent.
    """

    def __init__(self, parent: Optional['CancellationToken'] = None):
        self._event = threading.Event()
        self.parent = parent

    def cancel(self):
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self.parent is not None and self.parent.is_cancelled

    def raise_if_cancelled(self):
        if self.is_cancelled:
            raise AnalysisCancelledError("Analysis cancelled")


def check_cancelled(token: Optional[CancellationToken]):
    """Raise AnalysisCancelledError if ``token`` is set; None never cancels."""
    if token is not None:
        token.raise_if_cancelled()


# ============================================================================
# General Utilities
# ============================================================================

def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning ``default`` for a zero denominator."""
    if denominator == 0:
        return default
    return numerator / denominator


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


__all__ = [
    'LogLevel',
    'StructuredLogger',
    'PerformanceTimer',
    'metrics_logger',
    'CancellationToken',
    'check_cancelled',
    'safe_divide',
    'clamp',
]
