"""
Insights engine.

Pulls a user's history from a provider and runs the trend and plateau
analyzers side by side. Each analyzer keeps its own cache.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from .analysis.plateau_analyzer import PlateauAnalyzer
from .analysis.trend_analyzer import TrendAnalyzer
from .config_loader import AnalysisConfig
from .database.history import WeightHistoryProvider, get_history_db
from .exceptions import AnalysisCancelledError
from .models import InsightResult, PlateauResult, WeightObservation
from .utils import CancellationToken, metrics_logger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserReport:
    """Both analyses for one user snapshot."""

    user_id: Optional[str]
    insights: InsightResult
    plateau: PlateauResult

    def to_dict(self) -> Dict[str, Any]:
        return {
            'user_id': self.user_id,
            'insights': self.insights.to_dict(),
            'plateau': self.plateau.to_dict(),
        }


class InsightsEngine:
    """
    Runs TrendAnalyzer and PlateauAnalyzer concurrently on one snapshot.

    If either analysis is cancelled or fails, the other is cancelled too
    and the error propagates; nothing partial is returned.
    """

    def __init__(
        self,
        provider: Optional[WeightHistoryProvider] = None,
        config: Optional[AnalysisConfig] = None,
        max_workers: int = 2
    ):
        self.config = config or AnalysisConfig()
        self.provider = provider if provider is not None else get_history_db()
        self.trend_analyzer = TrendAnalyzer(self.config.trend)
        self.plateau_analyzer = PlateauAnalyzer(self.config.plateau)
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="insights")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self):
        self._executor.shutdown(wait=True)

    def analyze_user(self, user_id: str, cancel_token: Optional[CancellationToken] = None) -> UserReport:
        """Analyze the provider's current history for ``user_id``."""
        history = self.provider.get_history(user_id)
        logger.debug(f"Analyzing {len(history)} observations for user {user_id}")
        return self.analyze(history, cancel_token=cancel_token, user_id=user_id)

    def analyze(
        self,
        observations: Sequence[WeightObservation],
        cancel_token: Optional[CancellationToken] = None,
        user_id: Optional[str] = None
    ) -> UserReport:
        """
        Analyze an explicit snapshot.

        Raises:
            AnalysisCancelledError: If cancel_token is set before both finish
        """
        snapshot = tuple(observations)
        token = CancellationToken(parent=cancel_token)

        trend_future = self._executor.submit(self.trend_analyzer.analyze, snapshot, token)
        plateau_future = self._executor.submit(self.plateau_analyzer.analyze, snapshot, token)

        try:
            insights = trend_future.result()
            plateau = plateau_future.result()
        except AnalysisCancelledError:
            token.cancel()
            wait([trend_future, plateau_future])
            metrics_logger.info("Analysis cancelled", user_id=user_id)
            raise
        except Exception as e:
            token.cancel()
            wait([trend_future, plateau_future])
            metrics_logger.error("Analysis failed", user_id=user_id, error=str(e))
            logger.exception(f"Analysis failed for user {user_id}")
            raise

        return UserReport(user_id=user_id, insights=insights, plateau=plateau)
