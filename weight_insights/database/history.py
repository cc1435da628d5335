"""
Weight History Database
In-memory weight history per user, the provider the engine pulls from.

Durable storage belongs to the host application; anything exposing
``get_history(user_id)`` in ascending date order can stand in for
WeightHistoryDB.
"""

import logging
from datetime import date, datetime
from threading import RLock
from typing import Dict, Iterable, List, Optional, Protocol

import pandas as pd

from ..models import WeightObservation

logger = logging.getLogger(__name__)


class WeightHistoryProvider(Protocol):
    """Source of a user's observations, ascending by date."""

    def get_history(self, user_id: str) -> List[WeightObservation]:
        ...


class WeightHistoryDB:
    """
    In-memory weight history store.
    Keeps each user's observations sorted by date.
    """

    def __init__(self):
        self.histories: Dict[str, List[WeightObservation]] = {}
        self._lock = RLock()

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame) -> 'WeightHistoryDB':
        """
        Build a store from a DataFrame.

        Expects ``user_id``, ``weight`` and either ``date`` or ``timestamp``
        columns. Several readings on one day collapse to their mean.
        """
        db = cls()
        if df.empty:
            return db

        df = df.copy()
        date_column = 'date' if 'date' in df.columns else 'timestamp'
        df['date'] = pd.to_datetime(df[date_column], errors='coerce').dt.date
        df = df.dropna(subset=['date', 'weight'])
        df = df[df['weight'] > 0]

        daily = df.groupby(['user_id', 'date'], sort=True)['weight'].mean().reset_index()
        for user_id, user_data in daily.groupby('user_id'):
            db.add_many(str(user_id), [
                WeightObservation(date=row.date, value=float(row.weight))
                for row in user_data.itertuples(index=False)
            ])

        logger.info(f"Loaded weight history for {len(db.histories)} users")
        return db

    def add(self, user_id: str, observation: WeightObservation) -> None:
        self.add_many(user_id, [observation])

    def add_many(self, user_id: str, observations: Iterable[WeightObservation]) -> None:
        with self._lock:
            history = self.histories.setdefault(user_id, [])
            history.extend(observations)
            history.sort(key=lambda o: o.date)

    def record(self, user_id: str, when: date, weight: float) -> WeightObservation:
        """Convenience wrapper accepting a date or datetime."""
        if isinstance(when, datetime):
            when = when.date()
        observation = WeightObservation(date=when, value=float(weight))
        self.add(user_id, observation)
        return observation

    def get_history(self, user_id: str) -> List[WeightObservation]:
        """Copy of the user's observations, ascending; empty for unknown users."""
        with self._lock:
            return list(self.histories.get(user_id, []))

    def delete_user(self, user_id: str) -> bool:
        with self._lock:
            return self.histories.pop(user_id, None) is not None

    def users(self) -> List[str]:
        with self._lock:
            return sorted(self.histories)

    def get_stats(self) -> Dict[str, int]:
        with self._lock:
            return {
                'total_users': len(self.histories),
                'total_observations': sum(len(h) for h in self.histories.values()),
            }


_db_instance: Optional[WeightHistoryDB] = None


def get_history_db() -> WeightHistoryDB:
    """Get or create the global history database instance."""
    global _db_instance
    if _db_instance is None:
        _db_instance = WeightHistoryDB()
    return _db_instance
