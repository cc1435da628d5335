"""Weight history providers"""

from .history import WeightHistoryDB, WeightHistoryProvider, get_history_db

__all__ = [
    'WeightHistoryDB',
    'WeightHistoryProvider',
    'get_history_db',
]
