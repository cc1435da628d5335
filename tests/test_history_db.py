"""
Tests for the in-memory weight history store.
"""

import pandas as pd
import pytest
from datetime import date, datetime

from weight_insights.database import WeightHistoryDB, get_history_db
from weight_insights.models import WeightObservation


class TestWeightHistoryDB:

    @pytest.fixture
    def db(self):
        return WeightHistoryDB()

    def test_unknown_user_has_empty_history(self, db):
        assert db.get_history("nobody") == []

    def test_history_sorted_by_date(self, db):
        db.add("u1", WeightObservation(date(2024, 1, 3), 79.0))
        db.add("u1", WeightObservation(date(2024, 1, 1), 80.0))
        db.add_many("u1", [WeightObservation(date(2024, 1, 2), 79.5)])

        assert [o.date.day for o in db.get_history("u1")] == [1, 2, 3]

    def test_get_history_returns_copy(self, db):
        db.record("u1", date(2024, 1, 1), 80)
        history = db.get_history("u1")
        history.clear()

        assert len(db.get_history("u1")) == 1

    def test_record_accepts_datetime(self, db):
        obs = db.record("u1", datetime(2024, 1, 1, 7, 30), 80.2)
        assert obs.date == date(2024, 1, 1)
        assert obs.value == 80.2

    def test_delete_and_users(self, db):
        db.record("b", date(2024, 1, 1), 80)
        db.record("a", date(2024, 1, 1), 70)

        assert db.users() == ["a", "b"]
        assert db.delete_user("a") is True
        assert db.delete_user("a") is False
        assert db.get_stats() == {'total_users': 1, 'total_observations': 1}

    def test_from_dataframe(self):
        df = pd.DataFrame({
            'user_id': ['u1', 'u1', 'u1', 'u2', 'u2'],
            'timestamp': ['2024-01-02 08:00', '2024-01-01 07:00', '2024-01-01 21:00',
                          '2024-01-05 09:00', 'not a date'],
            'weight': [79.0, 80.0, 81.0, 65.0, 66.0],
        })
        db = WeightHistoryDB.from_dataframe(df)

        u1 = db.get_history('u1')
        assert [o.date for o in u1] == [date(2024, 1, 1), date(2024, 1, 2)]
        assert u1[0].value == pytest.approx(80.5)
        assert [o.value for o in db.get_history('u2')] == [65.0]

    def test_from_dataframe_drops_invalid_weights(self):
        df = pd.DataFrame({
            'user_id': ['u1', 'u1'],
            'date': [date(2024, 1, 1), date(2024, 1, 2)],
            'weight': [0.0, 70.0],
        })
        assert len(WeightHistoryDB.from_dataframe(df).get_history('u1')) == 1

    def test_from_empty_dataframe(self):
        db = WeightHistoryDB.from_dataframe(pd.DataFrame(columns=['user_id', 'date', 'weight']))
        assert db.users() == []

    def test_global_instance(self):
        assert get_history_db() is get_history_db()
