"""
Shared test configuration and fixtures for all tests.
Provides common test fixtures and marker definitions for the entire test suite.
"""

import pytest
import numpy as np
from datetime import date, timedelta

from weight_insights.models import WeightObservation


# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================

def pytest_configure(config):
    """Register custom markers for test categorization."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "critical: marks tests pinning exact boundary behaviour"
    )


# =============================================================================
# COMMON FIXTURES
# =============================================================================

@pytest.fixture
def base_date():
    """Provide a consistent start date for all tests."""
    return date(2024, 1, 1)


@pytest.fixture
def make_series(base_date):
    """Build observations from values, one every ``step_days`` days."""
    def build(values, start=None, step_days=1):
        start = start or base_date
        return [
            WeightObservation(date=start + timedelta(days=i * step_days), value=float(v))
            for i, v in enumerate(values)
        ]
    return build


@pytest.fixture
def constant_series(make_series):
    """Daily series of identical weights."""
    def build(days, weight=70.0):
        return make_series([weight] * days)
    return build


@pytest.fixture
def weekly_scenario(base_date):
    """Five weekly weigh-ins with a slowing loss."""
    values = [90.0, 89.0, 88.5, 88.4, 88.3]
    return [
        WeightObservation(date=base_date + timedelta(days=7 * i), value=v)
        for i, v in enumerate(values)
    ]


@pytest.fixture
def numpy_random_seed():
    """Set a consistent numpy random seed for reproducible tests."""
    np.random.seed(42)
    yield
    np.random.seed()


@pytest.fixture
def weight_generator(numpy_random_seed):
    """Generate realistic daily weight sequences."""
    def generate(start_weight=80.0, days=30, daily_variation=0.3, trend=0.0):
        weights = []
        current_weight = start_weight
        for _ in range(days):
            current_weight += trend
            weights.append(current_weight + np.random.normal(0, daily_variation))
        return weights
    return generate


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()
