"""
Shared fixtures for the test suite.
"""

from datetime import date

import pytest

from src.core.utils.time import FrozenClock
from tests.fakes import FixedRateConverter, RecordingQuotesProvider


@pytest.fixture
def today() -> date:
    return date(2021, 1, 1)


@pytest.fixture
def clock(today: date) -> FrozenClock:
    return FrozenClock(today)


@pytest.fixture
def converter() -> FixedRateConverter:
    return FixedRateConverter()


@pytest.fixture
def quotes() -> RecordingQuotesProvider:
    return RecordingQuotesProvider()
