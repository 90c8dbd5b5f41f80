"""
Unit tests for utility decorators.
"""

from datetime import date
from decimal import Decimal

import pytest
from loguru import logger

from src.core.enums import BenchmarkPerformanceType
from src.core.utils.decorators import log_operation


@pytest.fixture
def log_records():
    records: list[dict] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)


class TestLogOperationDecorator:
    """Test suite for @log_operation decorator."""

    def test_should_log_start_and_completion(self, log_records: list[dict]) -> None:
        @log_operation
        def run(method: BenchmarkPerformanceType, currency: str, today: date, amount: Decimal) -> list[int]:
            return [1, 2, 3]

        result = run(BenchmarkPerformanceType.VIRTUAL, "USD", date(2020, 1, 1), Decimal(1))

        assert result == [1, 2, 3]
        assert [record["message"] for record in log_records] == [
            "Operation started: TestLogOperationDecorator.test_should_log_start_and_completion.<locals>.run",
            "Operation completed: TestLogOperationDecorator.test_should_log_start_and_completion.<locals>.run",
        ]

        extra = log_records[-1]["extra"]
        assert extra["method"] == "virtual"
        assert extra["currency"] == "USD"
        assert extra["today"] == "2020-01-01"
        assert "amount" not in extra
        assert extra["success"] is True
        assert extra["result_size"] == 3
        assert extra["correlation_id"] == log_records[0]["extra"]["correlation_id"]

    def test_should_log_and_reraise_failures(self, log_records: list[dict]) -> None:
        @log_operation
        def run(currency: str) -> None:
            raise ValueError("boom")

        with pytest.raises(ValueError, match="boom"):
            run("USD")

        extra = log_records[-1]["extra"]
        assert log_records[-1]["message"].startswith("Operation failed")
        assert extra["success"] is False
        assert extra["error_type"] == "ValueError"
        assert extra["error_message"] == "boom"

    def test_should_preserve_function_metadata(self) -> None:
        @log_operation
        def documented() -> None:
            """Docstring."""

        assert documented.__name__ == "documented"
        assert documented.__doc__ == "Docstring."
