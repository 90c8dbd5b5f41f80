"""
Utility decorators for logging long-running operations.
"""

import functools
import inspect
import time
import uuid
from collections.abc import Callable
from datetime import date
from decimal import Decimal
from typing import Any

from loguru import logger

_CONTEXT_PARAMS = (
    "method",
    "currency",
    "currencies",
    "today",
    "performance_from",
    "max_workers",
    "start",
    "end",
    "annual_rate",
)


def _serialize_parameter_value(value: Any) -> Any:
    """Serialize parameter value for logging."""
    if hasattr(value, "value") and hasattr(value, "name"):
        return str(value.value)  # Handle enum values
    elif isinstance(value, Decimal | date):
        return str(value)
    else:
        return value


def _extract_context(func: Callable[..., Any], args: tuple[Any, ...], kwargs: dict[str, Any]) -> dict[str, Any]:
    """Extract loggable context from function arguments."""
    bound_args = inspect.signature(func).bind(*args, **kwargs)
    bound_args.apply_defaults()

    context = {}
    for param_name, value in bound_args.arguments.items():
        if param_name in _CONTEXT_PARAMS and value is not None:
            context[param_name] = _serialize_parameter_value(value)
    return context


def _create_success_context(base_context: dict[str, Any], execution_time_ms: float, result: Any) -> dict[str, Any]:
    """Create success logging context."""
    success_context = {
        **base_context,
        "success": True,
        "execution_time_ms": round(execution_time_ms, 2),
        "result_type": type(result).__name__,
    }

    if isinstance(result, list):
        success_context["result_size"] = len(result)

    return success_context


def _create_error_context(base_context: dict[str, Any], execution_time_ms: float, error: Exception) -> dict[str, Any]:
    """Create error logging context."""
    return {
        **base_context,
        "success": False,
        "execution_time_ms": round(execution_time_ms, 2),
        "error_type": type(error).__name__,
        "error_message": str(error),
    }


def log_operation[F: Callable[..., Any]](func: F) -> F:
    """Decorator to log an operation's start, outcome and duration with a correlation ID.

    Errors are logged and re-raised unchanged.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        context = {"correlation_id": str(uuid.uuid4())[:8], **_extract_context(func, args, kwargs)}
        func_name = func.__qualname__
        log = logger.bind(**context)

        log.debug(f"Operation started: {func_name}")
        start_time = time.perf_counter()

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            execution_time_ms = (time.perf_counter() - start_time) * 1000
            logger.bind(**_create_error_context(context, execution_time_ms, e)).debug(
                f"Operation failed: {func_name}"
            )
            raise

        execution_time_ms = (time.perf_counter() - start_time) * 1000
        logger.bind(**_create_success_context(context, execution_time_ms, result)).debug(
            f"Operation completed: {func_name}"
        )
        return result

    return wrapper  # type: ignore
