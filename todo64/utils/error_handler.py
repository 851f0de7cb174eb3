"""Shared error-handling helpers.

Reminder delivery is best-effort: work that talks to the notification host
goes through these decorators so failures end up in the log instead of in
the caller's stack.
"""

import functools
import inspect
from collections.abc import Callable
from typing import Any, TypeVar

import structlog

logger = structlog.get_logger()

T = TypeVar("T")


class ErrorHandler:
    """Standard log-and-continue patterns."""

    @staticmethod
    def log_and_return_default(
        operation_name: str, exception: Exception, default_value: T, **kwargs: Any
    ) -> T:
        """Log the error and hand back a default value."""
        logger.error(f"Failed to {operation_name}", error=str(exception), **kwargs)
        return default_value


def handle_errors(
    operation_name: str,
    default_return: Any = None,
    **log_kwargs: Any,
):
    """
    Decorator that logs exceptions raised by the wrapped callable.

    Args:
        operation_name: name used in the log event ("Failed to <name>")
        default_return: value returned when an exception was swallowed
        **log_kwargs: extra context added to the log event
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                return ErrorHandler.log_and_return_default(
                    operation_name, e, default_return, **log_kwargs
                )

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                return ErrorHandler.log_and_return_default(
                    operation_name, e, default_return, **log_kwargs
                )

        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return wrapper

    return decorator


def safe_operation(operation_name: str, **log_kwargs: Any):
    """Swallow and log any error, returning None."""
    return handle_errors(operation_name, default_return=None, **log_kwargs)
