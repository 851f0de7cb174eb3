"""Shared component mixins."""

import structlog

from todo64.utils.logger import get_logger


class LoggerMixin:
    """Gives a component a structlog logger named ``todo64.<ClassName>``.

    Each access returns a fresh lazy proxy, so the logger always follows the
    current structlog configuration.
    """

    logger_namespace = "todo64"

    @property
    def logger(self) -> structlog.stdlib.BoundLogger:
        return get_logger(f"{self.logger_namespace}.{type(self).__name__}")
