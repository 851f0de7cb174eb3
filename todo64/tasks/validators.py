"""Input validation for task text fields."""

from todo64.tasks.constants import CONTENT_MAX_LENGTH, TITLE_MAX_LENGTH
from todo64.tasks.exceptions import TaskValidationError


def truncate_title(text: str) -> str:
    """Clip title input to the allowed length."""
    return text[:TITLE_MAX_LENGTH]


def truncate_content(text: str) -> str:
    """Clip content input to the allowed length."""
    return text[:CONTENT_MAX_LENGTH]


def validate_title(title: str) -> str:
    """Return the trimmed title or raise ``TaskValidationError``."""
    trimmed = title.strip()
    if not trimmed:
        raise TaskValidationError("Title must not be empty")
    if len(trimmed) > TITLE_MAX_LENGTH:
        raise TaskValidationError(
            f"Title exceeds {TITLE_MAX_LENGTH} characters ({len(trimmed)})"
        )
    return trimmed


def normalize_content(content: str | None) -> str | None:
    """Trim content; empty content becomes ``None``."""
    if content is None:
        return None
    trimmed = content.strip()
    if not trimmed:
        return None
    if len(trimmed) > CONTENT_MAX_LENGTH:
        raise TaskValidationError(
            f"Content exceeds {CONTENT_MAX_LENGTH} characters ({len(trimmed)})"
        )
    return trimmed
