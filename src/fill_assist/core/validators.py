"""Input sanitization for values that come from the extension or the chat."""

import re

from .errors import ValidationError

_ANGLE_BRACKETS = re.compile(r"[<>]")


def sanitize_string(value: str, max_length: int = 10_000) -> str:
    if not isinstance(value, str):
        raise ValidationError("Input must be a string")
    return _ANGLE_BRACKETS.sub("", value.strip()[:max_length])


def validate_query(query: str, max_length: int = 1000) -> str:
    if not query or not query.strip():
        raise ValidationError("Query cannot be empty")
    if len(query) > max_length:
        raise ValidationError(f"Query too long (max {max_length} characters)")
    return sanitize_string(query, max_length)
