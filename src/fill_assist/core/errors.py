"""
Application error hierarchy.
Why: one place that maps failures to a status code and a stable error code.
"""

from typing import Any, Optional


class AppError(Exception):
    def __init__(
        self,
        status_code: int,
        message: str,
        code: str,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.code = code
        self.details = details


class ValidationError(AppError):
    def __init__(self, message: str, details: Optional[Any] = None) -> None:
        super().__init__(400, message, "VALIDATION_ERROR", details)


class ConfigurationError(AppError):
    def __init__(self, message: str, details: Optional[Any] = None) -> None:
        super().__init__(500, message, "CONFIGURATION_ERROR", details)


class CacheConfigError(ConfigurationError):
    """Invalid TTL, capacity or sweep interval."""


class DocumentUnavailableError(AppError):
    """The hosting page context is missing; nothing can be located or highlighted."""

    def __init__(self, message: str = "Page document is not available") -> None:
        super().__init__(500, message, "DOCUMENT_UNAVAILABLE")
