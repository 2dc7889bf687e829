"""Error definitions for the pagewarp translation pipeline."""

from __future__ import annotations

from typing import Optional


SOURCE_ERROR = "SOURCE_ERROR"
LANGUAGE_NOT_SUPPORTED = "LANGUAGE_NOT_SUPPORTED"
RESULT_ERROR = "RESULT_ERROR"
COUNT_MISMATCH = "COUNT_MISMATCH"
TRANSPORT_ERROR = "TRANSPORT_ERROR"


class PagewarpError(Exception):
    """Base exception for all custom errors.

    Every subclass carries a stable ``code`` alongside the human readable
    message so callers can branch without parsing text.
    """

    default_code = RESULT_ERROR

    def __init__(self, message: str, *, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class ConfigurationError(PagewarpError):
    """Raised when no usable provider configuration exists."""

    default_code = SOURCE_ERROR


class UnsupportedLanguageError(PagewarpError):
    """Raised when a language is absent from the supported table."""

    default_code = LANGUAGE_NOT_SUPPORTED


class ProviderError(PagewarpError):
    """Raised when the remote provider answers with a failure."""

    default_code = RESULT_ERROR


class CountMismatchError(PagewarpError):
    """Raised when returned items do not line up with what was sent."""

    default_code = COUNT_MISMATCH


class TransportError(PagewarpError):
    """Raised when the network call or the proxy relay fails."""

    default_code = TRANSPORT_ERROR
