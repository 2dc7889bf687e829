"""Batch page translation against a configurable translation endpoint."""

from .errors import (
    ConfigurationError,
    CountMismatchError,
    PagewarpError,
    ProviderError,
    TransportError,
    UnsupportedLanguageError,
)
from .structures import PageTranslation
from .translator import PageTranslator, build_translator, translate_page

__all__ = [
    "ConfigurationError",
    "CountMismatchError",
    "PageTranslation",
    "PageTranslator",
    "PagewarpError",
    "ProviderError",
    "TransportError",
    "UnsupportedLanguageError",
    "build_translator",
    "translate_page",
]

__version__ = "0.1.0"
