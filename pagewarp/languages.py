"""Supported language table and resolution helpers."""

from __future__ import annotations

from typing import Dict

from .errors import UnsupportedLanguageError


AUTO = "auto"

# Internal language code -> code sent to the translation endpoint.
LANGUAGE_CODES: Dict[str, str] = {
    "auto": "auto",
    "af": "af",
    "ar": "ar",
    "bg": "bg",
    "bn": "bn",
    "ca": "ca",
    "cs": "cs",
    "cy": "cy",
    "da": "da",
    "de": "de",
    "el": "el",
    "en": "en",
    "es": "es",
    "et": "et",
    "fa": "fa",
    "fi": "fi",
    "fil": "tl",
    "fr": "fr",
    "ga": "ga",
    "he": "iw",
    "hi": "hi",
    "hr": "hr",
    "hu": "hu",
    "id": "id",
    "is": "is",
    "it": "it",
    "ja": "ja",
    "ko": "ko",
    "lt": "lt",
    "lv": "lv",
    "ms": "ms",
    "mt": "mt",
    "nl": "nl",
    "no": "no",
    "pl": "pl",
    "pt": "pt",
    "ro": "ro",
    "ru": "ru",
    "sk": "sk",
    "sl": "sl",
    "sr": "sr",
    "sv": "sv",
    "sw": "sw",
    "ta": "ta",
    "th": "th",
    "tr": "tr",
    "uk": "uk",
    "ur": "ur",
    "vi": "vi",
    "zh-CN": "zh-CN",
    "zh-TW": "zh-TW",
}

_CANONICAL: Dict[str, str] = {code.lower(): code for code in LANGUAGE_CODES}
_SYNONYMS = {
    "zh": "zh-CN",
    "zh_cn": "zh-CN",
    "zh-hans": "zh-CN",
    "zh_tw": "zh-TW",
    "zh-hant": "zh-TW",
    "iw": "he",
    "tl": "fil",
    "nb": "no",
}


def normalize_language_code(code: str) -> str:
    """Return the canonical table key for ``code`` or raise."""

    raw = (code or "").strip()
    lowered = raw.lower()
    lowered = _SYNONYMS.get(lowered, lowered).lower()
    canonical = _CANONICAL.get(lowered)
    if canonical is None:
        raise UnsupportedLanguageError(f"Language '{raw}' is not supported.")
    return canonical


def resolve_language(code: str) -> str:
    """Map a language code to the provider code used on the wire."""

    canonical = normalize_language_code(code)
    if canonical == AUTO:
        raise UnsupportedLanguageError(
            "'auto' can only be used as a source language."
        )
    return LANGUAGE_CODES[canonical]


def same_language(first: str | None, second: str | None) -> bool:
    """Compare two provider-reported language codes loosely."""

    if not first or not second:
        return False
    return first.strip().lower() == second.strip().lower()
