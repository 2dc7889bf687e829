"""Target language selection and the single same-language retry."""

from __future__ import annotations

import logging
from enum import Enum, auto

from .errors import UnsupportedLanguageError
from .languages import AUTO, normalize_language_code, same_language
from .structures import BatchSuccess

logger = logging.getLogger(__name__)


class FallbackState(Enum):
    PRIMARY = auto()
    RETRIED = auto()


def determine_languages(
    *,
    source_language: str | None,
    target_language: str | None,
    preferred_language: str,
    second_preferred_language: str,
) -> tuple[str, str]:
    """Resolve the (source, target) pair for the first request.

    Without a pinned target the preferred language is used, unless the pinned
    source already is the preferred language.
    """

    source = normalize_language_code(source_language) if source_language else AUTO
    if target_language:
        target = normalize_language_code(target_language)
        if target == AUTO:
            raise UnsupportedLanguageError(
                "'auto' can only be used as a source language."
            )
        return source, target

    preferred = normalize_language_code(preferred_language)
    if source == preferred:
        return source, normalize_language_code(second_preferred_language)
    return source, preferred


class LanguageFallbackController:
    """Two-state machine deciding whether to re-request in the second language."""

    def __init__(
        self,
        *,
        source_pinned: bool,
        target_pinned: bool,
        preferred_language: str,
        second_preferred_language: str,
    ) -> None:
        self.source_pinned = source_pinned
        self.target_pinned = target_pinned
        self.preferred_language = normalize_language_code(preferred_language)
        self.second_preferred_language = normalize_language_code(second_preferred_language)
        self.state = FallbackState.PRIMARY

    def should_retry(self, result: BatchSuccess) -> bool:
        if self.state is not FallbackState.PRIMARY:
            return False
        if self.source_pinned or self.target_pinned:
            return False
        if self.preferred_language == self.second_preferred_language:
            return False
        return same_language(result.source_language, result.target_language)

    def fallback_target(self) -> str:
        """Move to ``RETRIED`` and return the language to retry with."""

        if self.state is FallbackState.RETRIED:
            raise RuntimeError("The language fallback has already been used.")
        self.state = FallbackState.RETRIED
        logger.info(
            "Source matches target; retrying with %s.",
            self.second_preferred_language,
        )
        return self.second_preferred_language
