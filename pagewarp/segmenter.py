"""Flattening, filtering and batching of page text."""

from __future__ import annotations

from typing import List, Sequence

from .endpoint import EndpointParameters
from .languages import resolve_language
from .structures import (
    FilteredFragment,
    FilterResult,
    Fragment,
    PageText,
    TranslationBatchRequest,
)

DEFAULT_SHORT_CONTENT_THRESHOLD = 3


def contains_cjk(text: str) -> bool:
    """Detect whether the text contains CJK characters."""

    for char in text:
        code = ord(char)
        if (
            0x4E00 <= code <= 0x9FFF  # CJK Unified Ideographs
            or 0x3400 <= code <= 0x4DBF  # Extension A
            or 0x3040 <= code <= 0x30FF  # Hiragana/Katakana
            or 0xAC00 <= code <= 0xD7AF  # Hangul syllables
        ):
            return True
    return False


def contains_letter(text: str) -> bool:
    return any(char.isalpha() for char in text) or contains_cjk(text)


def flatten_page(page: PageText) -> List[Fragment]:
    """Flatten groups row-major, remembering where each fragment came from."""

    fragments: List[Fragment] = []
    for group_index, group in enumerate(page):
        for content in group:
            fragments.append(
                Fragment(
                    content=content if content is not None else "",
                    original_index=len(fragments),
                    group_index=group_index,
                )
            )
    return fragments


def group_sizes(page: PageText) -> List[int]:
    return [len(group) for group in page]


def fragment_id(fragment: Fragment) -> str:
    return f"{fragment.group_index}-{fragment.original_index}"


class FragmentFilter:
    """Decides which fragments are worth a remote call.

    A fragment is passed through untouched when its trimmed content is empty,
    or when it is shorter than ``short_content_threshold`` and has neither a
    letter nor a CJK character (``"："``, ``"12"``).
    """

    def __init__(self, short_content_threshold: int = DEFAULT_SHORT_CONTENT_THRESHOLD) -> None:
        self.short_content_threshold = max(0, short_content_threshold)

    def is_translatable(self, content: str) -> bool:
        cleaned = (content or "").strip()
        if not cleaned:
            return False
        if len(cleaned) < self.short_content_threshold and not contains_letter(cleaned):
            return False
        return True

    def split(self, fragments: Sequence[Fragment]) -> FilterResult:
        selected: List[FilteredFragment] = []
        passthrough: List[Fragment] = []
        for fragment in fragments:
            if self.is_translatable(fragment.content):
                selected.append(
                    FilteredFragment(
                        fragment_id=fragment_id(fragment),
                        content=fragment.content.strip(),
                        original_index=fragment.original_index,
                    )
                )
            else:
                passthrough.append(fragment)
        return FilterResult(selected=tuple(selected), passthrough=tuple(passthrough))


class BatchBuilder:
    """Assembles the request batch for one endpoint."""

    def __init__(self, endpoint: EndpointParameters) -> None:
        self.endpoint = endpoint

    def build(
        self,
        fragments: Sequence[FilteredFragment],
        target_language: str,
    ) -> TranslationBatchRequest:
        return TranslationBatchRequest(
            texts=tuple(fragments),
            target_language=resolve_language(target_language),
            translator_code=self.endpoint.translator_code,
            prompt_builder_code=self.endpoint.prompt_builder_code,
        )

    def retarget(
        self,
        request: TranslationBatchRequest,
        target_language: str,
    ) -> TranslationBatchRequest:
        """Copy ``request`` with only the target language replaced."""

        return request.with_target_language(resolve_language(target_language))
