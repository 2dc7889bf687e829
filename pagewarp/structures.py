"""Core data structures for the pagewarp pipeline."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, List, Sequence, Tuple, Union


ParagraphGroup = Sequence[str]
PageText = Sequence[ParagraphGroup]


@dataclass(frozen=True)
class Fragment:
    """A single piece of page text with its position in the flattened page."""

    content: str
    original_index: int
    group_index: int


@dataclass(frozen=True)
class FilteredFragment:
    """A fragment selected for submission to the remote provider."""

    fragment_id: str
    content: str
    original_index: int

    def to_payload(self) -> Dict[str, str]:
        return {"id": self.fragment_id, "content": self.content}


@dataclass(frozen=True)
class FilterResult:
    """Outcome of filtering: fragments to send and fragments to pass through."""

    selected: Tuple[FilteredFragment, ...]
    passthrough: Tuple[Fragment, ...]


@dataclass(frozen=True)
class TranslationBatchRequest:
    """Provider-agnostic batch request body."""

    texts: Tuple[FilteredFragment, ...]
    target_language: str
    translator_code: int = 0
    prompt_builder_code: int = 0

    def with_target_language(self, target_language: str) -> "TranslationBatchRequest":
        return replace(self, target_language=target_language)

    def to_payload(self) -> Dict[str, Any]:
        """Render the JSON body sent to the endpoint."""

        return {
            "texts": [fragment.to_payload() for fragment in self.texts],
            "targetLanguage": self.target_language,
            "translatorCode": self.translator_code,
            "promptBuilderCode": self.prompt_builder_code,
        }


@dataclass(frozen=True)
class BatchSuccess:
    """Successful provider reply."""

    translations: Tuple[Tuple[str, str], ...]
    source_language: str
    target_language: str

    @property
    def item_count(self) -> int:
        return len(self.translations)


@dataclass(frozen=True)
class BatchFailure:
    """Provider reply carrying a non-success code."""

    code: str
    message: str


BatchResult = Union[BatchSuccess, BatchFailure]


@dataclass(frozen=True)
class PageTranslation:
    """Translated page with the same shape as its input."""

    paragraphs: Tuple[Tuple[str, ...], ...]
    source_language: str
    target_language: str
    retried: bool = False
    from_cache: bool = False

    def as_lists(self) -> List[List[str]]:
        return [list(group) for group in self.paragraphs]

    def as_result_items(self) -> List[Dict[str, List[str]]]:
        """Return the ``[{"translations": [...]}, ...]`` shape used by page renderers."""

        return [{"translations": list(group)} for group in self.paragraphs]
