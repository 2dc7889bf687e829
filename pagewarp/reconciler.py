"""Mapping of provider replies back onto the original page shape."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from .errors import CountMismatchError
from .structures import BatchSuccess, FilteredFragment, Fragment


def _index_translations(
    sent: Sequence[FilteredFragment],
    result: BatchSuccess,
) -> Dict[str, str]:
    if result.item_count != len(sent):
        raise CountMismatchError(
            f"Endpoint returned {result.item_count} translations for "
            f"{len(sent)} submitted fragments."
        )
    mapping: Dict[str, str] = {}
    for item_id, translated in result.translations:
        if item_id in mapping:
            raise CountMismatchError(
                f"Endpoint returned fragment id '{item_id}' more than once."
            )
        mapping[item_id] = translated
    return mapping


def reconcile_flat(
    fragments: Sequence[Fragment],
    sent: Sequence[FilteredFragment],
    result: BatchSuccess,
) -> List[str]:
    """Build the full-length flat list of output strings.

    Sent fragments receive their translation by id; every other fragment keeps
    its original content verbatim.
    """

    translations = _index_translations(sent, result)
    output: List[Optional[str]] = [None] * len(fragments)

    for fragment in sent:
        if fragment.fragment_id not in translations:
            raise CountMismatchError(
                f"Translation missing for fragment {fragment.fragment_id}."
            )
        if not 0 <= fragment.original_index < len(output):
            raise CountMismatchError(
                f"Unexpected fragment reference {fragment.fragment_id}."
            )
        output[fragment.original_index] = translations[fragment.fragment_id]

    for fragment in fragments:
        if output[fragment.original_index] is None:
            output[fragment.original_index] = fragment.content

    return [value if value is not None else "" for value in output]


def passthrough_flat(fragments: Sequence[Fragment]) -> List[str]:
    return [fragment.content for fragment in fragments]


def nest(flat: Sequence[str], sizes: Sequence[int]) -> Tuple[Tuple[str, ...], ...]:
    """Split ``flat`` back into groups of the given sizes."""

    if sum(sizes) != len(flat):
        raise CountMismatchError(
            f"Cannot regroup {len(flat)} items into groups totalling {sum(sizes)}."
        )
    groups: List[Tuple[str, ...]] = []
    cursor = 0
    for size in sizes:
        groups.append(tuple(flat[cursor : cursor + size]))
        cursor += size
    return tuple(groups)


def check_result_shape(
    sizes: Sequence[int],
    paragraphs: Sequence[Sequence[str]],
) -> None:
    """Verify the output has exactly the input's shape and only strings."""

    if len(paragraphs) != len(sizes):
        raise CountMismatchError(
            f"Result has {len(paragraphs)} groups, expected {len(sizes)}."
        )
    for index, (size, group) in enumerate(zip(sizes, paragraphs)):
        if len(group) != size:
            raise CountMismatchError(
                f"Result group {index} has {len(group)} items, expected {size}."
            )
        if not all(isinstance(item, str) for item in group):
            raise CountMismatchError(f"Result group {index} contains non-string items.")


class ResponseReconciler:
    """Reassembles a page from one provider reply."""

    def __init__(self, fragments: Sequence[Fragment], sizes: Sequence[int]) -> None:
        self.fragments = tuple(fragments)
        self.sizes = tuple(sizes)

    def reconcile(
        self,
        sent: Sequence[FilteredFragment],
        result: BatchSuccess,
    ) -> Tuple[Tuple[str, ...], ...]:
        paragraphs = nest(reconcile_flat(self.fragments, sent, result), self.sizes)
        check_result_shape(self.sizes, paragraphs)
        return paragraphs

    def passthrough(self) -> Tuple[Tuple[str, ...], ...]:
        paragraphs = nest(passthrough_flat(self.fragments), self.sizes)
        check_result_shape(self.sizes, paragraphs)
        return paragraphs
