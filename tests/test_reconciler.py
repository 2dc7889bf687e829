"""Tests for mapping provider replies back onto the page shape."""

import pytest

from pagewarp.errors import CountMismatchError
from pagewarp.reconciler import ResponseReconciler, check_result_shape, nest, reconcile_flat
from pagewarp.segmenter import FragmentFilter, flatten_page, group_sizes
from pagewarp.structures import BatchSuccess


def _prepare(page):
    fragments = flatten_page(page)
    selected = FragmentFilter().split(fragments).selected
    return fragments, selected, ResponseReconciler(fragments, group_sizes(page))


def _reply(*pairs, source="en", target="zh-CN"):
    return BatchSuccess(translations=tuple(pairs), source_language=source, target_language=target)


class TestReconcile:
    def test_passthrough_fragment_survives(self):
        fragments, selected, reconciler = _prepare([["Hello"], [":"]])

        assert [f.fragment_id for f in selected] == ["0-0"]
        paragraphs = reconciler.reconcile(selected, _reply(("0-0", "你好")))

        assert paragraphs == (("你好",), (":",))

    def test_translations_land_by_id_not_by_order(self):
        page = [["First line", "12", "Second line"], ["Third line"]]
        fragments, selected, reconciler = _prepare(page)

        paragraphs = reconciler.reconcile(
            selected,
            _reply(("1-3", "trois"), ("0-0", "un"), ("0-2", "deux")),
        )

        assert paragraphs == (("un", "12", "deux"), ("trois",))

    def test_excluded_content_is_kept_untrimmed(self):
        fragments, selected, reconciler = _prepare([["  ", "Text", " - "]])

        paragraphs = reconciler.reconcile(selected, _reply(("0-1", "Texte")))

        assert paragraphs == (("  ", "Texte", " - "),)

    def test_empty_page(self):
        fragments, selected, reconciler = _prepare([])

        assert reconciler.reconcile(selected, _reply()) == ()
        assert reconciler.passthrough() == ()

    def test_empty_groups_preserved(self):
        fragments, selected, reconciler = _prepare([[], ["Word"], []])

        assert reconciler.reconcile(selected, _reply(("1-0", "Mot"))) == ((), ("Mot",), ())

    def test_all_whitespace_page_passthrough(self):
        page = [[" ", "\n"], ["\t"]]
        fragments, selected, reconciler = _prepare(page)

        assert selected == ()
        assert reconciler.passthrough() == ((" ", "\n"), ("\t",))

    def test_count_mismatch(self):
        fragments, selected, reconciler = _prepare([["One"], ["Two"]])

        with pytest.raises(CountMismatchError) as exc_info:
            reconciler.reconcile(selected, _reply(("0-0", "Un")))
        assert exc_info.value.code == "COUNT_MISMATCH"

    def test_too_many_items(self):
        fragments, selected, reconciler = _prepare([["One"]])

        with pytest.raises(CountMismatchError):
            reconciler.reconcile(selected, _reply(("0-0", "Un"), ("0-1", "Deux")))

    def test_missing_id(self):
        fragments, selected, reconciler = _prepare([["One"], ["Two"]])

        with pytest.raises(CountMismatchError):
            reconciler.reconcile(selected, _reply(("0-0", "Un"), ("9-9", "Deux")))

    def test_duplicate_id(self):
        fragments, selected, reconciler = _prepare([["One"], ["Two"]])

        with pytest.raises(CountMismatchError):
            reconciler.reconcile(selected, _reply(("0-0", "Un"), ("0-0", "Deux")))

    def test_reconciliation_is_repeatable(self):
        page = [["Hello", "!"], ["World"]]
        fragments, selected, reconciler = _prepare(page)
        reply = _reply(("0-0", "Bonjour"), ("1-2", "Monde"))

        first = reconciler.reconcile(selected, reply)
        second = reconciler.reconcile(selected, reply)

        assert first == second
        assert reconcile_flat(fragments, selected, reply) == ["Bonjour", "!", "Monde"]


class TestNest:
    def test_nest(self):
        assert nest(["a", "b", "c"], [2, 0, 1]) == (("a", "b"), (), ("c",))

    def test_nest_rejects_wrong_total(self):
        with pytest.raises(CountMismatchError):
            nest(["a"], [2])


class TestCheckResultShape:
    def test_accepts_matching_shape(self):
        check_result_shape([1, 2], [["a"], ["b", "c"]])

    def test_rejects_group_count(self):
        with pytest.raises(CountMismatchError):
            check_result_shape([1, 2], [["a"]])

    def test_rejects_group_size(self):
        with pytest.raises(CountMismatchError):
            check_result_shape([1], [["a", "b"]])

    def test_rejects_non_strings(self):
        with pytest.raises(CountMismatchError):
            check_result_shape([1], [[None]])
