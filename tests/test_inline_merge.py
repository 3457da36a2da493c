import pytest

from pdf_reading_order.inline_merge import (
    ends_with_connector,
    merge_inline_splits,
    merge_lines,
    shares_row,
    should_merge_inline,
)
from pdf_reading_order.models import Column

from builders import left, make_line, right, texts


def test_ends_with_connector():
    assert ends_with_connector("the results of")
    assert ends_with_connector("cats and")
    assert not ends_with_connector("the results")


def test_shares_row_requires_same_column_and_baseline():
    assert shares_row(left("a", 500), left("b", 501))
    assert not shares_row(left("a", 500), left("b", 496))
    assert not shares_row(left("a", 500), right("b", 500))


def test_font_change_merges():
    first = make_line("the term", 72, 500)
    second = make_line("emphasis", 116, 500, size=9)
    assert should_merge_inline(first, second)
    merged = merge_lines(first, second)
    assert merged.text == "the term emphasis"
    assert merged.x == 72
    assert merged.font_size == 10
    assert merged.right_edge == pytest.approx(second.right_edge)


def test_connector_merges_across_wider_gap():
    first = make_line("results of", 72, 500)
    second = make_line("the trial", 150, 500)
    assert should_merge_inline(first, second)


def test_capitalised_continuation_merges():
    first = make_line("as described in Section", 72, 500)
    second = make_line("Methods", first.right_edge + 5, 500)
    assert should_merge_inline(first, second)


def test_finished_sentence_does_not_merge():
    first = make_line("this ends here.", 72, 500)
    second = make_line("Next sentence", first.right_edge + 5, 500)
    assert not should_merge_inline(first, second)
    # partner must sit to the right
    assert not should_merge_inline(second, first)


def test_merge_inline_splits_keeps_other_lines():
    a = make_line("results of", 72, 500, Column.LEFT)
    other = make_line("a line on the next row", 72, 488, Column.LEFT)
    b = make_line("the trial", 150, 500, Column.LEFT)
    result = merge_inline_splits([a, b, other])
    assert texts(result) == ["results of the trial", "a line on the next row"]
    assert result[0].column is Column.LEFT
    assert texts(merge_inline_splits([a, other])) == ["results of", "a line on the next row"]
