import pytest

from pdf_reading_order.splitter import (
    build_line,
    dominant_fragment,
    measure_line_width,
    split_at_breaks,
    split_at_midpoint,
    split_row,
)

from builders import PAGE_WIDTH, frag, page_from_rows


def test_split_at_breaks():
    a, b, c = frag("a", 0), frag("b", 10), frag("c", 20)
    assert split_at_breaks([a, b, c], [0]) == [[a], [b, c]]
    assert split_at_breaks([a, b, c], []) == [[a, b, c]]


def test_split_at_midpoint_requires_text_on_both_sides():
    left = frag("left column words", 72)
    right = frag("right column words", 330)
    assert split_at_midpoint([left, right], PAGE_WIDTH) == [[left], [right]]
    assert split_at_midpoint([left, frag("[1]", 330)], PAGE_WIDTH) is None
    assert split_at_midpoint([left], PAGE_WIDTH) is None


def test_single_column_rows_are_not_split():
    fragments = [frag("the quick brown fox", 72), frag("jumps over the lazy dog", 320)]
    assert split_row(fragments, PAGE_WIDTH, [0], row_based=False) == [fragments]


def test_row_based_split_uses_breaks():
    fragments = [frag("the quick brown fox", 72), frag("jumps over the lazy dog", 320)]
    assert split_row(fragments, PAGE_WIDTH, [0], row_based=True) == [fragments[:1], fragments[1:]]


def test_row_based_split_falls_back_to_midpoint():
    fragments = [frag("the quick brown fox", 72), frag("jumps over the lazy dog", 320)]
    assert split_row(fragments, PAGE_WIDTH, [], row_based=True) == [fragments[:1], fragments[1:]]


def test_heading_fused_with_next_column_is_split():
    fragments = [frag("3 Results", 72), frag("we observe that the", 320)]
    groups = split_row(fragments, PAGE_WIDTH, [0], row_based=False)
    assert groups == [fragments[:1], fragments[1:]]


def test_midpoint_preferred_over_break_straddling_the_centre():
    a = frag("alpha beta gamma", 72)
    b = frag("delta epsilon", 250)
    c = frag("zeta eta theta iota", 330)
    # the break group [b, c] straddles the page centre
    assert split_row([a, b, c], PAGE_WIDTH, [0], row_based=True) == [[a, b], [c]]


def test_dominant_fragment_ignores_superscripts():
    marker = frag("1", 60, size=6)
    title = frag("Title text", 72, size=12)
    assert dominant_fragment([marker, title]) is title


def test_build_line():
    page = page_from_rows([])
    fragments = [frag("1", 60, size=6), frag("Title  text", 72, size=12)]
    line = build_line(page, 500.0, fragments)
    assert line.text == "1 Title text"
    assert line.x == 72
    assert line.font_size == 12
    assert line.y == 500.0
    assert line.column is None
    assert build_line(page, 500.0, []) is None
    assert build_line(page, 500.0, [frag("  ", 72)]) is None


def test_line_right_edge_ignores_leading_superscript():
    page = page_from_rows([])
    fragments = [frag("1", 60, size=6), frag("Title text", 72, size=12)]
    line = build_line(page, 500.0, fragments)
    # span estimate from the leftmost fragment: 1 * 6 * 0.52 + 10 * 12 * 0.52
    assert line.right_edge == pytest.approx(60 + 65.52)
    assert line.estimated_width == pytest.approx(65.52 - 12)


def test_measure_line_width_from_leftmost_fragment():
    fragments = [frag("left column words", 72)]
    assert measure_line_width(fragments, 72) == pytest.approx(17 * 10 * 0.52)
    assert measure_line_width(fragments, 500) == 0.0
