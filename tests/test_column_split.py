import pytest

from pdf_reading_order.column_split import (
    assign_columns,
    classify_line_column,
    estimate_page_split,
    is_spanning_width,
    pull_toward_lower_gap,
    reconcile_split_positions,
    spatial_split_estimate,
)
from pdf_reading_order.models import Column, PageLayout

from builders import PAGE_HEIGHT, PAGE_WIDTH, make_line


def _layout(page_index, samples, row_based=True, multi=True):
    return PageLayout(
        page_index=page_index,
        width=PAGE_WIDTH,
        height=PAGE_HEIGHT,
        is_multi_column=multi,
        row_based=row_based,
        gap_samples=list(samples),
    )


def _body_lines():
    lines = []
    for k in range(6):
        lines.append(make_line(f"left column line {k} of body text", 72, 600 - k * 20))
        lines.append(make_line(f"right column line {k} of body text", 320, 600 - k * 20))
    return lines


def test_estimate_page_split_uses_dominant_gap_cluster():
    assert estimate_page_split([320, 322, 318, 90], [], PAGE_WIDTH) == 320


def test_spatial_split_estimate():
    assert spatial_split_estimate(_body_lines(), PAGE_WIDTH) == pytest.approx((72 + 31 * 5.2 + 320) / 2)
    # no right-hand lines: page midpoint
    assert spatial_split_estimate(_body_lines()[::2], PAGE_WIDTH) == 306.0


def test_pull_toward_lower_gap():
    assert pull_toward_lower_gap(320, [310, 300], PAGE_WIDTH) == 310
    assert pull_toward_lower_gap(320, [250], PAGE_WIDTH) == 320
    assert pull_toward_lower_gap(320, [330], PAGE_WIDTH) == 320


def test_reconcile_prefers_document_split():
    layouts = [
        _layout(0, [320, 320, 320]),
        _layout(1, [330, 330]),
        _layout(2, [320]),
        _layout(3, [310, 310]),
        _layout(4, [], row_based=False),
        _layout(5, [], row_based=False, multi=False),
    ]
    global_split = reconcile_split_positions(layouts, {})
    assert global_split == 320
    assert [layout.split_x for layout in layouts] == [320, 320, 320, 310, 320, None]


def test_reconcile_without_row_based_pages_estimates_spatially():
    layout = _layout(0, [], row_based=False)
    assert reconcile_split_positions([layout], {0: _body_lines()}) is None
    assert layout.split_x == pytest.approx((72 + 31 * 5.2 + 320) / 2)


def test_classify_line_column():
    assert classify_line_column(make_line("left body text", 72, 500), 320) is Column.LEFT
    assert classify_line_column(make_line("right body text", 318, 500), 320) is Column.RIGHT
    assert classify_line_column(make_line("title", 72, 700, width=400), 320) is None
    # not spanning, but reaches far into the right column
    assert classify_line_column(make_line("wide title", 72, 700, width=370), 320) is None


def test_spanning_width():
    assert is_spanning_width(make_line("x", 72, 500, width=380))
    assert not is_spanning_width(make_line("x", 72, 500, width=370))


def test_assign_columns_clears_single_column_pages():
    lines = _body_lines()
    layout = _layout(0, [320])
    layout.split_x = 320
    assign_columns(lines, layout)
    assert {line.column for line in lines} == {Column.LEFT, Column.RIGHT}

    assign_columns(lines, _layout(0, [], multi=False))
    assert {line.column for line in lines} == {None}
