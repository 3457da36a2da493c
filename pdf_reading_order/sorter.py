from __future__ import annotations

from functools import cmp_to_key
from typing import Dict, List, Optional, Sequence

from .config import DEFAULT_CONFIG, ReadingOrderConfig
from .models import Column, Line, PageLayout
from .text import contains_url, count_substantive_chars, is_column_heading, normalize_spacing


# ----------------------------
# Line predicates
# ----------------------------
def is_near_row_body_line(line: Line, config: ReadingOrderConfig = DEFAULT_CONFIG) -> bool:
    """Body text inside the page's vertical body band, long enough to be prose."""
    if line.page_height <= 0:
        return False
    normalized = normalize_spacing(line.text)
    if count_substantive_chars(normalized) < config.near_row_min_text_chars:
        return False
    if contains_url(normalized):
        return False
    relative_y = line.y / line.page_height
    return config.near_row_bottom_y_ratio < relative_y < config.near_row_top_y_ratio


def is_near_row_body_pair(a: Line, b: Line, config: ReadingOrderConfig = DEFAULT_CONFIG) -> bool:
    if not is_near_row_body_line(a, config) or not is_near_row_body_line(b, config):
        return False
    max_y_delta = max(a.font_size, b.font_size) * config.near_row_max_y_delta_font_ratio
    return abs(a.y - b.y) <= max_y_delta


def is_column_major_body_line(line: Line, config: ReadingOrderConfig = DEFAULT_CONFIG) -> bool:
    return is_near_row_body_line(line, config) and not is_column_heading(line.text)


def vertical_span_ratio(lines: Sequence[Line]) -> float:
    if not lines:
        return 0.0
    ys = [line.y for line in lines]
    page_height = max(lines[0].page_height, 1.0)
    return (max(ys) - min(ys)) / page_height


def prefers_column_major(lines: Sequence[Line], config: ReadingOrderConfig = DEFAULT_CONFIG) -> bool:
    """Two vertically extensive column bodies: the page reads one column, then the other."""
    body = [line for line in lines if is_column_major_body_line(line, config)]
    for column in (Column.LEFT, Column.RIGHT):
        side = [line for line in body if line.column is column]
        if len(side) < config.column_major_min_lines_per_side:
            return False
        if vertical_span_ratio(side) < config.column_major_min_span_ratio:
            return False
    return True


# ----------------------------
# Comparator
# ----------------------------
def compare_by_column(a: Optional[Column], b: Optional[Column]) -> int:
    if a is None or b is None or a is b:
        return 0
    return -1 if a is Column.LEFT else 1


def compare_multi_column(a: Line, b: Line, column_major: bool, config: ReadingOrderConfig = DEFAULT_CONFIG) -> int:
    if is_column_heading(a.text) and is_column_heading(b.text):
        return compare_by_column(a.column, b.column)

    if column_major and is_column_major_body_line(a, config) and is_column_major_body_line(b, config):
        order = compare_by_column(a.column, b.column)
        if order:
            return order

    if not is_near_row_body_pair(a, b, config):
        return 0
    return compare_by_column(a.column, b.column)


def compare_lines(
    a: Line,
    b: Line,
    layouts: Dict[int, PageLayout],
    config: ReadingOrderConfig = DEFAULT_CONFIG,
) -> int:
    if a.page_index != b.page_index:
        return -1 if a.page_index < b.page_index else 1

    layout = layouts.get(a.page_index)
    if layout is not None and layout.is_multi_column:
        order = compare_multi_column(a, b, layout.column_major, config)
        if order:
            return order

    if a.y != b.y:
        return -1 if a.y > b.y else 1
    if a.x != b.x:
        return -1 if a.x < b.x else 1
    return 0


def sort_lines(
    lines: Sequence[Line],
    layouts: Dict[int, PageLayout],
    config: ReadingOrderConfig = DEFAULT_CONFIG,
) -> List[Line]:
    by_page: Dict[int, List[Line]] = {}
    for line in lines:
        by_page.setdefault(line.page_index, []).append(line)
    for page_index, layout in layouts.items():
        layout.column_major = layout.is_multi_column and prefers_column_major(by_page.get(page_index, []), config)

    return sorted(lines, key=cmp_to_key(lambda a, b: compare_lines(a, b, layouts, config)))
