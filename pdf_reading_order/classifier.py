from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from .column_breaks import break_gap_samples, find_row_breaks
from .config import DEFAULT_CONFIG, ReadingOrderConfig
from .geometry import estimate_body_font_size, estimate_line_width
from .models import Fragment, Page

logger = logging.getLogger(__name__)


@dataclass
class PageClassification:
    is_multi_column: bool = False
    # row-based evidence carries break coordinates, so only it enables row splitting
    row_based: bool = False
    gap_samples: List[float] = field(default_factory=list)
    row_breaks: Dict[float, List[int]] = field(default_factory=dict)


def sorted_rows(buckets: Dict[float, List[Fragment]]) -> Dict[float, List[Fragment]]:
    return {key: sorted(fragments, key=lambda f: f.x) for key, fragments in buckets.items()}


def has_row_based_columns(
    rows: Dict[float, List[Fragment]],
    row_breaks: Dict[float, List[int]],
    config: ReadingOrderConfig = DEFAULT_CONFIG,
) -> bool:
    multi_fragment_rows = 0
    rows_with_break = 0
    for key, fragments in rows.items():
        if len(fragments) < 2:
            continue
        multi_fragment_rows += 1
        if row_breaks.get(key):
            rows_with_break += 1
    if rows_with_break < config.min_break_rows:
        return False
    return rows_with_break / max(multi_fragment_rows, 1) >= config.min_break_row_ratio


def has_spatial_columns(
    rows: Dict[float, List[Fragment]],
    page: Page,
    config: ReadingOrderConfig = DEFAULT_CONFIG,
) -> bool:
    if page.width <= 0 or page.height <= 0:
        return False
    body_size = estimate_body_font_size([f.font_size for fs in rows.values() for f in fs])
    low = page.height * config.spatial_band_low_ratio
    high = page.height * config.spatial_band_high_ratio
    midpoint = page.width * config.midpoint_ratio

    left_votes = 0
    right_votes = 0
    for key, fragments in rows.items():
        if not low <= key <= high:
            continue
        body = [f for f in fragments if abs(f.font_size - body_size) <= config.spatial_body_font_tolerance]
        if not body:
            continue
        width = estimate_line_width(body, config.text_width_factor)
        if width >= page.width * 0.5:
            continue
        center = min(f.x for f in body) + width / 2.0
        if center < midpoint:
            left_votes += 1
        else:
            right_votes += 1

    return left_votes >= config.spatial_min_lines_per_side and right_votes >= config.spatial_min_lines_per_side


def classify_page(
    page: Page,
    buckets: Dict[float, List[Fragment]],
    config: ReadingOrderConfig = DEFAULT_CONFIG,
) -> PageClassification:
    if page.width <= 0 or not buckets:
        return PageClassification()

    rows = sorted_rows(buckets)
    row_breaks = {key: find_row_breaks(fragments, page.width, config) for key, fragments in rows.items()}

    if has_row_based_columns(rows, row_breaks, config):
        samples: List[float] = []
        for key, breaks in row_breaks.items():
            samples.extend(break_gap_samples(rows[key], breaks, config))
        logger.debug("page %d: row-based multi-column, %d gap samples", page.page_index, len(samples))
        return PageClassification(
            is_multi_column=True,
            row_based=True,
            gap_samples=samples,
            row_breaks=row_breaks,
        )

    if has_spatial_columns(rows, page, config):
        logger.debug("page %d: spatial multi-column", page.page_index)
        return PageClassification(is_multi_column=True, row_based=False, row_breaks=row_breaks)

    return PageClassification(row_breaks=row_breaks)
