from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from .config import DEFAULT_CONFIG, ReadingOrderConfig
from .geometry import dominant_cluster_median, median, percentile
from .models import Column, Line, PageLayout

logger = logging.getLogger(__name__)


def is_spanning_width(line: Line, config: ReadingOrderConfig = DEFAULT_CONFIG) -> bool:
    page_width = max(line.page_width, 1.0)
    return line.estimated_width / page_width >= config.spanning_width_ratio


def spatial_split_estimate(lines: Sequence[Line], page_width: float, config: ReadingOrderConfig = DEFAULT_CONFIG) -> float:
    midpoint = page_width * config.midpoint_ratio
    left_edges: List[float] = []
    right_starts: List[float] = []
    for line in lines:
        if is_spanning_width(line, config):
            continue
        if line.x + line.estimated_width / 2.0 < midpoint:
            left_edges.append(line.right_edge)
        else:
            right_starts.append(line.x)
    if not left_edges or not right_starts:
        return midpoint
    left_edge = percentile(left_edges, 75)
    right_start = percentile(right_starts, 25)
    if right_start <= left_edge:
        return midpoint
    return (left_edge + right_start) / 2.0


def estimate_page_split(
    gap_samples: Sequence[float],
    lines: Sequence[Line],
    page_width: float,
    config: ReadingOrderConfig = DEFAULT_CONFIG,
) -> float:
    if gap_samples:
        return dominant_cluster_median(gap_samples, config.split_cluster_tolerance)
    return spatial_split_estimate(lines, page_width, config)


def pull_toward_lower_gap(
    global_split: float,
    gap_samples: Sequence[float],
    page_width: float,
    config: ReadingOrderConfig = DEFAULT_CONFIG,
) -> float:
    """Absorb layout drift: a page whose own gaps sit just under the global split uses the highest of them."""
    tolerance = page_width * config.split_drift_tolerance_ratio
    lower = [s for s in gap_samples if global_split - tolerance <= s < global_split]
    return max(lower) if lower else global_split


def reconcile_split_positions(
    layouts: Sequence[PageLayout],
    page_lines: Dict[int, List[Line]],
    config: ReadingOrderConfig = DEFAULT_CONFIG,
) -> Optional[float]:
    """Set `split_x` on every multi-column layout; returns the document-wide split if any."""
    row_based_splits = [
        estimate_page_split(layout.gap_samples, [], layout.width, config)
        for layout in layouts
        if layout.is_multi_column and layout.row_based and layout.gap_samples
    ]
    global_split = median(row_based_splits) if row_based_splits else None

    for layout in layouts:
        if not layout.is_multi_column:
            layout.split_x = None
            continue
        if global_split is not None and global_split < layout.width:
            layout.split_x = pull_toward_lower_gap(global_split, layout.gap_samples, layout.width, config)
        else:
            layout.split_x = estimate_page_split(
                layout.gap_samples,
                page_lines.get(layout.page_index, []),
                layout.width,
                config,
            )
        logger.debug("page %d: split_x=%.1f", layout.page_index, layout.split_x)

    return global_split


def classify_line_column(
    line: Line,
    split_x: float,
    config: ReadingOrderConfig = DEFAULT_CONFIG,
) -> Optional[Column]:
    """LEFT/RIGHT against the split, or None for spanning lines."""
    if is_spanning_width(line, config):
        return None
    right_column_width = max(line.page_width - split_x, 1.0)
    overshoot = line.right_edge - split_x
    if line.x < split_x / 2.0 and overshoot > right_column_width * config.spanning_overshoot_ratio:
        return None
    if line.x < split_x - line.font_size / 2.0:
        return Column.LEFT
    return Column.RIGHT


def assign_columns(lines: Sequence[Line], layout: PageLayout, config: ReadingOrderConfig = DEFAULT_CONFIG) -> None:
    for line in lines:
        if layout.is_multi_column and layout.split_x is not None:
            line.column = classify_line_column(line, layout.split_x, config)
        else:
            line.column = None
