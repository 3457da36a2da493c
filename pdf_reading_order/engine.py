from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .bucketing import bucket_fragments
from .classifier import classify_page
from .column_split import assign_columns, reconcile_split_positions
from .config import DEFAULT_CONFIG, ReadingOrderConfig
from .inline_merge import merge_inline_splits
from .models import Document, Line, Page, PageLayout
from .repairs import run_repair_pipeline
from .sorter import sort_lines
from .splitter import build_line, split_row

logger = logging.getLogger(__name__)


@dataclass
class ReadingOrder:
    lines: List[Line] = field(default_factory=list)
    layouts: Dict[int, PageLayout] = field(default_factory=dict)
    global_split_x: Optional[float] = None


# ----------------------------
# Page pipeline
# ----------------------------
def collect_page_lines(page: Page, config: ReadingOrderConfig = DEFAULT_CONFIG) -> Tuple[List[Line], PageLayout]:
    layout = PageLayout(page_index=page.page_index, width=page.width, height=page.height)
    buckets = bucket_fragments(page, config)
    if not buckets:
        return [], layout

    classification = classify_page(page, buckets, config)
    layout.is_multi_column = classification.is_multi_column
    layout.row_based = classification.row_based
    layout.gap_samples = list(classification.gap_samples)

    lines: List[Line] = []
    for key, fragments in buckets.items():
        ordered = sorted(fragments, key=lambda f: f.x)
        breaks = classification.row_breaks.get(key, [])
        for group in split_row(ordered, page.width, breaks, classification.row_based, config):
            line = build_line(page, key, group, config)
            if line is not None:
                lines.append(line)

    logger.debug(
        "page %d: %d fragments -> %d lines (multi_column=%s row_based=%s)",
        page.page_index,
        len(page.fragments),
        len(lines),
        layout.is_multi_column,
        layout.row_based,
    )
    return lines, layout


def group_lines_by_page(lines: Sequence[Line]) -> Dict[int, List[Line]]:
    grouped: Dict[int, List[Line]] = {}
    for line in lines:
        grouped.setdefault(line.page_index, []).append(line)
    return grouped


# ----------------------------
# Document pipeline
# ----------------------------
def analyze_document(document: Document, config: Optional[ReadingOrderConfig] = None) -> ReadingOrder:
    config = config or DEFAULT_CONFIG
    page_lines: Dict[int, List[Line]] = {}
    layouts: Dict[int, PageLayout] = {}
    collected: List[Line] = []

    for page in document.pages:
        lines, layout = collect_page_lines(page, config)
        page_lines[page.page_index] = lines
        layouts[page.page_index] = layout
        collected.extend(lines)

    global_split = reconcile_split_positions(list(layouts.values()), page_lines, config)
    for page_index, layout in layouts.items():
        assign_columns(page_lines[page_index], layout, config)

    ordered = sort_lines(collected, layouts, config)
    repaired = run_repair_pipeline(ordered, layouts, config)
    merged = merge_inline_splits(repaired, config)
    return ReadingOrder(lines=merged, layouts=layouts, global_split_x=global_split)


def collect_text_lines(document: Document, config: Optional[ReadingOrderConfig] = None) -> List[Line]:
    """Ordered, column-tagged lines for the whole document."""
    return analyze_document(document, config).lines
