from __future__ import annotations

import logging
import re
from typing import List, Optional, Sequence

from .config import DEFAULT_CONFIG, ReadingOrderConfig
from .geometry import estimate_line_width
from .models import Line
from .text import ends_with_terminal_punctuation, normalize_spacing, starts_uppercase

logger = logging.getLogger(__name__)

CONNECTOR_WORDS = frozenset(
    ["and", "or", "of", "the", "to", "in", "for", "with", "on", "by", "a", "an", "from", "as", "at"]
)
TRAILING_WORD_PATTERN = re.compile(r"([A-Za-z]+)\W*$")


def ends_with_connector(text: str) -> bool:
    match = TRAILING_WORD_PATTERN.search(normalize_spacing(text))
    return bool(match) and match.group(1).lower() in CONNECTOR_WORDS


def inline_gap(first: Line, second: Line) -> float:
    return second.x - first.right_edge


def shares_row(first: Line, second: Line, config: ReadingOrderConfig = DEFAULT_CONFIG) -> bool:
    if first.page_index != second.page_index or first.column is not second.column:
        return False
    tolerance = max(config.bucket_size, min(first.font_size, second.font_size) * config.inline_merge_row_font_ratio)
    return abs(first.y - second.y) <= tolerance


def should_merge_inline(first: Line, second: Line, config: ReadingOrderConfig = DEFAULT_CONFIG) -> bool:
    if not shares_row(first, second, config):
        return False
    if second.x <= first.x:
        return False
    font = max(first.font_size, second.font_size)
    gap = inline_gap(first, second)
    if gap < -0.5 * font:
        return False

    font_delta = abs(first.font_size - second.font_size)
    # emphasis or size change mid-sentence
    if font_delta >= config.inline_merge_font_delta and gap <= font * config.inline_merge_max_gap_font_ratio:
        return True
    # "... results of" + "the trial"
    if (
        ends_with_connector(first.text)
        and len(second.text.split()) <= config.inline_merge_connector_max_words
        and gap <= font * config.inline_merge_connector_gap_font_ratio
    ):
        return True
    return (
        starts_uppercase(second.text)
        and font_delta < config.inline_merge_font_delta
        and gap <= font * config.inline_merge_capital_gap_font_ratio
        and not ends_with_terminal_punctuation(first.text)
    )


def merge_lines(first: Line, second: Line, config: ReadingOrderConfig = DEFAULT_CONFIG) -> Line:
    dominant = first if first.font_size >= second.font_size else second
    fragments = list(first.fragments) + list(second.fragments)
    width = estimate_line_width(fragments, config.text_width_factor) if fragments else 0.0
    x = min(first.x, second.x)
    return Line(
        page_index=first.page_index,
        page_width=first.page_width,
        page_height=first.page_height,
        x=x,
        y=dominant.y,
        font_size=dominant.font_size,
        estimated_width=max(width, second.right_edge - x),
        text=normalize_spacing(f"{first.text} {second.text}"),
        column=first.column,
        fragments=fragments,
    )


def find_inline_partner(lines: Sequence[Line], index: int, config: ReadingOrderConfig) -> Optional[int]:
    first = lines[index]
    scan_end = min(len(lines), index + 1 + config.inline_merge_lookahead)
    for scan in range(index + 1, scan_end):
        if lines[scan].page_index != first.page_index:
            break
        if should_merge_inline(first, lines[scan], config):
            return scan
    return None


def merge_inline_splits(lines: Sequence[Line], config: ReadingOrderConfig = DEFAULT_CONFIG) -> List[Line]:
    result = list(lines)
    index = 0
    while index < len(result):
        partner = find_inline_partner(result, index, config)
        if partner is None:
            index += 1
            continue
        logger.debug("merge inline split %r + %r", result[index].text, result[partner].text)
        result[index] = merge_lines(result[index], result[partner], config)
        del result[partner]
    return result
