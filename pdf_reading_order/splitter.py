from __future__ import annotations

from typing import List, Optional, Sequence

from .config import DEFAULT_CONFIG, ReadingOrderConfig
from .geometry import estimate_line_width, fragment_center
from .models import Fragment, Line, Page
from .text import count_substantive_chars, is_section_prefixed_heading, normalize_spacing


# ----------------------------
# Split strategies
# ----------------------------
def split_at_breaks(fragments: Sequence[Fragment], breaks: Sequence[int]) -> List[List[Fragment]]:
    groups: List[List[Fragment]] = []
    start = 0
    for index in breaks:
        groups.append(list(fragments[start : index + 1]))
        start = index + 1
    groups.append(list(fragments[start:]))
    return [g for g in groups if g]


def split_at_midpoint(
    fragments: Sequence[Fragment],
    page_width: float,
    config: ReadingOrderConfig = DEFAULT_CONFIG,
) -> Optional[List[List[Fragment]]]:
    split_x = page_width * config.midpoint_ratio
    left: List[Fragment] = []
    right: List[Fragment] = []
    for fragment in fragments:
        if fragment_center(fragment, config.text_width_factor) < split_x:
            left.append(fragment)
        else:
            right.append(fragment)

    if not left or not right:
        return None
    if sum(count_substantive_chars(f.text) for f in left) < config.min_break_text_chars:
        return None
    if sum(count_substantive_chars(f.text) for f in right) < config.min_break_text_chars:
        return None
    return [left, right]


def _group_side(group: Sequence[Fragment], page_width: float, config: ReadingOrderConfig) -> str:
    split_x = page_width * config.midpoint_ratio
    sides = {"left" if fragment_center(f, config.text_width_factor) < split_x else "right" for f in group}
    return sides.pop() if len(sides) == 1 else "mixed"


def _midpoint_start_gap(fragments: Sequence[Fragment], page_width: float, config: ReadingOrderConfig) -> float:
    split_x = page_width * config.midpoint_ratio
    left_xs = [f.x for f in fragments if fragment_center(f, config.text_width_factor) < split_x]
    right_xs = [f.x for f in fragments if fragment_center(f, config.text_width_factor) >= split_x]
    if not left_xs or not right_xs:
        return 0.0
    return min(right_xs) - max(left_xs)


def should_prefer_midpoint_split(
    fragments: Sequence[Fragment],
    break_groups: Sequence[Sequence[Fragment]],
    midpoint_groups: Sequence[Sequence[Fragment]],
    page_width: float,
    config: ReadingOrderConfig = DEFAULT_CONFIG,
) -> bool:
    """Break groups that straddle the page centre on one side only lose to a clean bisection."""
    if len(midpoint_groups) != 2:
        return False
    break_sides = {_group_side(g, page_width, config) for g in break_groups}
    if "mixed" not in break_sides:
        return False
    if "left" in break_sides and "right" in break_sides:
        return False

    midpoint_sides = {_group_side(g, page_width, config) for g in midpoint_groups}
    if midpoint_sides != {"left", "right"}:
        return False

    minimum_gap = max(page_width * config.min_midpoint_recovery_gap_ratio, config.min_column_gap * 0.25)
    return _midpoint_start_gap(fragments, page_width, config) >= minimum_gap


def should_force_heading_split(
    fragments: Sequence[Fragment],
    breaks: Sequence[int],
    config: ReadingOrderConfig = DEFAULT_CONFIG,
) -> bool:
    """A numbered heading fused with the next column's first words ("3 Results  we observe ...")."""
    if not breaks:
        return False
    first_segment = normalize_spacing(" ".join(f.text for f in fragments[: breaks[0] + 1]))
    if not first_segment:
        return False
    return is_section_prefixed_heading(first_segment, config.max_section_prefix_words)


def split_row(
    fragments: Sequence[Fragment],
    page_width: float,
    breaks: Sequence[int],
    row_based: bool,
    config: ReadingOrderConfig = DEFAULT_CONFIG,
) -> List[List[Fragment]]:
    if not (row_based or should_force_heading_split(fragments, breaks, config)):
        return [list(fragments)]

    midpoint_groups = split_at_midpoint(fragments, page_width, config) if row_based else None
    if not breaks:
        return midpoint_groups or [list(fragments)]

    groups = split_at_breaks(fragments, breaks)
    if midpoint_groups and should_prefer_midpoint_split(fragments, groups, midpoint_groups, page_width, config):
        return midpoint_groups
    return groups


# ----------------------------
# Line construction
# ----------------------------
def dominant_fragment(fragments: Sequence[Fragment]) -> Fragment:
    """Largest font wins, leftmost on ties, so small superscripts never set the line start."""
    return min(fragments, key=lambda f: (-f.font_size, f.x))


def measure_line_width(fragments: Sequence[Fragment], start_x: float, config: ReadingOrderConfig = DEFAULT_CONFIG) -> float:
    """Line width counted from `start_x` rather than from the leftmost fragment."""
    offset = start_x - min(f.x for f in fragments)
    return max(0.0, estimate_line_width(fragments, config.text_width_factor) - offset)


def build_line(
    page: Page,
    y: float,
    fragments: Sequence[Fragment],
    config: ReadingOrderConfig = DEFAULT_CONFIG,
) -> Optional[Line]:
    if not fragments:
        return None
    text = normalize_spacing(" ".join(f.text for f in fragments))
    if not text:
        return None
    dominant = dominant_fragment(fragments)
    return Line(
        page_index=page.page_index,
        page_width=page.width,
        page_height=page.height,
        x=dominant.x,
        y=y,
        font_size=dominant.font_size,
        estimated_width=measure_line_width(fragments, dominant.x, config),
        text=text,
        fragments=list(fragments),
    )
