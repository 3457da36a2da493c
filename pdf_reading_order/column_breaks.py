from __future__ import annotations

from typing import List, Sequence

from .config import DEFAULT_CONFIG, ReadingOrderConfig
from .geometry import fragment_width
from .models import Fragment
from .text import count_substantive_chars

# Break indexes follow one convention throughout: index i means
# "the row splits between fragments[i] and fragments[i + 1]".


def minimum_column_gap(page_width: float, config: ReadingOrderConfig = DEFAULT_CONFIG) -> float:
    return max(config.min_column_gap, page_width * config.min_column_gap_ratio)


def is_column_break(
    left: Fragment,
    right: Fragment,
    page_width: float,
    config: ReadingOrderConfig = DEFAULT_CONFIG,
) -> bool:
    if page_width <= 0:
        return False
    if right.x - left.x < minimum_column_gap(page_width, config):
        return False
    if left.x > page_width * config.column_break_left_max_ratio:
        return False
    if right.x < page_width * config.column_break_right_min_ratio:
        return False
    return (
        count_substantive_chars(left.text) >= config.min_break_text_chars
        and count_substantive_chars(right.text) >= config.min_break_text_chars
    )


def find_column_break_indexes(
    fragments: Sequence[Fragment],
    page_width: float,
    config: ReadingOrderConfig = DEFAULT_CONFIG,
) -> List[int]:
    return [
        i
        for i in range(len(fragments) - 1)
        if is_column_break(fragments[i], fragments[i + 1], page_width, config)
    ]


def is_bridge_fragment(fragment: Fragment, config: ReadingOrderConfig = DEFAULT_CONFIG) -> bool:
    """Stray dashes, asterisks and lone reference markers such as "[6]"."""
    text = fragment.text.strip()
    if len(text) > config.max_bridge_fragment_length:
        return False
    return count_substantive_chars(text) <= config.max_bridge_fragment_chars


def _bridged_split_index(
    fragments: Sequence[Fragment],
    left_index: int,
    right_index: int,
    config: ReadingOrderConfig,
) -> int:
    left = fragments[left_index]
    right = fragments[right_index]
    left_edge = left.x + fragment_width(left, config.text_width_factor)
    split = left_index
    for bridge in fragments[left_index + 1 : right_index]:
        to_left = max(0.0, bridge.x - left_edge)
        to_right = max(0.0, right.x - (bridge.x + fragment_width(bridge, config.text_width_factor)))
        if to_left > to_right:
            break
        split += 1
    return split


def find_bridged_break_indexes(
    fragments: Sequence[Fragment],
    page_width: float,
    config: ReadingOrderConfig = DEFAULT_CONFIG,
) -> List[int]:
    """Breaks whose gap holds up to `max_bridge_fragments` near-empty fragments.

    The bridging fragments are attached to whichever flank they sit closer to,
    so the returned index may point at a bridge fragment rather than the left flank.
    """
    indexes: List[int] = []
    n = len(fragments)
    for i in range(n):
        for bridge_count in range(1, config.max_bridge_fragments + 1):
            j = i + bridge_count + 1
            if j >= n:
                break
            bridges = fragments[i + 1 : j]
            if not all(is_bridge_fragment(b, config) for b in bridges):
                break
            if not is_column_break(fragments[i], fragments[j], page_width, config):
                continue
            indexes.append(_bridged_split_index(fragments, i, j, config))
            break
    return indexes


def find_row_breaks(
    fragments: Sequence[Fragment],
    page_width: float,
    config: ReadingOrderConfig = DEFAULT_CONFIG,
) -> List[int]:
    direct = find_column_break_indexes(fragments, page_width, config)
    bridged = find_bridged_break_indexes(fragments, page_width, config)
    return sorted(set(direct) | set(bridged))


def break_gap_samples(
    fragments: Sequence[Fragment],
    breaks: Sequence[int],
    config: ReadingOrderConfig = DEFAULT_CONFIG,
) -> List[float]:
    """The x where the right-hand column starts at each break, skipping bridge glyphs."""
    samples: List[float] = []
    for i in breaks:
        following = [f for f in fragments[i + 1 :] if not is_bridge_fragment(f, config)]
        if following:
            samples.append(following[0].x)
        elif i + 1 < len(fragments):
            samples.append(fragments[i + 1].x)
    return samples
