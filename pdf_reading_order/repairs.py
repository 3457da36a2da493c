from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .config import DEFAULT_CONFIG, ReadingOrderConfig
from .models import Column, Line, PageLayout
from .sorter import is_column_major_body_line, is_near_row_body_line
from .text import (
    ends_with_terminal_punctuation,
    has_dotted_subsection_marker,
    is_caption_label,
    is_column_heading,
    is_path_prefix,
    is_sibling_successor,
    numbered_heading_path,
    starts_like_continuation,
    starts_lowercase,
    starts_uppercase,
    top_level_heading_number,
)

logger = logging.getLogger(__name__)

RepairPass = Callable[[List[Line], Dict[int, PageLayout], ReadingOrderConfig], List[Line]]


# ----------------------------
# Shared helpers
# ----------------------------
def move_line(lines: List[Line], from_index: int, to_index: int) -> None:
    """Remove the line at `from_index` and reinsert it at `to_index` of the shortened list."""
    line = lines.pop(from_index)
    lines.insert(to_index, line)


def within_vertical_range(a: Line, b: Line, font_ratio: float) -> bool:
    return abs(a.y - b.y) <= max(a.font_size, b.font_size) * font_ratio


def vertical_bound(a: Line, b: Line, font_ratio: float, padding: float) -> float:
    size = max(a.font_size, b.font_size)
    return max(size * font_ratio, size + padding)


def is_multi_column_page(line: Line, layouts: Dict[int, PageLayout]) -> bool:
    layout = layouts.get(line.page_index)
    return layout is not None and layout.is_multi_column


def is_numbered_predecessor(candidate: Sequence[int], current: Sequence[int]) -> bool:
    """2 or 2.1 precede 2.2: a same-root prefix or the previous sibling."""
    if not candidate or not current or list(candidate) == list(current):
        return False
    if candidate[0] != current[0]:
        return False
    return is_path_prefix(list(candidate), list(current)) or is_sibling_successor(list(candidate), list(current))


# ----------------------------
# 1. Right-column numbered headings ahead of their predecessor
# ----------------------------
def find_heading_predecessor(lines: Sequence[Line], index: int, config: ReadingOrderConfig) -> Optional[int]:
    current = lines[index]
    if current.column is not Column.RIGHT:
        return None
    path = numbered_heading_path(current.text)
    if path is None:
        return None
    top_level = top_level_heading_number(current.text)

    scan_end = min(len(lines), index + config.heading_lookahead)
    for scan in range(index + 1, scan_end):
        candidate = lines[scan]
        if candidate.page_index != current.page_index:
            break
        if candidate.column is not Column.LEFT:
            continue
        if top_level is not None:
            candidate_top = top_level_heading_number(candidate.text)
            if (
                candidate_top is not None
                and candidate_top + 1 == top_level
                and within_vertical_range(current, candidate, config.top_level_heading_max_y_font_ratio)
            ):
                return scan
        candidate_path = numbered_heading_path(candidate.text)
        if candidate_path is None or not is_numbered_predecessor(candidate_path, path):
            continue
        if within_vertical_range(current, candidate, config.numbered_heading_max_y_font_ratio):
            return scan
    return None


def promotion_target(lines: Sequence[Line], found: int, index: int) -> int:
    """Slot for the promoted heading: ahead of already-promoted descendants (2. goes before 2.1)."""
    promoted = lines[found]
    path = numbered_heading_path(promoted.text)
    target = index
    while target > 0 and path is not None:
        previous = lines[target - 1]
        if previous.page_index != promoted.page_index:
            break
        previous_path = numbered_heading_path(previous.text)
        if previous_path is None or not is_numbered_predecessor(path, previous_path):
            break
        target -= 1
    return target


def promote_right_column_numbered_headings(
    lines: List[Line],
    layouts: Dict[int, PageLayout],
    config: ReadingOrderConfig = DEFAULT_CONFIG,
) -> List[Line]:
    result = list(lines)
    index = 0
    while index < len(result):
        found = find_heading_predecessor(result, index, config)
        if found is not None:
            logger.debug("promote %r before %r", result[found].text, result[index].text)
            move_line(result, found, promotion_target(result, found, index))
        # after a promotion the heading sits one further down; several predecessors (2., 2.1) may trail it
        index += 1
    return result


# ----------------------------
# 2. Left-column top-level headings after same-row right body
# ----------------------------
def find_left_heading_promotion(lines: Sequence[Line], index: int, config: ReadingOrderConfig) -> Optional[int]:
    current = lines[index]
    if current.column is not Column.LEFT:
        return None
    if top_level_heading_number(current.text) is None:
        return None

    max_y_delta = max(current.font_size * config.left_heading_max_y_font_ratio, current.font_size + 12)
    target = index
    scan_start = max(0, index - config.left_heading_lookback)
    for scan in range(index - 1, scan_start - 1, -1):
        candidate = lines[scan]
        if candidate.page_index != current.page_index:
            break
        if abs(candidate.y - current.y) > max_y_delta:
            break
        if candidate.column is not Column.RIGHT:
            break
        if is_column_heading(candidate.text):
            break
        target = scan
    return target if target < index else None


def promote_left_column_top_level_headings(
    lines: List[Line],
    layouts: Dict[int, PageLayout],
    config: ReadingOrderConfig = DEFAULT_CONFIG,
) -> List[Line]:
    result = list(lines)
    for index in range(1, len(result)):
        target = find_left_heading_promotion(result, index, config)
        if target is None:
            continue
        logger.debug("promote left heading %r", result[index].text)
        move_line(result, index, target)
    return result


# ----------------------------
# 3. Orphan right-column headings on column-major pages
# ----------------------------
def find_orphan_heading_target(lines: Sequence[Line], index: int, config: ReadingOrderConfig) -> Optional[int]:
    heading = lines[index]
    last_left_body = None
    for position, line in enumerate(lines):
        if line.page_index != heading.page_index:
            continue
        if line.column is Column.LEFT and is_column_major_body_line(line, config):
            last_left_body = position
    if last_left_body is None or last_left_body < index:
        return None

    following = lines[index + 1] if index + 1 < len(lines) else None
    if (
        following is not None
        and following.page_index == heading.page_index
        and following.column is Column.RIGHT
        and 0 < heading.y - following.y <= heading.font_size * config.orphan_heading_continuation_font_ratio
    ):
        return None

    target = last_left_body + 1
    while (
        target < len(lines)
        and lines[target].page_index == heading.page_index
        and lines[target].column is Column.RIGHT
        and lines[target].y > heading.y
    ):
        target += 1
    return target


def defer_orphan_right_column_headings(
    lines: List[Line],
    layouts: Dict[int, PageLayout],
    config: ReadingOrderConfig = DEFAULT_CONFIG,
) -> List[Line]:
    result = list(lines)
    index = 0
    while index < len(result):
        heading = result[index]
        layout = layouts.get(heading.page_index)
        if (
            layout is not None
            and layout.column_major
            and heading.column is Column.RIGHT
            and is_column_heading(heading.text)
        ):
            target = find_orphan_heading_target(result, index, config)
            if target is not None:
                logger.debug("defer orphan heading %r", heading.text)
                move_line(result, index, target - 1)
                continue
        index += 1
    return result


# ----------------------------
# 4. Descending sibling headings in one column
# ----------------------------
def fix_descending_sibling_headings(
    lines: List[Line],
    layouts: Dict[int, PageLayout],
    config: ReadingOrderConfig = DEFAULT_CONFIG,
) -> List[Line]:
    result = list(lines)
    for index in range(len(result) - 1):
        first, second = result[index], result[index + 1]
        if first.page_index != second.page_index:
            continue
        if first.column is None or first.column is not second.column:
            continue
        first_path = numbered_heading_path(first.text)
        second_path = numbered_heading_path(second.text)
        if first_path is None or second_path is None:
            continue
        if not is_sibling_successor(second_path, first_path):
            continue
        if not within_vertical_range(first, second, config.sibling_heading_max_y_font_ratio):
            continue
        result[index], result[index + 1] = second, first
    return result


# ----------------------------
# 5. Right-column lines ahead of left-column sentence continuations
# ----------------------------
def is_deferrable_right_line(line: Line, layouts: Dict[int, PageLayout], config: ReadingOrderConfig) -> bool:
    if line.column is not Column.RIGHT:
        return False
    if is_column_heading(line.text):
        return True
    layout = layouts.get(line.page_index)
    if layout is None or not layout.column_major:
        return False
    return starts_uppercase(line.text) and is_near_row_body_line(line, config)


def is_unfinished_left_line(candidate: Line, line: Line, config: ReadingOrderConfig) -> bool:
    if candidate.page_index != line.page_index:
        return False
    if candidate.column is not Column.LEFT or is_column_heading(candidate.text):
        return False
    if not candidate.text.strip() or ends_with_terminal_punctuation(candidate.text):
        return False
    bound = vertical_bound(candidate, line, config.continuation_max_y_font_ratio, 10)
    return abs(candidate.y - line.y) <= bound


def is_left_continuation(candidate: Line, previous: Line, line: Line, config: ReadingOrderConfig) -> bool:
    if candidate.page_index != line.page_index:
        return False
    if candidate.column is not Column.LEFT or is_column_heading(candidate.text):
        return False
    if not starts_like_continuation(candidate.text):
        return False
    delta = previous.y - candidate.y
    if delta <= 0 or delta > vertical_bound(previous, candidate, config.continuation_max_y_font_ratio, 10):
        return False
    return abs(candidate.x - previous.x) <= candidate.page_width * config.continuation_max_x_offset_ratio


def find_continuation_insertion(lines: Sequence[Line], index: int, config: ReadingOrderConfig) -> Optional[int]:
    line = lines[index]
    previous = lines[index - 1]
    insertion = index + 1
    found = False
    scan_end = min(len(lines), index + config.continuation_lookahead + 1)
    while insertion < scan_end:
        candidate = lines[insertion]
        if not is_left_continuation(candidate, previous, line, config):
            break
        found = True
        previous = candidate
        insertion += 1
        if ends_with_terminal_punctuation(previous.text):
            break
    return insertion if found else None


def defer_right_column_lines_after_left_continuations(
    lines: List[Line],
    layouts: Dict[int, PageLayout],
    config: ReadingOrderConfig = DEFAULT_CONFIG,
) -> List[Line]:
    result = list(lines)
    index = 1
    while index < len(result) - 1:
        line = result[index]
        if is_deferrable_right_line(line, layouts, config) and is_unfinished_left_line(result[index - 1], line, config):
            insertion = find_continuation_insertion(result, index, config)
            if insertion is not None:
                logger.debug("defer %r after left continuation", line.text)
                move_line(result, index, insertion - 1)
                index = insertion - 1
        index += 1
    return result


# ----------------------------
# 6. Left/right heading pairs with a cut-short left continuation
# ----------------------------
def heading_pair_insertion(left_heading: Line, right_heading: Line, index: int) -> Optional[int]:
    left_path = numbered_heading_path(left_heading.text)
    right_path = numbered_heading_path(right_heading.text)
    if (
        left_path is not None
        and right_path is not None
        and has_dotted_subsection_marker(left_heading.text)
        and has_dotted_subsection_marker(right_heading.text)
        and len(left_path) >= 2
        and is_sibling_successor(left_path, right_path)
    ):
        return index + 1

    left_top = top_level_heading_number(left_heading.text)
    right_top = top_level_heading_number(right_heading.text)
    if left_top is None or right_top is None or left_top + 1 != right_top:
        return None
    return index


def repair_heading_pair_continuations(
    lines: List[Line],
    layouts: Dict[int, PageLayout],
    config: ReadingOrderConfig = DEFAULT_CONFIG,
) -> List[Line]:
    result = list(lines)
    index = 0
    while index < len(result) - 2:
        left_heading, right_heading = result[index], result[index + 1]
        if (
            left_heading.page_index != right_heading.page_index
            or left_heading.column is not Column.LEFT
            or right_heading.column is not Column.RIGHT
        ):
            index += 1
            continue
        insertion = heading_pair_insertion(left_heading, right_heading, index)
        if insertion is None:
            index += 1
            continue

        end = index + 2
        while end < len(result):
            candidate = result[end]
            if candidate.page_index != left_heading.page_index or candidate.column is not Column.LEFT:
                break
            if not is_near_row_body_line(candidate, config) or is_column_heading(candidate.text):
                break
            if candidate.y <= left_heading.y:
                break
            end += 1

        count = end - (index + 2)
        if count:
            continuation = result[index + 2 : end]
            del result[index + 2 : end]
            result[insertion:insertion] = continuation
            logger.debug("moved %d continuation line(s) around %r", count, left_heading.text)
            index += count
        index += 1
    return result


def find_left_heading_body(lines: Sequence[Line], index: int, config: ReadingOrderConfig) -> Optional[int]:
    heading = lines[index]
    max_y_delta = max(heading.font_size * config.heading_body_max_y_font_ratio, heading.font_size + 16)
    scan_end = min(len(lines), index + config.heading_body_lookahead + 1)
    for scan in range(index + 2, scan_end):
        candidate = lines[scan]
        if candidate.page_index != heading.page_index:
            break
        if candidate.column is not Column.LEFT or not is_near_row_body_line(candidate, config):
            continue
        if is_column_heading(candidate.text):
            break
        if not starts_uppercase(candidate.text):
            continue
        delta = heading.y - candidate.y
        if 0 < delta <= max_y_delta:
            return scan
    return None


def pull_left_heading_body_before_right_body(
    lines: List[Line],
    layouts: Dict[int, PageLayout],
    config: ReadingOrderConfig = DEFAULT_CONFIG,
) -> List[Line]:
    result = list(lines)
    index = 0
    while index < len(result) - 1:
        heading, following = result[index], result[index + 1]
        if (
            heading.column is Column.LEFT
            and is_column_heading(heading.text)
            and any(ch.islower() for ch in heading.text)
            and following.page_index == heading.page_index
            and following.column is Column.RIGHT
            and is_near_row_body_line(following, config)
            and not is_column_heading(following.text)
            and starts_lowercase(following.text)
            and not ends_with_terminal_punctuation(following.text)
        ):
            body_index = find_left_heading_body(result, index, config)
            if body_index is not None:
                move_line(result, body_index, index + 1)
                index += 1
        index += 1
    return result


# ----------------------------
# 7. Interleaved figure/table captions
# ----------------------------
def shares_column(a: Line, b: Line) -> bool:
    return a.column is None or b.column is None or a.column is b.column


def reference_body_line(lines: Sequence[Line], index: int, config: ReadingOrderConfig) -> Optional[Line]:
    """Nearest non-caption line on the label's page and in its column."""
    label = lines[index]
    for distance in range(1, config.caption_window + 1):
        for position in (index - distance, index + distance):
            if not 0 <= position < len(lines):
                continue
            candidate = lines[position]
            if candidate.page_index != label.page_index or not shares_column(label, candidate):
                continue
            if not is_caption_label(candidate.text):
                return candidate
    return None


def caption_stands_out(label: Line, reference: Line, config: ReadingOrderConfig) -> bool:
    if abs(label.font_size - reference.font_size) >= config.caption_font_delta:
        return True
    return abs(label.x - reference.x) >= label.page_width * config.caption_x_delta_ratio


def is_caption_like(line: Line, label: Line, reference: Line, config: ReadingOrderConfig) -> bool:
    if abs(label.font_size - reference.font_size) >= config.caption_font_delta:
        return abs(line.font_size - label.font_size) < abs(line.font_size - reference.font_size)
    return abs(line.x - label.x) < abs(line.x - reference.x)


def count_alternations(classes: Sequence[bool]) -> int:
    return sum(1 for a, b in zip(classes, classes[1:]) if a != b)


def deinterleave_caption_runs(
    lines: List[Line],
    layouts: Dict[int, PageLayout],
    config: ReadingOrderConfig = DEFAULT_CONFIG,
) -> List[Line]:
    result = list(lines)
    index = 0
    while index < len(result):
        label = result[index]
        if not is_multi_column_page(label, layouts) or not is_caption_label(label.text):
            index += 1
            continue
        reference = reference_body_line(result, index, config)
        if reference is None or not caption_stands_out(label, reference, config):
            index += 1
            continue

        # other-column lines keep their slots
        positions: List[int] = []
        for position in range(index + 1, min(len(result), index + 1 + config.caption_window)):
            candidate = result[position]
            if candidate.page_index != label.page_index:
                break
            if shares_column(label, candidate):
                positions.append(position)
        window = [result[position] for position in positions]
        classes = [is_caption_like(line, label, reference, config) for line in window]
        if True not in classes:
            index += 1
            continue
        last = len(classes) - 1 - classes[::-1].index(True)
        positions, window, classes = positions[: last + 1], window[: last + 1], classes[: last + 1]

        if count_alternations([True] + classes) >= config.caption_min_alternations:
            captions = [line for line, is_caption in zip(window, classes) if is_caption]
            bodies = [line for line, is_caption in zip(window, classes) if not is_caption]
            for position, line in zip(positions, captions + bodies):
                result[position] = line
            logger.debug("de-interleaved caption run at %r", label.text)
        index += 1
    return result


# ----------------------------
# 8. Bottom-of-page runs
# ----------------------------
def group_bottom_of_page_runs(
    lines: List[Line],
    layouts: Dict[int, PageLayout],
    config: ReadingOrderConfig = DEFAULT_CONFIG,
) -> List[Line]:
    result = list(lines)
    start = 0
    while start < len(result):
        end = start
        while end < len(result) and result[end].page_index == result[start].page_index:
            end += 1

        first = result[start]
        if is_multi_column_page(first, layouts) and first.page_height > 0:
            run_start = end
            while run_start > start and result[run_start - 1].y / first.page_height <= config.near_row_bottom_y_ratio:
                run_start -= 1
            run = result[run_start:end]
            columns = {line.column for line in run}
            if Column.LEFT in columns and Column.RIGHT in columns:
                result[run_start:end] = (
                    [line for line in run if line.column is None]
                    + [line for line in run if line.column is Column.LEFT]
                    + [line for line in run if line.column is Column.RIGHT]
                )
        start = end
    return result


# ----------------------------
# Pipeline
# ----------------------------
REPAIR_PASSES: Sequence[RepairPass] = (
    promote_right_column_numbered_headings,
    promote_left_column_top_level_headings,
    defer_orphan_right_column_headings,
    fix_descending_sibling_headings,
    defer_right_column_lines_after_left_continuations,
    repair_heading_pair_continuations,
    pull_left_heading_body_before_right_body,
    deinterleave_caption_runs,
    group_bottom_of_page_runs,
)


def run_repair_pipeline(
    lines: Sequence[Line],
    layouts: Dict[int, PageLayout],
    config: ReadingOrderConfig = DEFAULT_CONFIG,
    passes: Sequence[RepairPass] = REPAIR_PASSES,
) -> List[Line]:
    """Apply the passes in order, repeating the sweep until the order stops changing.

    A sweep that returns to an earlier order ends the run there, so feeding the
    result back in yields the same result.
    """
    result = list(lines)
    seen = {_order_key(result)}
    for _ in range(config.max_repair_rounds):
        for repair in passes:
            result = repair(result, layouts, config)
        key = _order_key(result)
        if key in seen:
            return result
        seen.add(key)
    logger.warning("repair passes still moving lines after %d rounds", config.max_repair_rounds)
    return result


def _order_key(lines: Sequence[Line]) -> Tuple[int, ...]:
    return tuple(id(line) for line in lines)
