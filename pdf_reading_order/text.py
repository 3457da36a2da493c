from __future__ import annotations

import re
from typing import List, Optional, Tuple

NUMBERED_SECTION_MARKER_PATTERN = re.compile(r"^\d+(?:\.\d+){0,4}\.?$")
NUMBERED_HEADING_PATTERN = re.compile(r"^(\d+(?:\.\d+){0,4}\.?)\s+(.+)$")
DOTTED_SUBSECTION_MARKER_PATTERN = re.compile(r"^\d+(?:\.\d+){1,4}\.\s+")
HEADING_WORD_PATTERN = re.compile(r"^[A-Za-z][A-Za-z-]*$")
TERMINAL_PUNCTUATION_PATTERN = re.compile(r"[.!?][\"')\]”’]?$")
CONTINUATION_START_PATTERN = re.compile(r"^[a-z0-9(“‘\"']")
URL_PATTERN = re.compile(r"(?:https?://|www\.)", re.IGNORECASE)
CAPTION_LABEL_PATTERN = re.compile(
    r"^(?:fig(?:ure)?\.?|table)\s*(?:\d+|[IVXLC]+)(?:[.:]|\s|$)", re.IGNORECASE
)

MAX_HEADING_TEXT_LENGTH = 90
MAX_HEADING_WORDS = 16
MAX_REORDER_HEADING_DIGIT_RATIO = 0.34


# ----------------------------
# Spacing / character counts
# ----------------------------
def normalize_spacing(text: str) -> str:
    return " ".join(text.split())


def count_substantive_chars(text: str) -> int:
    return sum(1 for ch in text if ch.isalnum())


def estimate_text_width(text: str, font_size: float, factor: float = 0.52) -> float:
    return len(text) * font_size * factor


def ends_with_terminal_punctuation(text: str) -> bool:
    return bool(TERMINAL_PUNCTUATION_PATTERN.search(normalize_spacing(text)))


def starts_like_continuation(text: str) -> bool:
    return bool(CONTINUATION_START_PATTERN.match(normalize_spacing(text)))


def starts_uppercase(text: str) -> bool:
    normalized = normalize_spacing(text)
    return bool(normalized) and normalized[0].isupper()


def starts_lowercase(text: str) -> bool:
    normalized = normalize_spacing(text)
    return bool(normalized) and normalized[0].islower()


def contains_url(text: str) -> bool:
    return bool(URL_PATTERN.search(text))


def is_caption_label(text: str) -> bool:
    return bool(CAPTION_LABEL_PATTERN.match(normalize_spacing(text)))


# ----------------------------
# Numbered headings
# ----------------------------
def parse_numbered_heading(text: str) -> Optional[Tuple[str, str]]:
    """Split "2.1. Data collection" into ("2.1.", "Data collection")."""
    match = NUMBERED_HEADING_PATTERN.match(normalize_spacing(text))
    if not match:
        return None
    return match.group(1), match.group(2).strip()


def parse_marker_path(marker: str) -> Optional[List[int]]:
    tokens = marker.rstrip(".").split(".")
    path: List[int] = []
    for token in tokens:
        if not token.isdigit():
            return None
        path.append(int(token))
    return path or None


def _heading_words(text: str) -> List[str]:
    return text.split()


def has_heading_text_shape(text: str) -> bool:
    if len(text) < 2 or len(text) > MAX_HEADING_TEXT_LENGTH:
        return False
    if not text[0].isupper() or not text[0].isascii():
        return False
    if text[-1] in ".!?":
        return False
    words = _heading_words(text)
    return 0 < len(words) <= MAX_HEADING_WORDS


def is_column_heading_text(heading_text: str) -> bool:
    if not has_heading_text_shape(heading_text):
        return False
    if "," in heading_text or ":" in heading_text:
        return False
    return all(HEADING_WORD_PATTERN.match(word) for word in _heading_words(heading_text))


def is_column_heading(text: str) -> bool:
    parsed = parse_numbered_heading(text)
    if parsed is None:
        return False
    return is_column_heading_text(parsed[1])


def numbered_heading_path(text: str) -> Optional[List[int]]:
    """Heading number path for reordering, e.g. [2, 1] for "2.1 Data collection".

    Looser than is_column_heading: commas and digits are allowed in the heading
    text as long as digits stay a minority of its letters and digits.
    """
    parsed = parse_numbered_heading(text)
    if parsed is None:
        return None
    marker, heading_text = parsed
    if not has_heading_text_shape(heading_text):
        return None
    alnum = count_substantive_chars(heading_text)
    digits = sum(1 for ch in heading_text if ch.isdigit())
    if digits / max(alnum, 1) > MAX_REORDER_HEADING_DIGIT_RATIO:
        return None
    return parse_marker_path(marker)


def top_level_heading_number(text: str) -> Optional[int]:
    parsed = parse_numbered_heading(text)
    if parsed is None or not is_column_heading_text(parsed[1]):
        return None
    path = parse_marker_path(parsed[0])
    if not path or len(path) != 1:
        return None
    return path[0]


def has_dotted_subsection_marker(text: str) -> bool:
    return bool(DOTTED_SUBSECTION_MARKER_PATTERN.match(normalize_spacing(text)))


def is_path_prefix(prefix: List[int], target: List[int]) -> bool:
    if not prefix or len(prefix) > len(target):
        return False
    return target[: len(prefix)] == prefix


def is_sibling_successor(previous: List[int], following: List[int]) -> bool:
    """True for pairs like 2.1 -> 2.2: same parent, last number one higher."""
    if not previous or len(previous) != len(following):
        return False
    if previous[:-1] != following[:-1]:
        return False
    return previous[-1] + 1 == following[-1]


def is_section_prefixed_heading(text: str, max_words: int = 8) -> bool:
    """A numbered section marker followed by heading-shaped words ("3 Results")."""
    tokens = normalize_spacing(text).split(" ")
    if len(tokens) < 2 or len(tokens) > max_words:
        return False
    if not NUMBERED_SECTION_MARKER_PATTERN.match(tokens[0]):
        return False
    return all(HEADING_WORD_PATTERN.match(token) for token in tokens[1:])
