from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import pdfplumber

from .config import DEFAULT_CONFIG, ReadingOrderConfig
from .models import Document, Fragment, Page

PathLike = Union[str, Path]


def assert_readable_file(path: PathLike) -> None:
    if not os.path.isfile(path) or not os.access(path, os.R_OK):
        raise FileNotFoundError(f"Cannot read input file: {path}")


# ----------------------------
# Word extraction
# ----------------------------
def extract_words(page) -> List[Dict[str, Any]]:
    return page.extract_words(
        use_text_flow=False,
        keep_blank_chars=False,
        extra_attrs=["size", "fontname"],
        return_chars=True,
    )


def word_baseline(word: Dict[str, Any], page_height: float) -> float:
    """Baseline in PDF space (origin bottom-left), from the first glyph's text matrix."""
    chars = word.get("chars") or []
    matrix = chars[0].get("matrix") if chars else None
    if matrix:
        return float(matrix[5])
    return page_height - float(word["bottom"])


# ----------------------------
# Run grouping
# ----------------------------
def group_words_by_baseline(
    words: Sequence[Dict[str, Any]],
    page_height: float,
    y_tol: float = 0.5,
) -> List[List[Dict[str, Any]]]:
    if not words:
        return []
    sorted_words = sorted(words, key=lambda w: (-word_baseline(w, page_height), float(w["x0"])))

    lines: List[List[Dict[str, Any]]] = []
    current: List[Dict[str, Any]] = []
    current_y: Optional[float] = None

    for w in sorted_words:
        y = word_baseline(w, page_height)
        if current_y is not None and abs(y - current_y) <= y_tol:
            current.append(w)
            continue
        if current:
            current.sort(key=lambda ww: float(ww["x0"]))
            lines.append(current)
        current_y = y
        current = [w]

    if current:
        current.sort(key=lambda ww: float(ww["x0"]))
        lines.append(current)

    return lines


def _same_style(a: Dict[str, Any], b: Dict[str, Any]) -> bool:
    if abs(float(a.get("size", 0.0)) - float(b.get("size", 0.0))) > 0.1:
        return False
    return a.get("fontname") == b.get("fontname")


def words_to_fragments(
    words: Sequence[Dict[str, Any]],
    page_height: float,
    run_gap_ratio: float = 0.6,
) -> List[Fragment]:
    """Merge words into text runs so fragments resemble the PDF's own text-show spans.

    Words join a run while they share a baseline and font and the horizontal gap
    stays under `run_gap_ratio` of the font size; a column gutter always breaks a run.
    """
    fragments: List[Fragment] = []
    for line_words in group_words_by_baseline(words, page_height):
        run: List[Dict[str, Any]] = []
        for w in line_words:
            if run:
                prev = run[-1]
                size = float(prev.get("size", 0.0))
                gap = float(w["x0"]) - float(prev["x1"])
                if _same_style(prev, w) and gap <= size * run_gap_ratio:
                    run.append(w)
                    continue
                fragments.append(_run_to_fragment(run, page_height))
            run = [w]
        if run:
            fragments.append(_run_to_fragment(run, page_height))
    return fragments


def _run_to_fragment(run: Sequence[Dict[str, Any]], page_height: float) -> Fragment:
    first = run[0]
    x0 = float(first["x0"])
    x1 = max(float(w["x1"]) for w in run)
    return Fragment(
        text=" ".join(str(w["text"]) for w in run).strip(),
        x=x0,
        y=word_baseline(first, page_height),
        font_size=float(first.get("size", 0.0)),
        width=max(0.0, x1 - x0),
    )


# ----------------------------
# Document extraction
# ----------------------------
def extract_page(page, page_index: int, config: ReadingOrderConfig = DEFAULT_CONFIG) -> Page:
    words = extract_words(page)
    return Page(
        page_index=page_index,
        width=float(page.width),
        height=float(page.height),
        fragments=words_to_fragments(words, float(page.height), config.run_gap_ratio),
    )


def extract_document(pdf_path: PathLike, config: ReadingOrderConfig = DEFAULT_CONFIG) -> Document:
    assert_readable_file(pdf_path)
    with pdfplumber.open(pdf_path) as pdf:
        pages = [extract_page(page, page_index, config) for page_index, page in enumerate(pdf.pages)]
    return Document(pages=pages)


def load_document_json(path: PathLike) -> Document:
    """Read an already-extracted document: {"pages": [{pageIndex, width, height, fragments}]}."""
    assert_readable_file(path)
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return Document.from_dict(data)
