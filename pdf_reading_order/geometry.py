from __future__ import annotations

from collections import Counter
from typing import List, Sequence

from .models import Fragment
from .text import estimate_text_width


# ----------------------------
# Percentile / median (no numpy)
# ----------------------------
def percentile(values: Sequence[float], p: float) -> float:
    if not values:
        raise ValueError("percentile() requires non-empty values")
    xs = sorted(values)
    if p <= 0:
        return xs[0]
    if p >= 100:
        return xs[-1]
    k = (len(xs) - 1) * (p / 100.0)
    f = int(k)
    c = min(f + 1, len(xs) - 1)
    if c == f:
        return xs[f]
    d = k - f
    return xs[f] * (1 - d) + xs[c] * d


def median(values: Sequence[float]) -> float:
    return percentile(values, 50.0)


# ----------------------------
# 1D clustering
# ----------------------------
def cluster_values(values: Sequence[float], tolerance: float) -> List[List[float]]:
    """Group sorted values into clusters whose neighbours are at most `tolerance` apart."""
    clusters: List[List[float]] = []
    for value in sorted(values):
        if clusters and value - clusters[-1][-1] <= tolerance:
            clusters[-1].append(value)
        else:
            clusters.append([value])
    return clusters


def dominant_cluster_median(values: Sequence[float], tolerance: float) -> float:
    clusters = cluster_values(values, tolerance)
    if not clusters:
        raise ValueError("dominant_cluster_median() requires non-empty values")
    # largest cluster wins; ties go to the leftmost
    best = max(clusters, key=len)
    return median(best)


# ----------------------------
# Fragment widths
# ----------------------------
def fragment_width(fragment: Fragment, factor: float = 0.52) -> float:
    if fragment.width is not None and fragment.width > 0:
        return fragment.width
    return estimate_text_width(fragment.text, fragment.font_size, factor)


def fragment_center(fragment: Fragment, factor: float = 0.52) -> float:
    return fragment.x + fragment_width(fragment, factor) / 2.0


def estimate_line_width(fragments: Sequence[Fragment], factor: float = 0.52) -> float:
    if not fragments:
        return 0.0
    xs = [f.x for f in fragments]
    span_from_positions = max(xs) - min(xs)
    span_from_text = sum(fragment_width(f, factor) for f in fragments)
    return max(span_from_positions, span_from_text)


def estimate_body_font_size(font_sizes: Sequence[float], default: float = 10.0) -> float:
    """Most frequent rounded font size; smaller size wins ties."""
    if not font_sizes:
        return default
    counts = Counter(round(size) for size in font_sizes)
    return float(min(counts.items(), key=lambda item: (-item[1], item[0]))[0])
