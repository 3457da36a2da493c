from __future__ import annotations

from typing import Dict, List

from .config import DEFAULT_CONFIG, ReadingOrderConfig
from .models import Fragment, Page


def bucket_key(y: float, bucket_size: float) -> float:
    return float(round(y / bucket_size) * bucket_size)


def bucket_fragments(page: Page, config: ReadingOrderConfig = DEFAULT_CONFIG) -> Dict[float, List[Fragment]]:
    """Group a page's fragments into rows keyed by their quantized baseline."""
    buckets: Dict[float, List[Fragment]] = {}
    max_y = page.height * config.max_reasonable_y_multiplier
    for fragment in page.fragments:
        if not fragment.text.strip():
            continue
        # off-page artifacts (watermarks, stamps)
        if page.height > 0 and fragment.y > max_y:
            continue
        key = bucket_key(fragment.y, config.bucket_size)
        buckets.setdefault(key, []).append(fragment)
    return buckets
