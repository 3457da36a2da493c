from pdf_reading_order.bucketing import bucket_fragments, bucket_key
from pdf_reading_order.config import ReadingOrderConfig
from pdf_reading_order.models import Page

from builders import frag


def test_bucket_key_rounds_to_grid():
    assert bucket_key(500.9, 2) == 500.0
    assert bucket_key(501.1, 2) == 502.0


def test_bucket_fragments_groups_by_baseline():
    page = Page(
        page_index=0,
        width=612,
        height=792,
        fragments=[frag("left", 72, 500.2), frag("right", 320, 499.8), frag("below", 72, 480)],
    )
    buckets = bucket_fragments(page)
    assert sorted(buckets) == [480.0, 500.0]
    assert [f.text for f in buckets[500.0]] == ["left", "right"]


def test_bucket_fragments_drops_empty_and_off_page():
    page = Page(
        page_index=0,
        width=612,
        height=100,
        fragments=[frag("   ", 72, 50), frag("stamp", 72, 251), frag("kept", 72, 249)],
    )
    buckets = bucket_fragments(page)
    assert [f.text for row in buckets.values() for f in row] == ["kept"]


def test_bucket_fragments_keeps_everything_without_page_height():
    page = Page(page_index=0, width=612, height=0, fragments=[frag("far away", 72, 5000)])
    assert list(bucket_fragments(page)) == [5000.0]


def test_bucket_size_is_configurable():
    page = Page(page_index=0, width=612, height=792, fragments=[frag("a", 72, 503), frag("b", 320, 507)])
    buckets = bucket_fragments(page, ReadingOrderConfig(bucket_size=10))
    assert list(buckets) == [500.0, 510.0]
