from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ReadingOrderConfig:
    # bucketing
    bucket_size: float = 2.0
    max_reasonable_y_multiplier: float = 2.5

    # column breaks
    min_column_gap: float = 120.0
    min_column_gap_ratio: float = 0.18
    column_break_left_max_ratio: float = 0.55
    column_break_right_min_ratio: float = 0.33
    min_break_text_chars: int = 6
    max_bridge_fragments: int = 2
    max_bridge_fragment_chars: int = 2
    max_bridge_fragment_length: int = 6

    # page classification
    min_break_rows: int = 3
    min_break_row_ratio: float = 0.12
    spatial_band_low_ratio: float = 0.1
    spatial_band_high_ratio: float = 0.9
    spatial_body_font_tolerance: float = 1.0
    spatial_min_lines_per_side: int = 6

    # row splitting
    midpoint_ratio: float = 0.5
    min_midpoint_recovery_gap_ratio: float = 0.05
    max_section_prefix_words: int = 8
    text_width_factor: float = 0.52

    # column split estimation
    split_cluster_tolerance: float = 8.0
    split_drift_tolerance_ratio: float = 0.04
    spanning_width_ratio: float = 0.62
    spanning_overshoot_ratio: float = 0.35

    # sorting
    near_row_max_y_delta_font_ratio: float = 2.1
    near_row_min_text_chars: int = 10
    near_row_top_y_ratio: float = 0.8
    near_row_bottom_y_ratio: float = 0.1
    column_major_min_lines_per_side: int = 5
    column_major_min_span_ratio: float = 0.2

    # repair passes
    heading_lookahead: int = 18
    top_level_heading_max_y_font_ratio: float = 3.2
    numbered_heading_max_y_font_ratio: float = 12.0
    left_heading_lookback: int = 6
    left_heading_max_y_font_ratio: float = 2.8
    orphan_heading_continuation_font_ratio: float = 3.0
    sibling_heading_max_y_font_ratio: float = 3.0
    continuation_lookahead: int = 8
    continuation_max_y_font_ratio: float = 2.8
    continuation_max_x_offset_ratio: float = 0.06
    heading_body_lookahead: int = 16
    heading_body_max_y_font_ratio: float = 3.6
    caption_window: int = 10
    caption_font_delta: float = 0.5
    caption_x_delta_ratio: float = 0.04
    caption_min_alternations: int = 2
    max_repair_rounds: int = 32

    # inline-split merge
    inline_merge_lookahead: int = 3
    inline_merge_row_font_ratio: float = 0.3
    inline_merge_font_delta: float = 0.5
    inline_merge_max_gap_font_ratio: float = 1.5
    inline_merge_connector_gap_font_ratio: float = 3.0
    inline_merge_connector_max_words: int = 6
    inline_merge_capital_gap_font_ratio: float = 1.0

    # extraction
    run_gap_ratio: float = 0.6


DEFAULT_CONFIG = ReadingOrderConfig()
