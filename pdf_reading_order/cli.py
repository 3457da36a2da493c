#!/usr/bin/env python3
from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from typing import List, Optional, Sequence, TextIO

from .config import DEFAULT_CONFIG, ReadingOrderConfig
from .engine import ReadingOrder, analyze_document, group_lines_by_page
from .extract import extract_document, load_document_json
from .llm_reorder import DEFAULT_MODEL, reorder_lines_with_llm
from .models import Document, Line


# ----------------------------
# Logging
# ----------------------------
def log(msg: str, verbose: bool) -> None:
    if verbose:
        print(msg, file=sys.stderr, flush=True)


# ----------------------------
# Output writers
# ----------------------------
def write_output_text(
    out: TextIO,
    lines: Sequence[Line],
    double_newline: bool,
    show_columns: bool,
) -> None:
    nl = "\n\n" if double_newline else "\n"
    for page_index, page_lines in group_lines_by_page(lines).items():
        out.write(f"\n\n=== PAGE {page_index + 1} ===\n\n")
        for line in page_lines:
            if show_columns:
                marker = line.column.value[0].upper() if line.column else "-"
                out.write(f"[{marker}] ")
            out.write(line.text + nl)


def write_output_json(out: TextIO, lines: Sequence[Line]) -> None:
    json.dump([line.to_dict() for line in lines], out, ensure_ascii=False, indent=2)
    out.write("\n")


# ----------------------------
# Pipeline
# ----------------------------
def load_document(path: str, config: ReadingOrderConfig) -> Document:
    if path.lower().endswith(".json"):
        return load_document_json(path)
    return extract_document(path, config)


def apply_llm_reorder(result: ReadingOrder, model: str, verbose: bool) -> List[Line]:
    ordered: List[Line] = []
    for page_index, page_lines in group_lines_by_page(result.lines).items():
        layout = result.layouts.get(page_index)
        if layout is None or not layout.is_multi_column:
            ordered.extend(page_lines)
            continue
        reorder = reorder_lines_with_llm(page_lines, model=model)
        log(f"[page {page_index + 1}] llm_reorder reordered={reorder.reordered}", verbose)
        ordered.extend(reorder.lines)
    return ordered


def config_from_args(args) -> ReadingOrderConfig:
    return dataclasses.replace(
        DEFAULT_CONFIG,
        bucket_size=args.bucket_size,
        min_column_gap=args.min_column_gap,
        min_column_gap_ratio=args.min_column_gap_ratio,
        spanning_width_ratio=args.spanning_width_ratio,
        split_drift_tolerance_ratio=args.split_drift_tolerance,
        run_gap_ratio=args.run_gap_ratio,
    )


# ----------------------------
# CLI
# ----------------------------
def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Recover reading order (1-2 columns) from PDF text fragments.")

    ap.add_argument("pdf", help="Input PDF path (or an extracted-fragments .json document)")
    ap.add_argument("-o", "--out", default="out.txt", help="Output file path ('-' for stdout)")
    ap.add_argument("--format", choices=["text", "json"], default="text",
                    help="text = lines per page. json = line records with geometry and column.")

    ap.add_argument("--bucket-size", type=float, default=DEFAULT_CONFIG.bucket_size)
    ap.add_argument("--min-column-gap", type=float, default=DEFAULT_CONFIG.min_column_gap)
    ap.add_argument("--min-column-gap-ratio", type=float, default=DEFAULT_CONFIG.min_column_gap_ratio)
    ap.add_argument("--spanning-width-ratio", type=float, default=DEFAULT_CONFIG.spanning_width_ratio)
    ap.add_argument("--split-drift-tolerance", type=float, default=DEFAULT_CONFIG.split_drift_tolerance_ratio,
                    help="Fraction of page width a page's own column gap may sit below the document split.")
    ap.add_argument("--run-gap-ratio", type=float, default=DEFAULT_CONFIG.run_gap_ratio,
                    help="Max word gap (in font sizes) when joining words into fragments.")

    ap.add_argument("--llm-reorder", action="store_true",
                    help="Reorder multi-column pages with an OpenAI model (needs OPENAI_API_KEY).")
    ap.add_argument("--llm-model", default=DEFAULT_MODEL)

    ap.add_argument("--double-newline", action="store_true")
    ap.add_argument("--show-columns", action="store_true", help="Prefix lines with [L], [R] or [-].")

    ap.add_argument("-v", "--verbose", action="store_true")

    return ap


def run(args) -> int:
    verbose = args.verbose
    config = config_from_args(args)

    document = load_document(args.pdf, config)
    log(f"[document] pages={len(document.pages)}", verbose)

    result = analyze_document(document, config)
    for page_index, layout in result.layouts.items():
        split = f"{layout.split_x:.1f}" if layout.split_x is not None else "-"
        log(
            f"[page {page_index + 1}] multi_column={layout.is_multi_column} row_based={layout.row_based} "
            f"column_major={layout.column_major} split_x={split}",
            verbose,
        )

    lines = apply_llm_reorder(result, args.llm_model, verbose) if args.llm_reorder else result.lines

    out = sys.stdout if args.out == "-" else open(args.out, "w", encoding="utf-8")
    try:
        if args.format == "json":
            write_output_json(out, lines)
        else:
            write_output_text(out, lines, args.double_newline, args.show_columns)
    finally:
        if out is not sys.stdout:
            out.close()

    log(f"[document] lines={len(lines)} -> {args.out}", verbose)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    ap = build_arg_parser()
    args = ap.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        return run(args)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
