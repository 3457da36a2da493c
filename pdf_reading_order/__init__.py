from .config import DEFAULT_CONFIG, ReadingOrderConfig
from .engine import ReadingOrder, analyze_document, collect_page_lines, collect_text_lines, group_lines_by_page
from .models import Column, Document, Fragment, Line, Page, PageLayout, ReorderResult

__all__ = [
    "Column",
    "DEFAULT_CONFIG",
    "Document",
    "Fragment",
    "Line",
    "Page",
    "PageLayout",
    "ReadingOrder",
    "ReadingOrderConfig",
    "ReorderResult",
    "analyze_document",
    "collect_page_lines",
    "collect_text_lines",
    "group_lines_by_page",
]
