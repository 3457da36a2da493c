from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


# ----------------------------
# Extracted input
# ----------------------------
@dataclass(frozen=True)
class Fragment:
    text: str
    x: float
    y: float
    font_size: float
    width: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Fragment":
        width = data.get("width")
        return cls(
            text=str(data.get("text", "")),
            x=float(data["x"]),
            y=float(data["y"]),
            font_size=float(data.get("fontSize", data.get("font_size", 0.0))),
            width=float(width) if width is not None else None,
        )


@dataclass
class Page:
    page_index: int
    width: float
    height: float
    fragments: List[Fragment] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Page":
        return cls(
            page_index=int(data.get("pageIndex", data.get("page_index", 0))),
            width=float(data.get("width", 0.0)),
            height=float(data.get("height", 0.0)),
            fragments=[Fragment.from_dict(f) for f in data.get("fragments", [])],
        )


@dataclass
class Document:
    pages: List[Page] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Document":
        return cls(pages=[Page.from_dict(p) for p in data.get("pages", [])])


# ----------------------------
# Engine output
# ----------------------------
class Column(str, Enum):
    LEFT = "left"
    RIGHT = "right"


@dataclass
class Line:
    page_index: int
    page_width: float
    page_height: float
    x: float
    y: float
    font_size: float
    estimated_width: float
    text: str
    column: Optional[Column] = None
    fragments: List[Fragment] = field(default_factory=list, repr=False)

    @property
    def right_edge(self) -> float:
        return self.x + self.estimated_width

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pageIndex": self.page_index,
            "pageWidth": self.page_width,
            "pageHeight": self.page_height,
            "x": self.x,
            "y": self.y,
            "fontSize": self.font_size,
            "estimatedWidth": self.estimated_width,
            "text": self.text,
            "column": self.column.value if self.column else None,
        }


@dataclass
class PageLayout:
    """Per-page layout facts, computed once and read by the sorter and repair passes."""

    page_index: int
    width: float
    height: float
    is_multi_column: bool = False
    row_based: bool = False
    gap_samples: List[float] = field(default_factory=list)
    split_x: Optional[float] = None
    column_major: bool = False


@dataclass
class ReorderResult:
    reordered: bool
    lines: List[Line]
