from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

FONT_NAME = "Calibri"

DEFAULT_COLOR = "1F2937"
ADDED_COLOR = "FF0000"
LINK_COLOR = "2563EB"
MUTED_COLOR = "6B7280"


@dataclass(frozen=True)
class RunStyle:
    size_pt: float
    bold: bool = False
    italic: bool = False
    color: str = DEFAULT_COLOR


@dataclass(frozen=True)
class ParagraphStyle:
    space_before_pt: float = 0
    space_after_pt: float = 0
    indent_pt: float = 0
    centered: bool = False


RUN_STYLES: Dict[str, RunStyle] = {
    "name": RunStyle(16, bold=True, color=LINK_COLOR),
    "contact": RunStyle(11, color=MUTED_COLOR),
    "link": RunStyle(10, color=LINK_COLOR),
    "heading": RunStyle(12, bold=True),
    "body": RunStyle(11),
    "label": RunStyle(11, bold=True),
    "entry_title": RunStyle(11, bold=True),
    "detail": RunStyle(10),
    "detail_label": RunStyle(10, bold=True),
    "detail_italic": RunStyle(10, italic=True),
}

# Spacing mirrors the twip values of the legacy layout (20 twips per point).
PARAGRAPH_STYLES: Dict[str, ParagraphStyle] = {
    "name": ParagraphStyle(space_after_pt=10, centered=True),
    "contact": ParagraphStyle(space_after_pt=10, centered=True),
    "links": ParagraphStyle(space_after_pt=15, centered=True),
    "heading": ParagraphStyle(space_before_pt=10, space_after_pt=6),
    "summary": ParagraphStyle(space_after_pt=10),
    "skills": ParagraphStyle(space_after_pt=7),
    "entry_title": ParagraphStyle(space_before_pt=5, space_after_pt=3),
    "entry_detail": ParagraphStyle(space_after_pt=4, indent_pt=18),
    "education_title": ParagraphStyle(space_after_pt=4),
    "bullet": ParagraphStyle(space_after_pt=5, indent_pt=18),
    "extras": ParagraphStyle(space_after_pt=5),
}


def run_style(name: str) -> RunStyle:
    return RUN_STYLES.get(name, RUN_STYLES["body"])


def paragraph_style(name: str) -> ParagraphStyle:
    return PARAGRAPH_STYLES.get(name, ParagraphStyle())
