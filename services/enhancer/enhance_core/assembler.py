from __future__ import annotations

import io
import re
from dataclasses import dataclass
from typing import Sequence

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Cm, Pt, RGBColor
from docx.text.paragraph import Paragraph

from libs.core import logging as core_logging

from .renderer import BlockKind, ContentBlock, TextRun
from .styles import FONT_NAME, paragraph_style, run_style

LOGGER = core_logging.get_logger("enhancer")

DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
PAGE_MARGIN = Cm(1)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9]")


@dataclass(frozen=True)
class DocumentArtifact:
    filename: str
    content_type: str
    content: bytes


def artifact_filename(role: str) -> str:
    return f"Ideal_Resume_{_UNSAFE_FILENAME_CHARS.sub('_', role)}.docx"


def assemble(blocks: Sequence[ContentBlock], role: str) -> DocumentArtifact:
    document = Document()
    _apply_page_setup(document, role)
    for block in blocks:
        _add_block(document, block)

    buffer = io.BytesIO()
    document.save(buffer)
    content = buffer.getvalue()
    LOGGER.info("document_assembled", blocks=len(blocks), bytes=len(content))
    return DocumentArtifact(
        filename=artifact_filename(role), content_type=DOCX_CONTENT_TYPE, content=content
    )


def _apply_page_setup(document: Document, role: str) -> None:
    for section in document.sections:
        section.top_margin = PAGE_MARGIN
        section.bottom_margin = PAGE_MARGIN
        section.left_margin = PAGE_MARGIN
        section.right_margin = PAGE_MARGIN
    normal_style = document.styles["Normal"]
    normal_style.font.name = FONT_NAME
    normal_style.font.size = Pt(run_style("body").size_pt)
    document.core_properties.title = f"Ideal Resume - {role}"


def _add_block(document: Document, block: ContentBlock) -> Paragraph:
    paragraph = document.add_paragraph()
    if block.kind == BlockKind.bullet:
        paragraph.style = "List Bullet"
    if block.kind == BlockKind.heading:
        _set_paragraph_bottom_border(paragraph)
        paragraph.paragraph_format.keep_with_next = True
    layout = paragraph_style(block.style)
    paragraph.paragraph_format.space_before = Pt(layout.space_before_pt)
    paragraph.paragraph_format.space_after = Pt(layout.space_after_pt)
    if layout.indent_pt:
        paragraph.paragraph_format.left_indent = Pt(layout.indent_pt)
    if layout.centered:
        paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
    for run in block.runs:
        if run.href:
            _add_hyperlink(paragraph, run)
        else:
            _format_run(paragraph.add_run(run.text), run)
    return paragraph


def _format_run(docx_run, run: TextRun) -> None:
    style = run_style(run.style)
    docx_run.font.name = FONT_NAME
    docx_run.font.size = Pt(style.size_pt)
    docx_run.font.bold = style.bold
    docx_run.font.italic = style.italic
    docx_run.font.color.rgb = RGBColor.from_string(run.color)
    if run.underline:
        docx_run.font.underline = True


def _add_hyperlink(paragraph: Paragraph, run: TextRun) -> None:
    r_id = paragraph.part.relate_to(run.href, RT.HYPERLINK, is_external=True)
    hyperlink = OxmlElement("w:hyperlink")
    hyperlink.set(qn("r:id"), r_id)
    docx_run = paragraph.add_run(run.text)
    _format_run(docx_run, run)
    # Moving the run element re-parents it under the hyperlink.
    hyperlink.append(docx_run._r)
    paragraph._p.append(hyperlink)


def _set_paragraph_bottom_border(paragraph: Paragraph) -> None:
    p_pr = paragraph._p.get_or_add_pPr()
    p_bdr = p_pr.find(qn("w:pBdr"))
    if p_bdr is None:
        p_bdr = OxmlElement("w:pBdr")
        p_pr.append(p_bdr)
    bottom = OxmlElement("w:bottom")
    bottom.set(qn("w:val"), "single")
    bottom.set(qn("w:sz"), "6")
    bottom.set(qn("w:space"), "1")
    bottom.set(qn("w:color"), "D1D5DB")
    p_bdr.append(bottom)
