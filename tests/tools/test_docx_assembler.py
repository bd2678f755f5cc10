from __future__ import annotations

import io

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml.ns import qn
from docx.shared import RGBColor

from services.enhancer.enhance_core import ResumeDocument, assemble, normalize, render, verify
from services.enhancer.enhance_core.assembler import DOCX_CONTENT_TYPE, artifact_filename
from services.enhancer.enhance_core.renderer import BlockKind, ContentBlock, TextRun


_SOURCE = normalize(
    "Jane Doe | jane@example.com | https://github.com/janedoe\n"
    "Skills: Python, SQL. Certified: Tableau Desktop Specialist.\n"
)


def _artifact():
    document = verify(
        ResumeDocument.model_validate(
            {
                "personalInfo": {
                    "name": "Jane Doe",
                    "email": "jane@example.com",
                    "github": "github.com/janedoe",
                },
                "coreSkills": ["Python", "Go"],
                "certifications": ["Tableau Desktop Specialist"],
            }
        ),
        _SOURCE,
    )
    return assemble(render(document, "ML Engineer"), "ML Engineer")


def _load(content: bytes):
    return Document(io.BytesIO(content))


def test_artifact_filename_replaces_unsafe_characters() -> None:
    assert artifact_filename("ML Engineer") == "Ideal_Resume_ML_Engineer.docx"
    assert artifact_filename("C++/Go dev") == "Ideal_Resume_C___Go_dev.docx"


def test_assemble_sets_page_setup_and_metadata() -> None:
    artifact = _artifact()

    assert artifact.content_type == DOCX_CONTENT_TYPE
    assert artifact.filename == "Ideal_Resume_ML_Engineer.docx"
    document = _load(artifact.content)
    section = document.sections[0]
    for margin in (section.top_margin, section.bottom_margin, section.left_margin, section.right_margin):
        assert round(margin.cm, 2) == 1.0
    assert document.core_properties.title == "Ideal Resume - ML Engineer"


def test_assemble_writes_external_hyperlinks() -> None:
    document = _load(_artifact().content)

    targets = []
    for paragraph in document.paragraphs:
        for hyperlink in paragraph._p.findall(qn("w:hyperlink")):
            r_id = hyperlink.get(qn("r:id"))
            targets.append(document.part.rels[r_id].target_ref)
    assert targets == ["mailto:jane@example.com", "https://github.com/janedoe"]


def test_assemble_colours_added_runs_only() -> None:
    document = _load(_artifact().content)

    skills = next(p for p in document.paragraphs if p.text.startswith("Skills: "))
    colours = [(run.text, run.font.color.rgb) for run in skills.runs]
    assert colours == [
        ("Skills: ", RGBColor(0x1F, 0x29, 0x37)),
        ("Python, ", RGBColor(0x1F, 0x29, 0x37)),
        ("Go", RGBColor(0xFF, 0x00, 0x00)),
    ]
    assert skills.runs[0].bold is True


def test_assemble_layout_for_headings_and_bullets() -> None:
    document = _load(_artifact().content)
    paragraphs = document.paragraphs

    assert paragraphs[0].text == "Jane Doe"
    assert paragraphs[0].alignment == WD_ALIGN_PARAGRAPH.CENTER
    heading = next(p for p in paragraphs if p.text == "CERTIFICATIONS")
    assert heading._p.pPr.find(qn("w:pBdr")) is not None
    certification = paragraphs[paragraphs.index(heading) + 1]
    assert certification.style.name == "List Bullet"
    assert certification.text == "Tableau Desktop Specialist"


def test_assemble_accepts_hand_built_blocks() -> None:
    blocks = [
        ContentBlock(kind=BlockKind.heading, section="summary", style="heading", runs=(TextRun("SUMMARY", "heading"),)),
        ContentBlock(kind=BlockKind.paragraph, section="summary", style="summary", runs=(TextRun("Hello.", "body"),)),
    ]

    artifact = assemble(blocks, "QA")
    document = _load(artifact.content)

    assert [p.text for p in document.paragraphs] == ["SUMMARY", "Hello."]
    assert document.paragraphs[0].runs[0].font.size.pt == 12
