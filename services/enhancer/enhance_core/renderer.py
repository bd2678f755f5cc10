"""Turn a verified ResumeDocument into an ordered list of styled content blocks.

Provenance is read from the document, never re-derived.  Only runs whose value
is tagged ``added`` get the highlight colour; catalog lines are split at tag
boundaries so neighbouring verified items stay in the default colour.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .matching import IN_PROGRESS_MARKER
from .models import (
    CertificationEntry,
    EducationEntry,
    ExperienceEntry,
    Link,
    ProjectEntry,
    Provenance,
    ResumeDocument,
    TaggedText,
)
from .styles import ADDED_COLOR, LINK_COLOR, run_style

SEPARATOR = " | "
ITEM_SEPARATOR = ", "

_REPEATED_SPACES = re.compile(r" {2,}")
_WHITESPACE = re.compile(r"\s+")
_CAMEL_BOUNDARY = re.compile(r"([a-z])([A-Z])")
_WORD_SEPARATORS = re.compile(r"[_\-]+")


class BlockKind(str, Enum):
    heading = "heading"
    paragraph = "paragraph"
    bullet = "bullet"


@dataclass(frozen=True)
class TextRun:
    text: str
    style: str
    provenance: Optional[Provenance] = None
    href: str = ""

    @property
    def is_added(self) -> bool:
        return self.provenance == Provenance.added

    @property
    def color(self) -> str:
        if self.is_added:
            return ADDED_COLOR
        if self.href:
            return LINK_COLOR
        return run_style(self.style).color

    @property
    def underline(self) -> bool:
        return bool(self.href)


@dataclass(frozen=True)
class ContentBlock:
    kind: BlockKind
    section: str
    style: str
    runs: Tuple[TextRun, ...] = field(default_factory=tuple)

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)


def render(document: ResumeDocument, role: str) -> List[ContentBlock]:
    blocks: List[ContentBlock] = []
    blocks.extend(_identity_blocks(document))
    blocks.extend(_summary_blocks(document, role))
    blocks.extend(_skill_blocks(document))
    blocks.extend(_experience_blocks(document.experience))
    blocks.extend(_project_blocks(document.projects))
    blocks.extend(_education_blocks(document.education))
    blocks.extend(_certification_blocks(document.certifications))
    blocks.extend(_extras_blocks(document.extras))
    return blocks


def _identity_blocks(document: ResumeDocument) -> List[ContentBlock]:
    identity = document.identity
    blocks = [
        _paragraph("identity", "name", [TextRun(_clean(identity.name) or "[Your Name]", "name")])
    ]

    contact: List[TextRun] = []
    if identity.email:
        contact.append(TextRun(identity.email, "contact", href=f"mailto:{identity.email}"))
    if identity.phone:
        dial = _WHITESPACE.sub("", identity.phone)
        contact.append(TextRun(identity.phone, "contact", href=f"tel:{dial}"))
    if identity.location:
        contact.append(TextRun(_clean(identity.location), "contact"))
    if not contact:
        contact = [TextRun("[Email] | [Phone] | [Location]", "contact")]
    blocks.append(_paragraph("contact", "contact", _joined(contact, SEPARATOR, "contact")))

    links = [
        TextRun(link.text, "link", href=link.href)
        for link in (identity.linkedin, identity.github, identity.portfolio)
        if link.text
    ]
    if links:
        blocks.append(_paragraph("links", "links", _joined(links, SEPARATOR, "link")))
    return blocks


def _summary_blocks(document: ResumeDocument, role: str) -> List[ContentBlock]:
    summary = _clean(document.summary) or f"Motivated {role} with relevant experience and skills."
    return [
        _heading("summary", "PROFESSIONAL SUMMARY"),
        _paragraph("summary", "summary", [TextRun(summary, "body")]),
    ]


def _skill_blocks(document: ResumeDocument) -> List[ContentBlock]:
    blocks = [_heading("skills", "CORE COMPETENCIES")]
    if isinstance(document.skills, dict):
        groups = [(category, items) for category, items in document.skills.items()]
    else:
        groups = [("Skills", document.skills)]
    for category, items in groups:
        runs = _catalog_runs(items, "body")
        if runs:
            blocks.append(_paragraph("skills", "skills", [TextRun(f"{category}: ", "label"), *runs]))
    if len(blocks) == 1:
        blocks.append(
            _paragraph(
                "skills",
                "skills",
                [TextRun("Skills: ", "label"), TextRun("[Add relevant skills]", "body")],
            )
        )
    return blocks


def _experience_blocks(entries: Sequence[ExperienceEntry]) -> List[ContentBlock]:
    if not entries:
        return []
    blocks = [_heading("experience", "PROFESSIONAL EXPERIENCE")]
    for entry in entries:
        parts = [entry.organization or "[Company]", entry.title or "[Position]"]
        if entry.period:
            parts.append(entry.period)
        blocks.append(
            _paragraph("experience", "entry_title", [TextRun(_clean(SEPARATOR.join(parts)), "entry_title")])
        )
        blocks.extend(_bullets("experience", entry.achievements))
    return blocks


def _project_blocks(entries: Sequence[ProjectEntry]) -> List[ContentBlock]:
    if not entries:
        return []
    blocks = [_heading("projects", "KEY PROJECTS")]
    for project in entries:
        name = project.name if project.name.text else TaggedText(text="[Project Name]")
        blocks.append(
            _paragraph("projects", "entry_title", [_linked_run(name, project.url, "entry_title")])
        )
        if project.description:
            blocks.append(
                _paragraph("projects", "entry_detail", [TextRun(_clean(project.description), "detail")])
            )
        technologies = _catalog_runs(project.technologies, "detail_italic")
        if technologies:
            blocks.append(
                _paragraph(
                    "projects",
                    "entry_detail",
                    [TextRun("Technologies: ", "detail_italic"), *technologies],
                )
            )
        blocks.extend(_bullets("projects", project.highlights))
    return blocks


def _education_blocks(entries: Sequence[EducationEntry]) -> List[ContentBlock]:
    if not entries:
        return []
    blocks = [_heading("education", "EDUCATION")]
    for entry in entries:
        line = SEPARATOR.join(
            [entry.credential or "[Degree]", entry.institution or "[Institution]", entry.period or "[Year]"]
        )
        blocks.append(
            _paragraph("education", "education_title", [TextRun(_clean(line), "entry_title")])
        )
        if entry.details:
            blocks.append(
                _paragraph("education", "entry_detail", [TextRun(_clean(entry.details), "detail")])
            )
    return blocks


def _certification_blocks(entries: Sequence[CertificationEntry]) -> List[ContentBlock]:
    entries = [entry for entry in entries if entry.name.text]
    if not entries:
        return []
    blocks = [_heading("certifications", "CERTIFICATIONS")]
    for entry in entries:
        blocks.append(
            ContentBlock(
                kind=BlockKind.bullet,
                section="certifications",
                style="bullet",
                runs=(_linked_run(entry.name, entry.url, "detail"),),
            )
        )
    return blocks


def _extras_blocks(extras: Dict[str, List[TaggedText]]) -> List[ContentBlock]:
    lines = []
    for category, items in extras.items():
        runs = _catalog_runs(items, "detail")
        if runs:
            lines.append(
                _paragraph(
                    "extras", "extras", [TextRun(f"{_humanize(category)}: ", "detail_label"), *runs]
                )
            )
    if not lines:
        return []
    return [_heading("extras", "ADDITIONAL INFORMATION"), *lines]


def _catalog_runs(items: Iterable[TaggedText], style: str) -> List[TextRun]:
    runs: List[TextRun] = []
    for item in items:
        text = _clean(item.text)
        if not text:
            continue
        if runs:
            runs.append(TextRun(ITEM_SEPARATOR, style))
        runs.append(TextRun(text, style, provenance=item.provenance))
    return _merge_runs(runs)


def _merge_runs(runs: List[TextRun]) -> List[TextRun]:
    """Fold adjacent default-coloured runs so only tag boundaries split a line."""
    merged: List[TextRun] = []
    for run in runs:
        if merged and _mergeable(merged[-1], run):
            previous = merged.pop()
            provenance = previous.provenance or run.provenance
            run = TextRun(previous.text + run.text, run.style, provenance=provenance)
        merged.append(run)
    return merged


def _mergeable(left: TextRun, right: TextRun) -> bool:
    return (
        left.style == right.style
        and not left.href
        and not right.href
        and not left.is_added
        and not right.is_added
    )


def _linked_run(value: TaggedText, link: Link, style: str) -> TextRun:
    return TextRun(_clean(value.text), style, provenance=value.provenance, href=link.href)


def _joined(runs: List[TextRun], separator: str, style: str) -> List[TextRun]:
    joined: List[TextRun] = []
    for run in runs:
        if joined:
            joined.append(TextRun(separator, style))
        joined.append(run)
    return joined


def _bullets(section: str, lines: Iterable[str]) -> List[ContentBlock]:
    return [
        ContentBlock(
            kind=BlockKind.bullet,
            section=section,
            style="bullet",
            runs=(TextRun(_clean(line), "detail"),),
        )
        for line in lines
        if _clean(line)
    ]


def _heading(section: str, title: str) -> ContentBlock:
    return ContentBlock(
        kind=BlockKind.heading, section=section, style="heading", runs=(TextRun(title, "heading"),)
    )


def _paragraph(section: str, style: str, runs: List[TextRun]) -> ContentBlock:
    return ContentBlock(kind=BlockKind.paragraph, section=section, style=style, runs=tuple(runs))


def _humanize(category: str) -> str:
    words = _WORD_SEPARATORS.sub(" ", _CAMEL_BOUNDARY.sub(r"\1 \2", category)).strip()
    return words[:1].upper() + words[1:]


def _clean(text: str) -> str:
    return _REPEATED_SPACES.sub(" ", IN_PROGRESS_MARKER.sub("", text or "")).strip()
