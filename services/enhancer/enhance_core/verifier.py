"""Provenance tagging and link sanitising for decoded resume documents.

Catalog-like values (skills, certification names, project names and
technologies, extra-section entries) are traced back to the source text and
tagged ``verified`` or ``added``.  Prose (summary, achievements, project
descriptions, education details) is cleaned but never tagged: rewritten
prose cannot be validated by substring tests.

Every link-bearing field is checked against the allowed-URL set mined from
the source text.  A rejected link is blanked, never repaired.
"""

from __future__ import annotations

import re
from typing import Dict, List

from libs.core import logging as core_logging

from .matching import normalize_for_match, normalize_loose, normalize_url, strip_markup
from .models import (
    Identity,
    Link,
    Provenance,
    ResumeDocument,
    SourceText,
    TaggedText,
)

LOGGER = core_logging.get_logger("enhancer")

_DRIVE_PATH = re.compile(r"^[a-zA-Z]:[\\/]")
_WHITESPACE = re.compile(r"\s")
_REPEATED_SPACES = re.compile(r" {2,}")
_GLUED_WORDS = re.compile(r"([a-z])([A-Z])")
_HTTP_SCHEME = re.compile(r"^http://", re.I)
_HTTPS_SCHEME = re.compile(r"^https://", re.I)
_PHONE_SHAPE = re.compile(r"^[0-9+()\-./\s]+$")
_MAILTO = re.compile(r"^mailto:", re.I)


def is_traceable(value: str, source: SourceText) -> bool:
    normalized = normalize_for_match(strip_markup(value))
    if not normalized:
        return False
    if normalized in source.comparison:
        return True
    loose = normalize_loose(normalized)
    if not loose:
        return False
    return loose in source.loose


def link_rejection_reason(value: str) -> str | None:
    if not value:
        return "empty"
    if _WHITESPACE.search(value):
        return "whitespace"
    if _DRIVE_PATH.match(value):
        return "drive_path"
    if "\\" in value:
        return "backslash"
    if value.lower().startswith("file:"):
        return "file_scheme"
    return None


def to_https(value: str) -> str:
    if _HTTPS_SCHEME.match(value):
        return value
    if _HTTP_SCHEME.match(value):
        return _HTTP_SCHEME.sub("https://", value)
    return f"https://{value}"


def verify_link(link: Link, source: SourceText, *, field: str) -> Link:
    """Return the link with ``text`` kept only when the source vouches for it.

    ``href`` is set only for allowed-URL members; a value accepted because it is
    quoted verbatim in the source is kept as plain text.
    """
    value = _clean(link.text)
    reason = link_rejection_reason(value)
    if reason is None:
        normalized = normalize_url(value)
        if normalized and normalized in source.allowed_urls:
            return Link(text=value, href=to_https(value.rstrip(").,;]")))
        if is_traceable(value, source):
            return Link(text=value, href="")
        reason = "not_in_source"
    if value:
        LOGGER.info("url_rejected", field=field, reason=reason)
    return Link()


def verify(document: ResumeDocument, source: SourceText) -> ResumeDocument:
    tagged = document.model_copy(deep=True)
    counts = {"verified": 0, "added": 0}

    def tag(item: TaggedText) -> TaggedText:
        text = _clean(item.text)
        provenance = Provenance.verified if is_traceable(text, source) else Provenance.added
        counts[provenance.value] += 1
        return TaggedText(text=text, provenance=provenance)

    def tag_all(items: List[TaggedText]) -> List[TaggedText]:
        return [tag(item) for item in items if _clean(item.text)]

    tagged.identity = _verify_identity(tagged.identity, source)
    tagged.summary = _clean(tagged.summary)

    if isinstance(tagged.skills, dict):
        tagged.skills = {category: tag_all(items) for category, items in tagged.skills.items()}
    else:
        tagged.skills = tag_all(tagged.skills)

    for role in tagged.experience:
        role.organization = _clean(role.organization)
        role.title = _clean(role.title)
        role.period = _clean(role.period)
        role.achievements = [text for text in map(_clean, role.achievements) if text]

    for entry in tagged.education:
        entry.credential = _clean(entry.credential)
        entry.institution = _clean(entry.institution)
        entry.period = _clean(entry.period)
        entry.details = _clean(entry.details)

    for index, project in enumerate(tagged.projects):
        if _clean(project.name.text):
            project.name = tag(project.name)
        project.url = verify_link(project.url, source, field=f"projects[{index}].url")
        project.description = _clean(project.description)
        project.technologies = tag_all(project.technologies)
        project.highlights = [text for text in map(_clean, project.highlights) if text]

    tagged.certifications = [cert for cert in tagged.certifications if _clean(cert.name.text)]
    for index, cert in enumerate(tagged.certifications):
        cert.name = tag(cert.name)
        cert.url = verify_link(cert.url, source, field=f"certifications[{index}].url")

    extras: Dict[str, List[TaggedText]] = {}
    for category, items in tagged.extras.items():
        entries = tag_all(items)
        if entries:
            extras[category] = entries
    tagged.extras = extras

    LOGGER.info("provenance_tagged", verified=counts["verified"], added=counts["added"])
    return tagged


def _verify_identity(identity: Identity, source: SourceText) -> Identity:
    name = _GLUED_WORDS.sub(r"\1 \2", _clean(identity.name))
    return Identity(
        name=_REPEATED_SPACES.sub(" ", name).strip(),
        email=_verify_email(identity.email),
        phone=_verify_phone(identity.phone),
        location=_clean(identity.location),
        linkedin=verify_link(identity.linkedin, source, field="identity.linkedin"),
        github=verify_link(identity.github, source, field="identity.github"),
        portfolio=verify_link(identity.portfolio, source, field="identity.portfolio"),
    )


def _verify_email(value: str) -> str:
    email = _MAILTO.sub("", _clean(value))
    if "@" not in email or _WHITESPACE.search(email):
        return ""
    return email


def _verify_phone(value: str) -> str:
    phone = _clean(value)
    if not phone or not _PHONE_SHAPE.match(phone) or not any(ch.isdigit() for ch in phone):
        return ""
    return phone


def _clean(value: str) -> str:
    return _REPEATED_SPACES.sub(" ", strip_markup(value or "")).strip()
