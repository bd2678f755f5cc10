"""Education post-pass that lifts an "Honors in X" mention into its own entry."""

from __future__ import annotations

import re

from libs.core import logging as core_logging

from .models import EducationEntry, ResumeDocument

LOGGER = core_logging.get_logger("enhancer")

_HONORS = re.compile(r"Honou?rs?\s+in\s+([^,;()]+?)(?:\s*\((\d{4})\)|\s*(?=[,;(]|$))", re.I)
_HONORS_CREDENTIAL = re.compile(r"honou?rs", re.I)
_CGPA = re.compile(r"(\d+(?:\.\d+)?)\s*CGPA", re.I)
_SGPA = re.compile(r"(\d+(?:\.\d+)?)\s*SGPA", re.I)
_SGPA_PHRASE = re.compile(r"(?:\bwith\s+)?\d+(?:\.\d+)?\s*SGPA", re.I)
_COMMA_RUNS = re.compile(r"\s*[,;]\s*(?:[,;]\s*)*")


def split_honors_track(document: ResumeDocument) -> ResumeDocument:
    """Return a copy with the first honors-track mention split into its own entry.

    The primary entry keeps its CGPA figure; an SGPA figure moves to the honors
    entry.  Documents that already list an honors credential come back as-is.
    """
    if any(_HONORS_CREDENTIAL.search(entry.credential) for entry in document.education):
        return document
    for index, entry in enumerate(document.education):
        match = _HONORS.search(entry.details)
        if match is None:
            continue
        result = document.model_copy(deep=True)
        primary = result.education[index]
        sgpa = _SGPA.search(entry.details)
        honors = EducationEntry(
            credential=f"Honors in {match.group(1).strip()}",
            institution=primary.institution,
            period=match.group(2) or primary.period,
            details=f"{sgpa.group(1)} SGPA" if sgpa else "",
        )
        primary.details = _primary_details(entry.details)
        result.education.insert(index + 1, honors)
        LOGGER.info("honors_track_split", position=index + 1)
        return result
    return document


def _primary_details(details: str) -> str:
    cgpa = _CGPA.search(details)
    if cgpa:
        return f"{cgpa.group(1)} CGPA"
    remaining = _SGPA_PHRASE.sub("", _HONORS.sub("", details, count=1))
    remaining = _COMMA_RUNS.sub(", ", remaining)
    return remaining.strip(" ,;")
