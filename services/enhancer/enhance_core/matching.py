from __future__ import annotations

import re
from typing import FrozenSet

_MARKUP_TAGS = re.compile(r"\[/?ADDED\]", re.I)
IN_PROGRESS_MARKER = re.compile(r"\s*\(in-progr?ess\)", re.I)
_SLASH_SPACING = re.compile(r"\s*/\s*")
_COMMA_SPACING = re.compile(r"\s*,\s*")
_WHITESPACE = re.compile(r"\s+")
_NON_ALNUM = re.compile(r"[^a-z0-9]")
_TRAILING_URL_PUNCT = re.compile(r"[)\],.;/]+$")
_URL_SCHEME = re.compile(r"^https?://", re.I)
_URL_WWW = re.compile(r"^www\.", re.I)
_URL_PATTERN = re.compile(
    r"\b(?:https?://)?(?:www\.)?[a-z0-9.-]+\."
    r"(?:com|in|org|net|io|ai|dev|app|edu|gov|co|us)"
    r"(?![a-z0-9-])(?:/[^\s)>,]*)?",
    re.I,
)


def strip_markup(value: str) -> str:
    return IN_PROGRESS_MARKER.sub("", _MARKUP_TAGS.sub("", value or ""))


def normalize_for_match(value: str) -> str:
    text = (value or "").lower()
    text = _SLASH_SPACING.sub("/", text)
    text = _COMMA_SPACING.sub(",", text)
    return _WHITESPACE.sub(" ", text).strip()


def normalize_loose(value: str) -> str:
    return _NON_ALNUM.sub("", (value or "").lower())


def normalize_url(value: str) -> str:
    cleaned = strip_markup(value or "").strip()
    cleaned = _TRAILING_URL_PUNCT.sub("", cleaned)
    url = _URL_SCHEME.sub("", cleaned.lower())
    return _URL_WWW.sub("", url)


def extract_allowed_urls(text: str) -> FrozenSet[str]:
    found = set()
    for match in _URL_PATTERN.finditer(text or ""):
        normalized = normalize_url(match.group(0))
        if normalized:
            found.add(normalized)
    return frozenset(found)
