from __future__ import annotations

import re

from libs.core import logging as core_logging

from .errors import EmptySourceError
from .models import SourceText

MIN_SOURCE_CHARS = 50
LOGGER = core_logging.get_logger("enhancer")

_LINE_BREAKS = re.compile(r"\r\n?")
_GLUED_WORDS = re.compile(r"([a-z])([A-Z])")
_TOKEN = re.compile(r"\S+")
_LINK_TOKEN = re.compile(r"(?:https?://|www\.|@|\.[a-z]{2,}/)", re.I)
_BLANK_LINE_RUNS = re.compile(r"\n{2,}")
_TAB_LIKE = re.compile(r"[\t\f\v]+")
_WIDE_SPACES = re.compile(r" {3,}")


def normalize_text(raw_text: str | None) -> str:
    if not raw_text:
        return ""
    text = _LINE_BREAKS.sub("\n", raw_text)
    text = _TOKEN.sub(_split_glued_words, text)
    text = _BLANK_LINE_RUNS.sub("\n", text)
    text = _TAB_LIKE.sub(" ", text)
    text = _WIDE_SPACES.sub("  ", text)
    return text.strip()


def _split_glued_words(match: re.Match[str]) -> str:
    token = match.group(0)
    # URLs and e-mail addresses keep their casing intact.
    if _LINK_TOKEN.search(token):
        return token
    return _GLUED_WORDS.sub(r"\1 \2", token)


def normalize(raw_text: str | None, min_chars: int = MIN_SOURCE_CHARS) -> SourceText:
    """Canonicalise extracted resume text; too little usable text is an error, not a default."""
    text = normalize_text(raw_text)
    if len(text) < min_chars:
        LOGGER.warning("source_rejected", chars=int(len(text)), min_chars=int(min_chars))
        raise EmptySourceError(f"source_text_too_short:{len(text)}")
    source = SourceText.from_text(text)
    LOGGER.info(
        "source_normalized",
        chars=int(len(text)),
        allowed_urls=int(len(source.allowed_urls)),
    )
    return source
