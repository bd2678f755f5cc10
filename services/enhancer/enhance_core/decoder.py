from __future__ import annotations

import json
import re
from typing import Callable

from pydantic import ValidationError

from libs.core import logging as core_logging, prompts

from .errors import DecodeError
from .models import ResumeDocument

LOGGER = core_logging.get_logger("enhancer")

_CODE_FENCE = re.compile(r"```(?:json)?", re.I)


def extract_json(text: str) -> str:
    if not text:
        return ""
    cleaned = _CODE_FENCE.sub("", text).strip()
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end == -1 or end <= start:
        return ""
    return cleaned[start : end + 1]


def parse_document(text: str) -> ResumeDocument:
    json_text = extract_json(text)
    if not json_text:
        raise DecodeError("invalid_json:no_object_found")
    try:
        payload = json.loads(json_text)
    except json.JSONDecodeError as exc:
        raise DecodeError(f"invalid_json:{exc}") from exc
    if not isinstance(payload, dict):
        raise DecodeError("invalid_json:not_an_object")
    try:
        return ResumeDocument.model_validate(payload)
    except ValidationError as exc:
        raise DecodeError(f"invalid_document:{exc.error_count()}_errors") from exc


def decode(model_text: str, complete: Callable[[str], str]) -> ResumeDocument:
    """Parse the model's structured payload, asking ``complete`` for at most one repair."""
    try:
        return parse_document(model_text)
    except DecodeError as exc:
        LOGGER.warning("decode_repair_requested", error=exc.detail, response_chars=len(model_text or ""))

    repaired_text = complete(prompts.json_repair_prompt(model_text or ""))
    try:
        return parse_document(repaired_text)
    except DecodeError as exc:
        LOGGER.warning("decode_failed", error=exc.detail, response_chars=len(repaired_text or ""))
        raise DecodeError(f"unrecoverable_payload:{exc.detail}") from exc
