from __future__ import annotations

import time
from typing import Any, Dict, List

from libs.core import llm_provider, logging as core_logging, prompts

from . import config, decoder, normalizer, roadmap, verifier
from .assembler import DocumentArtifact, assemble
from .errors import AIServiceError, EnhanceError, InvalidInputError
from .honors import split_honors_track
from .models import EnhancementRequest, ResumeDocument
from .renderer import render

LOGGER = core_logging.get_logger("enhancer")

CHAT_HISTORY_LINES = 20


def require_text(value: Any, message: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(message)
    return value.strip()


def prepare_request(
    target_role: Any, raw_text: str | None, guidance_report: str | None = None
) -> EnhancementRequest:
    role = require_text(target_role, "Job role is required.")
    source = normalizer.normalize(raw_text)
    report = guidance_report.strip() if isinstance(guidance_report, str) else ""
    return EnhancementRequest(target_role=role, source=source, guidance_report=report or None)


def build_document(
    request: EnhancementRequest,
    provider: llm_provider.LLMProvider,
    *,
    honors_split: bool | None = None,
) -> ResumeDocument:
    prompt = prompts.resume_enhancement_prompt(
        request.target_role, request.source.text, request.guidance_report
    )
    model_text = _generate(provider, prompt, max_tokens=config.token_budget("enhance"))

    def repair(repair_prompt: str) -> str:
        return _generate(provider, repair_prompt, max_tokens=config.token_budget("repair"))

    document = verifier.verify(decoder.decode(model_text, repair), request.source)
    if honors_split is None:
        honors_split = config.honors_split_enabled()
    if honors_split:
        document = split_honors_track(document)
    return document


def enhance_resume(
    target_role: Any,
    raw_text: str | None,
    provider: llm_provider.LLMProvider,
    *,
    guidance_report: str | None = None,
    honors_split: bool | None = None,
) -> DocumentArtifact:
    """Run normalize, decode, verify, render and assemble for one uploaded resume.

    Source text that is too short fails with EmptySourceError before any model call.
    """
    request = prepare_request(target_role, raw_text, guidance_report)
    document = build_document(request, provider, honors_split=honors_split)
    return assemble(render(document, request.target_role), request.target_role)


def analyze_resume(target_role: Any, raw_text: str | None, provider: llm_provider.LLMProvider) -> str:
    role = require_text(target_role, "Job role is required.")
    source = normalizer.normalize(raw_text)
    prompt = prompts.resume_analysis_prompt(role, source.text)
    return _generate(provider, prompt, max_tokens=config.token_budget("analysis"))


def recent_conversation(previous_conversation: Any, limit: int = CHAT_HISTORY_LINES) -> str:
    if not isinstance(previous_conversation, str):
        return ""
    lines = [line for line in previous_conversation.split("\n") if line.strip()]
    return "\n".join(lines[-limit:])


def career_chat(
    current_query: Any, previous_conversation: Any, provider: llm_provider.LLMProvider
) -> str:
    query = require_text(current_query, "Query is required.")
    prompt = prompts.career_chat_prompt(query, recent_conversation(previous_conversation))
    return _generate(provider, prompt, max_tokens=config.token_budget("chat"))


def generate_roadmap(target_role: Any, provider: llm_provider.LLMProvider) -> Dict[str, Any]:
    role = require_text(target_role, "Job role is required.")
    response = _generate(provider, prompts.roadmap_prompt(role), max_tokens=config.token_budget("roadmap"))
    steps = roadmap.parse_roadmap(response)
    if not steps:
        LOGGER.warning("roadmap_unparsed", response_chars=int(len(response)))
        return {"parsedData": [], "rawResponse": roadmap.clean_roadmap_text(response)}
    parsed: List[Dict[str, Any]] = [step.model_dump(by_alias=True) for step in steps]
    return {"parsedData": parsed}


def _provider_model(provider: Any) -> str:
    model = getattr(provider, "model", None)
    if isinstance(model, str) and model.strip():
        return model.strip()
    return ""


def _generate(provider: Any, prompt: str, *, max_tokens: int | None = None) -> str:
    started_at = time.monotonic()
    try:
        response = provider.generate(prompt, max_tokens=max_tokens)
    except EnhanceError:
        raise
    except Exception as exc:  # noqa: BLE001
        LOGGER.warning(
            "llm_generate_failed",
            provider_type=provider.__class__.__name__,
            provider_model=_provider_model(provider),
            prompt_chars=int(len(prompt)),
            duration_ms=int(max(0.0, time.monotonic() - started_at) * 1000),
            error=str(exc),
        )
        raise AIServiceError(str(exc)) from exc
    LOGGER.info(
        "llm_generate_finished",
        provider_type=provider.__class__.__name__,
        provider_model=_provider_model(provider),
        prompt_chars=int(len(prompt)),
        duration_ms=int(max(0.0, time.monotonic() - started_at) * 1000),
    )
    return getattr(response, "content", "") or ""
