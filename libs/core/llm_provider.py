from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

_DEFAULT_BASE_URLS = {
    "openai": "https://api.openai.com",
    "groq": "https://api.groq.com/openai",
}
_DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "groq": "llama-3.1-8b-instant",
}


@dataclass
class LLMResponse:
    content: str


class LLMProviderError(Exception):
    pass


class LLMProvider:
    def generate(
        self, prompt: str, max_tokens: Optional[int] = None
    ) -> LLMResponse:  # pragma: no cover - interface
        raise NotImplementedError


class MockLLMProvider(LLMProvider):
    def __init__(self, content: str = "Mock response") -> None:
        self.content = content

    def generate(self, prompt: str, max_tokens: Optional[int] = None) -> LLMResponse:
        return LLMResponse(content=self.content)


class ChatCompletionsProvider(LLMProvider):
    """Client for OpenAI-compatible ``/v1/chat/completions`` endpoints (OpenAI, Groq)."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "https://api.openai.com",
        temperature: Optional[float] = None,
        top_p: Optional[float] = None,
        max_tokens_cap: Optional[int] = None,
        timeout_s: float = 30.0,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature
        self.top_p = top_p
        self.max_tokens_cap = max_tokens_cap
        self.timeout_s = timeout_s

    def generate(self, prompt: str, max_tokens: Optional[int] = None) -> LLMResponse:
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
        }
        if self.temperature is not None:
            payload["temperature"] = self.temperature
        if self.top_p is not None:
            payload["top_p"] = self.top_p
        resolved_max_tokens = _cap_tokens(max_tokens, self.max_tokens_cap)
        if resolved_max_tokens is not None:
            payload["max_tokens"] = resolved_max_tokens
        request = Request(
            f"{self.base_url}/v1/chat/completions",
            data=json.dumps(payload).encode("utf-8"),
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            method="POST",
        )
        try:
            with urlopen(request, timeout=self.timeout_s) as response:
                body = response.read().decode("utf-8")
        except HTTPError as exc:
            detail = exc.read().decode("utf-8") if exc.fp else str(exc)
            raise LLMProviderError(f"completion API error ({exc.code}): {detail}") from exc
        except (URLError, TimeoutError) as exc:
            raise LLMProviderError(f"completion API connection error: {exc}") from exc
        try:
            data = json.loads(body)
        except json.JSONDecodeError as exc:
            raise LLMProviderError("completion API returned a non-JSON body") from exc
        text = _extract_message_text(data)
        if not text:
            raise LLMProviderError("completion API returned empty output")
        return LLMResponse(content=text)


def resolve_provider(
    provider_name: str,
    *,
    api_key: Optional[str] = None,
    model: Optional[str] = None,
    base_url: Optional[str] = None,
    temperature: Optional[float] = None,
    top_p: Optional[float] = None,
    max_tokens_cap: Optional[int] = None,
    timeout_s: Optional[float] = None,
) -> LLMProvider:
    name = (provider_name or "mock").strip().lower()
    if name in _DEFAULT_BASE_URLS:
        if not api_key:
            raise ValueError(f"an API key is required when LLM_PROVIDER={name}")
        return ChatCompletionsProvider(
            api_key=api_key,
            model=model or _DEFAULT_MODELS[name],
            base_url=base_url or _DEFAULT_BASE_URLS[name],
            temperature=temperature,
            top_p=top_p,
            max_tokens_cap=max_tokens_cap,
            timeout_s=timeout_s or 30.0,
        )
    return MockLLMProvider()


def _cap_tokens(requested: Optional[int], cap: Optional[int]) -> Optional[int]:
    if requested is None:
        return cap
    if cap is None:
        return requested
    return min(requested, cap)


def _extract_message_text(response: Dict[str, Any]) -> str:
    choices = response.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    message = choices[0].get("message") if isinstance(choices[0], dict) else None
    if not isinstance(message, dict):
        return ""
    content = message.get("content")
    return content.strip() if isinstance(content, str) else ""
