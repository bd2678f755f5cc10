from __future__ import annotations

import io
import json
from urllib.error import HTTPError, URLError

import pytest

from libs.core import llm_provider as llm_provider_module
from libs.core.llm_provider import (
    ChatCompletionsProvider,
    LLMProviderError,
    MockLLMProvider,
    resolve_provider,
)


class _FakeHTTPResponse:
    def __init__(self, payload: dict) -> None:
        self._raw = json.dumps(payload).encode("utf-8")

    def read(self) -> bytes:
        return self._raw

    def __enter__(self) -> "_FakeHTTPResponse":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        return False


def _success_payload(text: str = '{"ok":true}') -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}


def test_chat_completions_provider_sends_sampling_settings(monkeypatch) -> None:
    captured: list[dict] = []

    def _fake_urlopen(request, timeout=0):  # type: ignore[no-untyped-def]
        captured.append(
            {
                "url": request.full_url,
                "body": json.loads(request.data.decode("utf-8")),
                "auth": request.get_header("Authorization"),
                "timeout": timeout,
            }
        )
        return _FakeHTTPResponse(_success_payload())

    monkeypatch.setattr(llm_provider_module, "urlopen", _fake_urlopen)

    provider = ChatCompletionsProvider(
        api_key="test-key",
        model="llama-3.1-8b-instant",
        base_url="https://api.groq.com/openai/",
        temperature=0.7,
        top_p=0.9,
        max_tokens_cap=2048,
        timeout_s=12.0,
    )
    response = provider.generate("hello", max_tokens=900)

    assert response.content == '{"ok":true}'
    assert len(captured) == 1
    call = captured[0]
    assert call["url"] == "https://api.groq.com/openai/v1/chat/completions"
    assert call["auth"] == "Bearer test-key"
    assert call["timeout"] == 12.0
    assert call["body"]["model"] == "llama-3.1-8b-instant"
    assert call["body"]["messages"] == [{"role": "user", "content": "hello"}]
    assert call["body"]["temperature"] == 0.7
    assert call["body"]["top_p"] == 0.9
    assert call["body"]["max_tokens"] == 900


def test_chat_completions_provider_caps_max_tokens(monkeypatch) -> None:
    captured: list[dict] = []

    def _fake_urlopen(request, timeout=0):  # type: ignore[no-untyped-def]
        captured.append(json.loads(request.data.decode("utf-8")))
        return _FakeHTTPResponse(_success_payload())

    monkeypatch.setattr(llm_provider_module, "urlopen", _fake_urlopen)

    provider = ChatCompletionsProvider(api_key="k", model="m", max_tokens_cap=2048)
    provider.generate("hello", max_tokens=5000)
    provider.generate("hello")

    assert captured[0]["max_tokens"] == 2048
    assert captured[1]["max_tokens"] == 2048
    assert "temperature" not in captured[0]


def test_chat_completions_provider_wraps_http_errors(monkeypatch) -> None:
    def _fake_urlopen(request, timeout=0):  # type: ignore[no-untyped-def]
        raise HTTPError(
            url="https://api.groq.com/openai/v1/chat/completions",
            code=429,
            msg="Too Many Requests",
            hdrs=None,
            fp=io.BytesIO(b'{"error":{"message":"rate limited"}}'),
        )

    monkeypatch.setattr(llm_provider_module, "urlopen", _fake_urlopen)

    provider = ChatCompletionsProvider(api_key="k", model="m")
    with pytest.raises(LLMProviderError) as exc_info:
        provider.generate("hello")
    assert "429" in str(exc_info.value)
    assert "rate limited" in str(exc_info.value)


def test_chat_completions_provider_wraps_connection_errors(monkeypatch) -> None:
    def _fake_urlopen(request, timeout=0):  # type: ignore[no-untyped-def]
        raise URLError("connection refused")

    monkeypatch.setattr(llm_provider_module, "urlopen", _fake_urlopen)

    provider = ChatCompletionsProvider(api_key="k", model="m")
    with pytest.raises(LLMProviderError):
        provider.generate("hello")


def test_chat_completions_provider_rejects_empty_output(monkeypatch) -> None:
    monkeypatch.setattr(
        llm_provider_module,
        "urlopen",
        lambda request, timeout=0: _FakeHTTPResponse(_success_payload("   ")),
    )

    provider = ChatCompletionsProvider(api_key="k", model="m")
    with pytest.raises(LLMProviderError) as exc_info:
        provider.generate("hello")
    assert "empty output" in str(exc_info.value)


def test_resolve_provider_defaults_to_mock() -> None:
    provider = resolve_provider("mock")
    assert isinstance(provider, MockLLMProvider)
    assert provider.generate("anything").content == "Mock response"


def test_resolve_provider_uses_groq_defaults() -> None:
    provider = resolve_provider("groq", api_key="k", top_p=0.9)
    assert isinstance(provider, ChatCompletionsProvider)
    assert provider.model == "llama-3.1-8b-instant"
    assert provider.base_url == "https://api.groq.com/openai"
    assert provider.top_p == 0.9


def test_resolve_provider_requires_api_key() -> None:
    with pytest.raises(ValueError):
        resolve_provider("openai", api_key="")
