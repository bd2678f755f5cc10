from __future__ import annotations

import pytest

from libs.core.expiring_cache import InMemoryExpiringCache
from libs.core.llm_provider import ChatCompletionsProvider, MockLLMProvider
from services.enhancer.enhance_core import config


def test_token_budgets_default_and_override(monkeypatch) -> None:
    monkeypatch.delenv("ENHANCE_MAX_TOKENS", raising=False)
    monkeypatch.setenv("CHAT_MAX_TOKENS", "not-a-number")
    monkeypatch.setenv("ROADMAP_MAX_TOKENS", "1200")

    assert config.token_budget("enhance") == 2000
    assert config.token_budget("chat") == 600
    assert config.token_budget("roadmap") == 1200


@pytest.mark.parametrize("value, expected", [("true", True), ("0", False), ("off", False), ("", True)])
def test_honors_split_toggle(monkeypatch, value: str, expected: bool) -> None:
    monkeypatch.setenv("HONORS_SPLIT_ENABLED", value)
    assert config.honors_split_enabled() is expected


def test_create_provider_from_env_reads_groq_settings(monkeypatch) -> None:
    monkeypatch.setenv("LLM_PROVIDER", "groq")
    monkeypatch.delenv("LLM_API_KEY", raising=False)
    monkeypatch.setenv("GROQ_API_KEY", "gsk-test")
    monkeypatch.setenv("LLM_TEMPERATURE", "0.2")
    monkeypatch.delenv("LLM_TOP_P", raising=False)
    monkeypatch.delenv("LLM_MAX_TOKENS_CAP", raising=False)

    provider = config.create_provider_from_env()

    assert isinstance(provider, ChatCompletionsProvider)
    assert provider.api_key == "gsk-test"
    assert provider.model == "llama-3.1-8b-instant"
    assert provider.temperature == 0.2
    assert provider.top_p == 0.9
    assert provider.max_tokens_cap == 2048


def test_create_provider_from_env_defaults_to_mock(monkeypatch) -> None:
    monkeypatch.delenv("LLM_PROVIDER", raising=False)
    assert isinstance(config.create_provider_from_env(), MockLLMProvider)


def test_cache_settings_from_env(monkeypatch) -> None:
    monkeypatch.setenv("CACHE_BACKEND", "memory")
    monkeypatch.setenv("CACHE_TTL_S", "120")
    monkeypatch.delenv("CACHE_SWEEP_INTERVAL_S", raising=False)
    monkeypatch.setenv("UPLOAD_MAX_BYTES", "bad")

    cache = config.create_cache_from_env()

    assert isinstance(cache, InMemoryExpiringCache)
    assert cache.ttl_s == 120
    assert config.cache_sweep_interval_s() == 120
    assert config.upload_max_bytes() == 10 * 1024 * 1024
