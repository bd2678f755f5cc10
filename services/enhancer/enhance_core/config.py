from __future__ import annotations

import os

from libs.core import expiring_cache, llm_provider

_DEFAULT_TEMPERATURE = 0.7
_DEFAULT_TOP_P = 0.9
_DEFAULT_TIMEOUT_S = 30.0
_DEFAULT_MAX_TOKENS_CAP = 2048
_DEFAULT_CACHE_TTL_S = 300.0
_DEFAULT_UPLOAD_MAX_BYTES = 10 * 1024 * 1024

_TOKEN_BUDGETS = {
    "enhance": ("ENHANCE_MAX_TOKENS", 2000),
    "repair": ("REPAIR_MAX_TOKENS", 1500),
    "analysis": ("ANALYSIS_MAX_TOKENS", 1500),
    "chat": ("CHAT_MAX_TOKENS", 600),
    "roadmap": ("ROADMAP_MAX_TOKENS", 900),
}
_API_KEY_VARS = {
    "openai": "OPENAI_API_KEY",
    "groq": "GROQ_API_KEY",
}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_optional_float(value: str | None) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _parse_optional_int(value: str | None) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _resolve_float(value: str | None, default: float) -> float:
    parsed = _parse_optional_float(value)
    return parsed if parsed is not None else default


def _resolve_int(value: str | None, default: int) -> int:
    parsed = _parse_optional_int(value)
    return parsed if parsed is not None else default


def token_budget(operation: str) -> int:
    env_var, default = _TOKEN_BUDGETS[operation]
    configured = _parse_optional_int(os.getenv(env_var))
    if configured is None or configured <= 0:
        return default
    return configured


def cache_ttl_s() -> float:
    return max(1.0, _resolve_float(os.getenv("CACHE_TTL_S"), _DEFAULT_CACHE_TTL_S))


def cache_sweep_interval_s() -> float:
    return max(1.0, _resolve_float(os.getenv("CACHE_SWEEP_INTERVAL_S"), cache_ttl_s()))


def upload_max_bytes() -> int:
    return _resolve_int(os.getenv("UPLOAD_MAX_BYTES"), _DEFAULT_UPLOAD_MAX_BYTES)


def honors_split_enabled() -> bool:
    value = os.getenv("HONORS_SPLIT_ENABLED", "true").strip().lower()
    return value not in _FALSE_VALUES


def create_provider_from_env() -> llm_provider.LLMProvider:
    name = os.getenv("LLM_PROVIDER", "mock").strip().lower()
    api_key = os.getenv("LLM_API_KEY") or os.getenv(_API_KEY_VARS.get(name, "LLM_API_KEY"), "")
    return llm_provider.resolve_provider(
        name,
        api_key=api_key,
        model=os.getenv("LLM_MODEL", ""),
        base_url=os.getenv("LLM_BASE_URL", ""),
        temperature=_resolve_float(os.getenv("LLM_TEMPERATURE"), _DEFAULT_TEMPERATURE),
        top_p=_resolve_float(os.getenv("LLM_TOP_P"), _DEFAULT_TOP_P),
        max_tokens_cap=_resolve_int(os.getenv("LLM_MAX_TOKENS_CAP"), _DEFAULT_MAX_TOKENS_CAP),
        timeout_s=_resolve_float(os.getenv("LLM_TIMEOUT_S"), _DEFAULT_TIMEOUT_S),
    )


def create_cache_from_env() -> expiring_cache.ExpiringCache:
    return expiring_cache.create_cache(
        os.getenv("CACHE_BACKEND", "memory"),
        ttl_s=cache_ttl_s(),
        redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
    )
