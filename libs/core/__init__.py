__all__ = [
    "expiring_cache",
    "llm_provider",
    "logging",
    "prompts",
]
