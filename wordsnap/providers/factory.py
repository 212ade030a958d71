from __future__ import annotations

from wordsnap.config import Settings
from wordsnap.providers.base import VisionProvider


def build_provider(s: Settings) -> VisionProvider:
    if s.llm_provider == "openai":
        from wordsnap.providers.llm_openai import OpenAIProvider
        return OpenAIProvider(model=s.llm_model)
    elif s.llm_provider == "ollama":
        from wordsnap.providers.llm_ollama import OllamaProvider
        return OllamaProvider(base_url=s.ollama_url, model=s.llm_model)
    elif s.llm_provider == "anthropic":
        from wordsnap.providers.llm_anthropic import AnthropicProvider
        return AnthropicProvider(model=s.llm_model)
    raise ValueError(f"Unknown LLM provider: {s.llm_provider}")
