from __future__ import annotations

from stylecraft.config import Settings

from .base import ConfigurationError, GenerativeProvider
from .gemini_provider import GeminiProvider

_PROVIDERS: dict[str, type[GenerativeProvider]] = {
    "gemini": GeminiProvider,
}


def get_provider(settings: Settings) -> GenerativeProvider:
    provider_key = settings.llm_provider.lower()
    if provider_key not in _PROVIDERS:
        raise ConfigurationError(f"Unsupported LLM provider: {provider_key}")
    return _PROVIDERS[provider_key](settings)
