from __future__ import annotations

from .base import ConfigurationError, GenerationError, GenerativeProvider, ImageNotProducedError
from .registry import get_provider

__all__ = [
    "ConfigurationError",
    "GenerationError",
    "GenerativeProvider",
    "ImageNotProducedError",
    "get_provider",
]
