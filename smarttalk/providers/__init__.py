from .base import BaseProvider, ProviderError
from .google import GeminiProvider
from .openai import OpenAIProvider
from .cohere import CohereProvider
from .fallback_manager import (
    AllProvidersFailedError,
    GenerationResult,
    ProviderFallbackManager,
    build_fallback_manager,
)
from .streamer import ChunkStreamer

__all__ = [
    "BaseProvider",
    "ProviderError",
    "GeminiProvider",
    "OpenAIProvider",
    "CohereProvider",
    "AllProvidersFailedError",
    "GenerationResult",
    "ProviderFallbackManager",
    "build_fallback_manager",
    "ChunkStreamer",
]
