import asyncio
import logging
from typing import Dict, List, Optional, Sequence, Type

import httpx
from opentelemetry import trace
from pydantic import BaseModel

from smarttalk.providers.base import BaseProvider, ProviderError
from smarttalk.providers.cohere import CohereProvider
from smarttalk.providers.google import GeminiProvider
from smarttalk.providers.openai import OpenAIProvider
from smarttalk.providers.utils.formatting import clean_markdown_formatting

logger = logging.getLogger("SmartTalkAI")
tracer = trace.get_tracer(__name__)

AUTO_MODEL = "auto"

PROVIDER_CLASSES: Dict[str, Type[BaseProvider]] = {
    "gemini": GeminiProvider,
    "openai": OpenAIProvider,
    "cohere": CohereProvider,
}


class AllProvidersFailedError(Exception):
    """Every configured provider failed for one prompt."""

    def __init__(self, attempted: List[str], last_error: Optional[Exception]):
        self.attempted = attempted
        self.last_error = last_error
        last_message = str(last_error) if last_error else "no providers configured"
        super().__init__(
            f"All AI providers failed ({', '.join(attempted)}). Last error: {last_message}"
        )


class GenerationResult(BaseModel):
    content: str
    provider: str
    model: str


class ProviderFallbackManager:
    """Tries providers in a fixed priority order and returns the first success.

    The order is frozen at construction. Each call walks it from the first
    provider with its own cursor, so concurrent turns never affect each
    other's attempt sequence.
    """

    def __init__(self, providers: Sequence[BaseProvider], retry_delay: float = 0.5):
        self._providers = tuple(providers)
        self.retry_delay = retry_delay

    @property
    def providers(self) -> tuple:
        return self._providers

    def _resolve_model(self, provider: BaseProvider, requested_model: Optional[str]) -> str:
        if requested_model and requested_model != AUTO_MODEL:
            return requested_model
        return provider.default_model

    async def generate(self, prompt: str, requested_model: Optional[str] = None) -> GenerationResult:
        attempted: List[str] = []
        last_error: Optional[Exception] = None
        total = len(self._providers)

        for index in range(total):
            provider = self._providers[index]
            attempted.append(provider.name)
            model = self._resolve_model(provider, requested_model)

            with tracer.start_as_current_span("provider.generate") as span:
                span.set_attribute("provider.name", provider.name)
                span.set_attribute("provider.model", model)
                span.set_attribute("provider.attempt", index + 1)
                try:
                    logger.info(f"Attempting provider: {provider.name} ({index + 1}/{total}), model '{model}'")
                    raw = await provider.generate(prompt, model)
                    content = clean_markdown_formatting(raw)
                    if not content or not content.strip():
                        raise ProviderError(f"Empty response from {provider.name}")
                    logger.info(f"Success with {provider.name}")
                    return GenerationResult(content=content, provider=provider.name, model=model)
                except ProviderError as e:
                    span.set_attribute("provider.failed", True)
                    logger.warning(f"PROVIDER [{provider.name.upper()}] failed: {e}")
                    last_error = e

            if index < total - 1:
                logger.info("Falling back to next provider...")
                await asyncio.sleep(self.retry_delay)

        raise AllProvidersFailedError(attempted, last_error)


def build_fallback_manager(config: dict, http_client: Optional[httpx.AsyncClient] = None) -> ProviderFallbackManager:
    """Creates the provider adapters from config, in the configured priority order."""
    providers_config = config.get("providers", {})
    fallback_settings = config.get("fallback_settings", {})
    generation_settings = config.get("generation_settings")
    timeout = fallback_settings.get("request_timeout_seconds", 60.0)

    providers = []
    for key in fallback_settings.get("order", list(PROVIDER_CLASSES)):
        provider_class = PROVIDER_CLASSES.get(key)
        settings = providers_config.get(key)
        if not provider_class or not settings:
            logger.warning(f"Unknown provider '{key}' in fallback order. Skipping.")
            continue
        providers.append(
            provider_class(
                api_key=settings.get("api_key"),
                base_url=settings["base_url"],
                default_model=settings["default_model"],
                http_client=http_client,
                generation_settings=generation_settings,
                timeout=timeout,
            )
        )

    logger.info(f"Provider fallback order: {[p.name for p in providers]}")
    return ProviderFallbackManager(
        providers, retry_delay=fallback_settings.get("retry_delay_seconds", 0.5)
    )
