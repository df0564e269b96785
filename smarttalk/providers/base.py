import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional, Tuple

import httpx

from smarttalk.config.settings import GENERATION_SETTINGS

logger = logging.getLogger("SmartTalkAI")


class ProviderError(Exception):
    """A single vendor call failed: not configured, bad status or unusable body."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class BaseProvider:
    """Relays one prompt to one vendor's completion API and returns plain text.

    Subclasses describe the vendor wire format through `build_request` and
    `extract_text`; the HTTP exchange and error mapping live here.
    """

    name: str = "base"

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str,
        default_model: str,
        http_client: Optional[httpx.AsyncClient] = None,
        generation_settings: Optional[Dict[str, Any]] = None,
        timeout: float = 60.0,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.default_model = default_model
        self.http_client = http_client
        self.generation_settings = generation_settings or dict(GENERATION_SETTINGS)
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @asynccontextmanager
    async def _get_http_client(self):
        """Yields the shared client if one was injected, otherwise a short-lived one.
        Does NOT close the client if it's shared.
        """
        if self.http_client:
            yield self.http_client
        else:
            async with httpx.AsyncClient() as client:
                yield client

    def build_request(self, prompt: str, model: str) -> Tuple[str, Dict[str, str], Dict[str, Any]]:
        """Returns (url, headers, json payload) for one completion call."""
        raise NotImplementedError

    def extract_text(self, data: Dict[str, Any]) -> Optional[str]:
        """Pulls the generated text out of the vendor response envelope."""
        raise NotImplementedError

    async def generate(self, prompt: str, model: Optional[str] = None) -> str:
        if not self.api_key:
            raise ProviderError(f"{self.name} API key not configured")

        use_model = model or self.default_model
        url, headers, payload = self.build_request(prompt, use_model)

        try:
            async with self._get_http_client() as client:
                response = await client.post(
                    url, json=payload, headers=headers, timeout=self.timeout
                )
        except httpx.HTTPError as e:
            raise ProviderError(f"{self.name} request failed: {e!r}") from e

        if response.is_error:
            raise ProviderError(
                f"{self.name} API error: {response.status_code} - {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(
                f"{self.name} returned a non-JSON body",
                status_code=response.status_code,
                body=response.text,
            ) from e

        try:
            text = self.extract_text(data) if isinstance(data, dict) else None
        except (AttributeError, KeyError, IndexError, TypeError) as e:
            raise ProviderError(
                f"Unexpected {self.name} response shape: {e!r}",
                status_code=response.status_code,
                body=response.text,
            ) from e

        if not isinstance(text, str) or not text:
            raise ProviderError(
                f"No content in {self.name} response",
                status_code=response.status_code,
                body=response.text,
            )

        logger.debug(f"[{self.name}] Generated {len(text)} characters with model '{use_model}'")
        return text
