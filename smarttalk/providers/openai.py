from typing import Any, Dict, Optional, Tuple

from smarttalk.providers.base import BaseProvider


class OpenAIProvider(BaseProvider):
    """OpenAI chat completions API, single user message."""

    name = "OpenAI"

    def build_request(self, prompt: str, model: str) -> Tuple[str, Dict[str, str], Dict[str, Any]]:
        url = f"{self.base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": self.generation_settings["max_output_tokens"],
            "temperature": self.generation_settings["temperature"],
        }
        return url, headers, payload

    def extract_text(self, data: Dict[str, Any]) -> Optional[str]:
        choices = data.get("choices") or []
        if not choices:
            return None
        return (choices[0].get("message") or {}).get("content")
