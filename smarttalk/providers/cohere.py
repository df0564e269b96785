from typing import Any, Dict, Optional, Tuple

from smarttalk.providers.base import BaseProvider


class CohereProvider(BaseProvider):
    """Cohere V1 chat API.

    V1 takes a single `message` string and answers with a flat `text` field,
    unlike V2 which mirrors the OpenAI message list.
    """

    name = "Cohere"

    def build_request(self, prompt: str, model: str) -> Tuple[str, Dict[str, str], Dict[str, Any]]:
        url = f"{self.base_url}/chat"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        payload = {
            "model": model,
            "message": prompt,
            "max_tokens": self.generation_settings["max_output_tokens"],
            "temperature": self.generation_settings["temperature"],
        }
        return url, headers, payload

    def extract_text(self, data: Dict[str, Any]) -> Optional[str]:
        return data.get("text")
