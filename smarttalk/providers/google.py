from typing import Any, Dict, Optional, Tuple

from smarttalk.providers.base import BaseProvider


class GeminiProvider(BaseProvider):
    """Google Gemini `generateContent` API."""

    name = "Gemini"

    def build_request(self, prompt: str, model: str) -> Tuple[str, Dict[str, str], Dict[str, Any]]:
        url = f"{self.base_url}/models/{model}:generateContent"
        headers = {"x-goog-api-key": self.api_key, "Content-Type": "application/json"}
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.generation_settings["temperature"],
                "maxOutputTokens": self.generation_settings["max_output_tokens"],
            },
        }
        return url, headers, payload

    def extract_text(self, data: Dict[str, Any]) -> Optional[str]:
        candidates = data.get("candidates") or []
        if not candidates:
            return None
        parts = (candidates[0].get("content") or {}).get("parts") or []
        if not parts:
            return None
        return parts[0].get("text")
