# core/clients/gemini.py
import logging
from typing import Optional
from core.config import get_settings
from core.errors import ExternalServiceError
from core.utils.http import ServiceClient

logger = logging.getLogger(__name__)

class GeminiClient(ServiceClient):
    """Text generation with the Gemini generateContent endpoint."""
    service_name = "AI service"
    base_url = "https://generativelanguage.googleapis.com/v1beta"

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        settings = get_settings()
        self.api_key = api_key if api_key is not None else settings.gemini_api_key
        self.model = model or settings.gemini_model

    def generate(self, prompt: str, temperature: float = 0.7, max_output_tokens: int = 1024) -> str:
        """Return the text of the first candidate.

        Raises:
            ExternalServiceError: when the key is missing, the call fails or
                the reply carries no text
        """
        if not self.api_key:
            raise ExternalServiceError(self.service_name, f"{self.service_name} is not configured")
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": temperature, "maxOutputTokens": max_output_tokens},
        }
        data = self.request_json(
            "POST",
            f"/models/{self.model}:generateContent",
            params={"key": self.api_key},
            json=body
        )
        try:
            return data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            logger.error(f"{self.service_name} reply had no text: {str(data)[:500]}")
            raise ExternalServiceError(self.service_name, f"{self.service_name} returned no content")
