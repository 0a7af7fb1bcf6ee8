# core/clients/moderation.py
import logging
from core.errors import ExternalServiceError
from .gemini import GeminiClient

logger = logging.getLogger(__name__)

MODERATION_PROMPT = """You are moderating a book discussion forum.
Classify the following content as SAFE or UNSAFE.
Only return SAFE or UNSAFE.

Content to moderate:
{content}"""

class ModerationClient(GeminiClient):
    """Classifies user text as SAFE or UNSAFE."""
    service_name = "Moderation service"

    def classify(self, content: str) -> str:
        """Return the raw model verdict, upper-cased."""
        text = self.generate(MODERATION_PROMPT.format(content=content), temperature=0.0, max_output_tokens=16)
        return text.strip().upper()

    def is_flagged(self, content: str) -> bool:
        """Best-effort check; fails open (unflagged) when the service is unusable."""
        if not self.api_key:
            logger.warning("GEMINI_API_KEY is not set, skipping moderation")
            return False
        try:
            return self.classify(content) != "SAFE"
        except ExternalServiceError as e:
            logger.error(f"Moderation failed, allowing content: {e}")
            return False
