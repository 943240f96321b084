# ========================================
# services/gemini_service.py - Gemini integration
# ========================================

import google.generativeai as genai
from config import get_settings
from utils.logger import get_logger
from typing import Optional

logger = get_logger("GeminiService")


class GeminiService:
    def __init__(self):
        settings = get_settings()
        self.temperature = settings.llm_temperature
        self.max_tokens = settings.llm_max_tokens
        if settings.llm_api_key:
            genai.configure(api_key=settings.llm_api_key)
            self.model = genai.GenerativeModel(settings.llm_model)
            logger.info("Gemini service initialized")
        else:
            logger.warning("Gemini API key not configured; using fallback content")
            self.model = None

    @property
    def is_configured(self) -> bool:
        return self.model is not None

    async def generate_text(self, prompt: str, temperature: Optional[float] = None) -> Optional[str]:
        """Generate text from Gemini. Returns None when nothing usable came back."""
        if not self.model:
            return None

        try:
            response = await self.model.generate_content_async(
                prompt,
                generation_config={
                    "temperature": temperature if temperature is not None else self.temperature,
                    "max_output_tokens": self.max_tokens,
                }
            )
        except Exception as e:
            logger.error(f"Gemini generation error: {e}", exc_info=True)
            return None

        try:
            return response.text or None
        except ValueError:
            # .text raises when the candidate was blocked or empty
            finish = None
            candidates = getattr(response, "candidates", None) or []
            if candidates:
                finish = getattr(candidates[0], "finish_reason", None)
            logger.warning(f"Gemini returned no text. candidates={len(candidates)} finish_reason={finish}")
            return None
