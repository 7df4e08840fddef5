"""
Google Gemini AI Wrapper - text-in/text-out access to the grading model.

No retries and no backoff: a failed call raises and the caller decides the
fallback grade.
"""

import asyncio
import logging
from typing import Optional

import google.generativeai as genai

from .config.settings import settings

logger = logging.getLogger(__name__)


class GeminiClient:
    """
    Thin async wrapper around ``genai.GenerativeModel``.

    The SDK call is blocking, so it runs in a worker thread and is bounded
    by ``timeout`` seconds.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        temperature: Optional[float] = None,
        max_output_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key or settings.GEMINI_API_KEY
        self.model_name = model_name or settings.GEMINI_MODEL
        self.temperature = settings.LLM_TEMPERATURE if temperature is None else temperature
        self.max_output_tokens = max_output_tokens or settings.LLM_MAX_OUTPUT_TOKENS
        self.timeout = timeout or settings.LLM_TIMEOUT
        self.model = None
        self._initialize()

    def _initialize(self):
        """Configure the SDK and build the model handle."""
        try:
            if self.api_key:
                genai.configure(api_key=self.api_key)
            self.model = genai.GenerativeModel(model_name=self.model_name)
        except Exception as e:
            logger.error(f"Error initializing Gemini model: {e}")
            raise

    async def generate(self, prompt: str) -> str:
        """Send ``prompt`` and return the model's reply text."""
        try:
            response = await asyncio.wait_for(
                asyncio.to_thread(
                    lambda: self.model.generate_content(
                        prompt,
                        generation_config=genai.types.GenerationConfig(
                            temperature=self.temperature,
                            max_output_tokens=self.max_output_tokens,
                        ),
                    )
                ),
                timeout=self.timeout,
            )
            return response.text
        except asyncio.TimeoutError:
            logger.error(f"Gemini call timed out after {self.timeout}s")
            raise
        except Exception as e:
            logger.error(f"Error sending prompt to Gemini: {e}", exc_info=True)
            raise
