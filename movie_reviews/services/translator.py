"""
Translator service — wraps Google Generative AI for text translation.

Model   : TRANSLATION_MODEL           (default: gemini-2.5-flash)
Timeout : TRANSLATION_TIMEOUT_SECONDS (default: 30)

One call per translation request. There is no retry and no fallback model;
any failure (quota, timeout, network, empty response) raises
TranslationServiceError and the caller decides what to do.
"""

from __future__ import annotations

import asyncio
import logging
from functools import lru_cache

import google.generativeai as genai

from movie_reviews.config import settings
from movie_reviews.utils.prompts import build_translation_prompt

logger = logging.getLogger(__name__)


class TranslationServiceError(Exception):
    """Raised when the external translation service fails."""


class Translator:
    """
    Thin async client over a Gemini model.
    The SDK is blocking, so calls run in a worker thread with a timeout.
    """

    def __init__(self, model_name: str, api_key: str, timeout: int = 30) -> None:
        genai.configure(api_key=api_key)
        self.model_name = model_name
        self.timeout = timeout
        self._model = genai.GenerativeModel(model_name)

    async def translate(self, text: str, language: str) -> str:
        """Return text translated into language, or raise TranslationServiceError."""
        prompt = build_translation_prompt(text, language)
        logger.debug("Translation prompt (%s):\n%s", self.model_name, prompt)

        try:
            response = await asyncio.wait_for(
                asyncio.to_thread(
                    self._model.generate_content,
                    prompt,
                    generation_config=genai.GenerationConfig(
                        temperature=0.1,
                        max_output_tokens=2048,
                    ),
                ),
                timeout=self.timeout,
            )
            translated = response.text.strip()
        except asyncio.TimeoutError as exc:
            logger.error(
                "Translation to '%s' timed out after %ds", language, self.timeout
            )
            raise TranslationServiceError(
                f"Translation to '{language}' timed out"
            ) from exc
        except Exception as exc:
            logger.error("Translation to '%s' failed: %s", language, exc)
            raise TranslationServiceError(
                f"Translation to '{language}' failed: {exc}"
            ) from exc

        if not translated:
            raise TranslationServiceError(
                f"Translation service returned no text for '{language}'"
            )
        return translated


@lru_cache(maxsize=1)
def get_translator() -> Translator:
    """FastAPI dependency: process-wide translator, created on first use."""
    return Translator(
        model_name=settings.translation_model,
        api_key=settings.google_api_key,
        timeout=settings.translation_timeout_seconds,
    )
