"""Prompt templates for the generative translation model."""

from __future__ import annotations

_TRANSLATION_PROMPT = """You are a professional translator of film criticism.

Translate the movie review below into the language identified by the
ISO 639-1 / BCP 47 code "{language}".

Rules:
- Preserve the reviewer's tone, opinion and any rating they give.
- Keep movie titles and people's names as they are.
- Return ONLY the translated text. No quotes, no notes, no preamble.

Review:
{text}
"""


def build_translation_prompt(text: str, language: str) -> str:
    """Return the prompt asking the model to translate text into language."""
    return _TRANSLATION_PROMPT.format(language=language, text=text.strip())
