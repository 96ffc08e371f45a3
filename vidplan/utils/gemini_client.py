"""Gemini text generation client."""
from __future__ import annotations

import logging

from google import genai
from google.genai import types

from ..config import LLM_MAX_TOKENS, Config

log = logging.getLogger(__name__)


def generate_text_gemini(
    system_prompt: str,
    user_prompt: str,
    config: Config,
    max_tokens: int = LLM_MAX_TOKENS,
    temperature: float = 0.7,
) -> str:
    """Generate text with a Gemini model, bounded by ``config.llm_timeout_sec``."""
    if not config.gemini_api_key:
        raise ValueError("GEMINI_API_KEY is not set.")

    client = genai.Client(
        api_key=config.gemini_api_key,
        http_options=types.HttpOptions(timeout=int(config.llm_timeout_sec * 1000)),
    )

    log.info("Generating text with Gemini (%s)", config.gemini_model)

    response = client.models.generate_content(
        model=config.gemini_model,
        contents=user_prompt,
        config=types.GenerateContentConfig(
            system_instruction=system_prompt,
            max_output_tokens=max_tokens,
            temperature=temperature,
        ),
    )

    text = response.text
    if not text or not text.strip():
        raise RuntimeError(f"Gemini returned no text: {response}")
    return text.strip()
