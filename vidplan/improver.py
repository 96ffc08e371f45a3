"""Optional LLM prompt improvement with rule-based fallback.

Improvers raise on any failure; :func:`improve_with_fallback` walks the chain
and hands back the untouched text when none of them produce anything.
"""
from __future__ import annotations

import logging
from typing import Protocol, Sequence

from .config import LLM_MAX_TOKENS, Config

log = logging.getLogger(__name__)

_STYLE_GUIDES = {
    "cinematic_blocks": "Use cinematic language: shot types, camera movement and visual style blocks.",
    "runway_format": "Start with the shot type, then describe the subject and a subtle motion.",
    "plain": "Use one or two clear, descriptive sentences.",
}

_IMPROVE_SYSTEM = """You are an expert prompt writer for AI video generation models.
You rewrite scene descriptions into a single concise prompt.
Respond with ONLY the improved prompt text, no explanations, no quotes, no markdown."""

_IMPROVE_USER_TEMPLATE = """Improve this scene description for video generation.

Style: {style_guide}
Tone: {tone}
Language: {language}

Scene:
{text}"""

_SCENARIO_SYSTEM = """You are an expert screenwriter for short AI-generated videos.
You rewrite rough scenarios into clear, well structured scripts.
Mark each scene with "SCENE N:", put dialogue as Name: "line" and actions in parentheses.
Respond with ONLY the rewritten scenario, no commentary."""

_SCENARIO_USER_TEMPLATE = """Rewrite this scenario.
{hints}
Language: {language}

Scenario:
{text}"""


class TextImprover(Protocol):
    name: str

    def improve(self, text: str, style: str, tone: str, language: str) -> str: ...

    def rewrite_scenario(self, text: str, hints: str, language: str) -> str: ...


class _ChatImprover:
    """Shared prompt construction; subclasses supply ``_complete``."""
    name = "llm"

    def _complete(self, system: str, user: str) -> str:
        raise NotImplementedError

    def improve(self, text: str, style: str, tone: str, language: str) -> str:
        user_msg = _IMPROVE_USER_TEMPLATE.format(
            style_guide=_STYLE_GUIDES.get(style, _STYLE_GUIDES["plain"]),
            tone=tone,
            language=language,
            text=text,
        )
        raw = self._complete(_IMPROVE_SYSTEM, user_msg)
        log.debug("%s improver raw response:\n%s", self.name, raw)
        return raw.strip().strip('"').strip()

    def rewrite_scenario(self, text: str, hints: str, language: str) -> str:
        user_msg = _SCENARIO_USER_TEMPLATE.format(hints=hints, language=language, text=text)
        raw = self._complete(_SCENARIO_SYSTEM, user_msg)
        log.debug("%s scenario rewrite raw response:\n%s", self.name, raw)
        return raw.strip()


class HFTextImprover(_ChatImprover):
    name = "hf"

    def __init__(self, config: Config):
        from utils import HFClient

        self.model = config.hf_model
        self.client = HFClient(token=config.hf_token, timeout=config.llm_timeout_sec)

    def _complete(self, system: str, user: str) -> str:
        return self.client.chat_completion(
            self.model, system, user, max_tokens=LLM_MAX_TOKENS, temperature=0.4, max_retries=1,
        )


class GeminiTextImprover(_ChatImprover):
    name = "gemini"

    def __init__(self, config: Config):
        self.config = config

    def _complete(self, system: str, user: str) -> str:
        from .utils.gemini_client import generate_text_gemini

        return generate_text_gemini(system, user, self.config, temperature=0.4)


def build_improvers(config: Config) -> list[TextImprover]:
    """Improver chain for ``config``, preferred provider first.

    Providers without credentials are left out, so an unconfigured setup
    plans with the rule-based prompts only.
    """
    if config.improver == "none":
        return []

    available = {}
    if config.hf_token:
        available["hf"] = HFTextImprover
    if config.gemini_api_key:
        available["gemini"] = GeminiTextImprover

    order = [config.improver] + [p for p in ("hf", "gemini") if p != config.improver]
    improvers: list[TextImprover] = [available[p](config) for p in order if p in available]
    log.info("Prompt improvers: %s", [i.name for i in improvers] or "rule-based only")
    return improvers


def improve_with_fallback(
    improvers: Sequence[TextImprover],
    text: str,
    style: str,
    tone: str,
    language: str,
) -> tuple[str, bool]:
    """Return ``(text, improved)``; the input text comes back when every improver fails."""
    for improver in improvers:
        try:
            result = improver.improve(text, style, tone, language)
        except Exception as e:
            log.warning("Prompt improvement via %s failed: %s", improver.name, e)
            continue
        if result and result.strip():
            return result.strip(), True
        log.warning("Prompt improvement via %s returned empty text", improver.name)
    return text, False
