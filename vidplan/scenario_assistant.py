"""Scenario clean-up before planning: LLM rewrite with a rule-based fallback."""
from __future__ import annotations

import logging
import re
from typing import Mapping, Optional, Sequence

from schemas import ScenarioImprovement

from .config import DEFAULT_LANGUAGE
from .improver import TextImprover
from .inline_tags import strip_tags
from .model_registry import get_model_capabilities
from .scenario_parser import parse_scenario

log = logging.getLogger(__name__)


def _rewrite_hints(
    target_model_id: Optional[str],
    target_duration_sec: Optional[float],
    style_hints: Optional[Mapping[str, str]],
) -> str:
    lines: list[str] = []
    if target_model_id:
        caps = get_model_capabilities(target_model_id)
        lines += [
            "MODEL CONSTRAINTS:",
            f"- Maximum prompt length: {caps.max_prompt_chars} characters per segment",
            f"- Dialogue support: {caps.supports_dialogue}",
            f"- Recommended style: {caps.prompt_style}",
        ]
    if target_duration_sec:
        lines.append(f"TARGET DURATION: Approximately {max(1, round(target_duration_sec / 60))} minute(s)")
    if style_hints:
        lines += [
            "STYLE HINTS:",
            f"- Genre: {style_hints.get('genre') or 'cinematic'}",
            f"- Mood: {style_hints.get('mood') or 'compelling'}",
            f"- Pacing: {style_hints.get('pacing') or 'medium'}",
        ]
    return "\n".join(lines)


def apply_rule_based_improvements(text: str) -> str:
    """Scene marker, quoted dialogue, FADE IN opening and a closing transition."""
    improved = text.strip()

    if not re.search(r"^SCENE\s+\d+", improved, re.MULTILINE):
        paragraphs = re.split(r"\n{2,}", improved)
        paragraphs[0] = f"SCENE 1:\n{paragraphs[0]}"
        improved = "\n\n".join(paragraphs)

    improved = re.sub(
        r"^([A-Z][a-z]+)\s*:\s*[\"“]?([^\"“”\n]+?)[\"”]?\s*$",
        r'\1: "\2"',
        improved,
        flags=re.MULTILINE,
    )

    lower = improved.lower()
    if "fade in" not in lower and "scene" not in lower:
        improved = "FADE IN:\n\n" + improved
    if "fade out" not in lower and "the end" not in lower:
        improved += "\n\n[transition: fade-to-black]\n\nTHE END"

    return improved


def improve_scenario(
    text: str,
    improvers: Sequence[TextImprover] = (),
    target_model_id: Optional[str] = None,
    target_duration_sec: Optional[float] = None,
    style_hints: Optional[Mapping[str, str]] = None,
    language: str = DEFAULT_LANGUAGE,
) -> ScenarioImprovement:
    """Rewrite ``text`` for planning and estimate its scene count and duration.

    Improvers must provide ``rewrite_scenario(text, hints, language)``. When
    none succeeds the rule-based formatter is used instead.
    """
    if not text or not text.strip():
        raise ValueError("Scenario text is empty.")

    changes: list[str] = []
    warnings: list[str] = []
    improved = text
    hints = _rewrite_hints(target_model_id, target_duration_sec, style_hints)

    for improver in improvers:
        try:
            rewritten = improver.rewrite_scenario(text, hints, language)
        except Exception as e:
            log.warning("Scenario rewrite via %s failed: %s", improver.name, e)
            continue
        if rewritten and rewritten.strip():
            improved = rewritten.strip()
            changes += [
                "AI-enhanced scenario with cinematic details",
                "Structured into clear scenes",
                "Added visual and emotional descriptions",
            ]
            break

    if improved == text:
        if improvers:
            warnings.append("AI enhancement failed, applying rule-based improvements")
        improved = apply_rule_based_improvements(text)
        changes += ["Applied rule-based formatting", "Structured dialogue formatting"]

    breakdown, _ = parse_scenario(strip_tags(improved), language)
    return ScenarioImprovement(
        improved_scenario=improved,
        original_length=len(text),
        improved_length=len(improved),
        changes_made=changes,
        warnings=warnings + breakdown.warnings,
        estimated_duration_sec=breakdown.total_duration_sec,
        scene_count_estimate=breakdown.scene_count,
    )
