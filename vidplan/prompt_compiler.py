"""Per-segment prompt building and model-specific prompt compilation."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Optional, Sequence

from schemas import ModelCapabilities, SegmentSettings

from .config import DEFAULT_LANGUAGE, DEFAULT_TONE
from .improver import TextImprover, improve_with_fallback
from .model_registry import dialogue_mode_for, get_model_capabilities

log = logging.getLogger(__name__)

ELLIPSIS = "..."
COMPRESSED_DIALOGUE_CHARS = 100

SCENE_TRUNCATED = "prompt_truncated_to_fit_model_limit"
FINAL_TRUNCATED = "final_prompt_truncated_to_fit_model_limit"
DIALOGUE_COMPRESSED = "dialogue_compressed_for_model"
DIALOGUE_TO_VISUAL = "dialogue_not_supported_converted_to_visual"
IMPROVEMENT_FAILED = "prompt_improvement_failed_used_rule_based"

TONE_PRESETS: dict[str, dict] = {
    "cinematic": {
        "keywords": ["cinematic", "film-like", "dramatic lighting", "shallow depth of field"],
        "mood": "dramatic and visually compelling",
    },
    "documentary": {
        "keywords": ["documentary style", "natural lighting", "authentic", "realistic"],
        "mood": "honest and grounded",
    },
    "dreamlike": {
        "keywords": ["dreamlike", "soft focus", "ethereal glow", "flowing"],
        "mood": "gentle and contemplative",
    },
    "action": {
        "keywords": ["dynamic", "fast-paced", "intense", "high energy"],
        "mood": "thrilling and energetic",
    },
    "romantic": {
        "keywords": ["soft lighting", "warm tones", "intimate", "gentle"],
        "mood": "tender and heartfelt",
    },
}

CAMERA_PHRASES = {
    "close-up": "close-up shot",
    "wide": "wide-angle shot",
    "dolly-in": "camera slowly pushing in",
    "dolly-out": "camera slowly pulling out",
    "tracking": "tracking shot following the subject",
    "fpv": "first-person perspective",
    "crane": "sweeping crane shot",
    "pan": "smooth panning shot",
    "tilt": "tilting camera movement",
    "orbit": "orbiting around the subject",
    "handheld": "handheld camera style",
}

MOTION_PHRASES = {
    "smooth": "smooth fluid motion",
    "slow": "slow deliberate movement",
    "fast": "fast dynamic action",
    "dynamic": "dynamic energetic movement",
    "cinematic": "cinematic motion",
    "jitter": "subtle camera shake",
}


@dataclass
class CompiledPrompt:
    final_prompt: str
    scene_prompt: str
    dialogue_text: str = ""
    dialogue_mode: str = "none"
    was_truncated: bool = False
    warnings: list[str] = field(default_factory=list)

    @property
    def length_chars(self) -> int:
        return len(self.final_prompt)


def build_enhanced_prompt(base_prompt: str, settings: SegmentSettings) -> str:
    """Append lighting, camera, motion, style and atmosphere clauses, in that order."""
    parts = [base_prompt.strip().rstrip(".")]

    if settings.lighting:
        parts.append(f"{settings.lighting} lighting")
    if settings.camera != "static" and settings.camera in CAMERA_PHRASES:
        parts.append(CAMERA_PHRASES[settings.camera])
    if settings.motion != "none" and settings.motion in MOTION_PHRASES:
        parts.append(MOTION_PHRASES[settings.motion])
    if settings.style_preset != "none":
        parts.append(f"{settings.style_preset} style")
    if settings.emotion:
        parts.append(f"{settings.emotion} atmosphere")

    return ". ".join(p for p in parts if p) + "."


def truncate_prompt(text: str, limit: int) -> str:
    """Fit ``text`` into ``limit`` characters, marking a cut with an ellipsis."""
    if len(text) <= limit:
        return text
    return text[:limit - len(ELLIPSIS)] + ELLIPSIS


def _collapse_periods(match: re.Match) -> str:
    return ELLIPSIS if match.group(0) == ELLIPSIS else "."


def clean_prompt(text: str, keep_newlines: bool = False) -> str:
    """Collapse whitespace and repeated periods; a bare ``...`` survives."""
    if keep_newlines:
        text = re.sub(r"[ \t]+", " ", text)
        text = re.sub(r" *\n *", "\n", text)
        text = re.sub(r"\n{3,}", "\n\n", text)
    else:
        text = re.sub(r"\s+", " ", text)
    text = re.sub(r"\.(?:[ \t]*\.)+", _collapse_periods, text)
    return text.strip()


def enhance_by_style(text: str, caps: ModelCapabilities, tone: str = DEFAULT_TONE) -> str:
    """Shape a scene description for the model's prompt style."""
    enhanced = text.strip()
    if not enhanced:
        return ""
    tone_config = TONE_PRESETS.get(tone, TONE_PRESETS[DEFAULT_TONE])
    lower = enhanced.lower()

    if caps.prompt_style == "cinematic_blocks":
        if "shot" not in lower and "scene" not in lower:
            enhanced = f"Cinematic scene. {enhanced}"
        if "camera" not in lower and "movement" not in lower:
            enhanced += ". Smooth camera movement."
        missing = [t for t in caps.style_tokens if t.lower() not in enhanced.lower()]
        if missing:
            enhanced += f"\n\nStyle: {', '.join(missing[:3])}."

    elif caps.prompt_style == "runway_format":
        if "shot" not in lower:
            enhanced = f"Wide shot. {enhanced}"
        if "motion" not in lower and "move" not in lower:
            enhanced += ". Subtle natural motion."

    else:
        article = re.match(r"(a|an|the)\s", enhanced, re.IGNORECASE)
        if article:
            enhanced = article.group(1).capitalize() + enhanced[len(article.group(1)):]
        elif not re.match(r"[A-Z][a-z]+\s", enhanced):
            enhanced = f"A {enhanced[0].lower()}{enhanced[1:]}"
        if "atmosphere" not in lower and "mood" not in lower:
            enhanced += f". {tone_config['keywords'][0]} atmosphere."

    return clean_prompt(enhanced)


def _spoken_text(line: str) -> str:
    match = re.match(r"^([^:]+):\s*[\"']?(.+?)[\"']?$", line)
    return match.group(2) if match else re.sub(r"[\"']", "", line)


def format_dialogue(dialogue: str, caps: ModelCapabilities) -> tuple[str, str, Optional[str]]:
    """Render dialogue for the model's dialogue tier.

    Returns ``(text, mode, warning)``.
    """
    lines = [line.strip() for line in (dialogue or "").strip().splitlines() if line.strip()]
    mode = dialogue_mode_for(caps, bool(lines))

    if mode == "none":
        return "", mode, None

    if mode == "full":
        rendered = [line if ":" in line else f'Character: "{line}"' for line in lines]
        return "\n\nDialogue:\n" + "\n".join(rendered), mode, None

    if mode == "compressed":
        content = ", ".join(_spoken_text(line) for line in lines)
        if len(content) > COMPRESSED_DIALOGUE_CHARS:
            content = content[:COMPRESSED_DIALOGUE_CHARS] + ELLIPSIS
        return f'. Characters speak: "{content}"', mode, DIALOGUE_COMPRESSED

    speakers = set()
    for line in lines:
        match = re.match(r"^([^:]+):", line)
        speakers.add(match.group(1).strip() if match else "Character")
    cue = "Characters converse" if len(speakers) > 1 else "Character speaks"
    return f". {cue}, expressions animated.", mode, DIALOGUE_TO_VISUAL


def remove_forbidden_words(text: str, words: Sequence[str]) -> str:
    for word in words:
        text = re.sub(rf"\b{re.escape(word)}\b", "", text, flags=re.IGNORECASE)
    return text


def compile_final_prompt(
    model_id: str,
    scene_prompt: str,
    dialogue: Optional[str] = None,
    *,
    improvers: Sequence[TextImprover] = (),
    tone: str = DEFAULT_TONE,
    language: str = DEFAULT_LANGUAGE,
    caps: Optional[ModelCapabilities] = None,
) -> CompiledPrompt:
    """Build the final prompt for ``model_id`` from a scene prompt and dialogue.

    The optional improvers are tried first; if none succeeds the original text
    goes through the rule-based shaping unchanged. The result always fits the
    model's prompt budget.
    """
    caps = caps or get_model_capabilities(model_id)
    warnings: list[str] = []

    improved, used_llm = improve_with_fallback(improvers, scene_prompt, caps.prompt_style, tone, language)
    if improvers and not used_llm:
        warnings.append(IMPROVEMENT_FAILED)

    scene = enhance_by_style(improved, caps, tone)
    truncated_scene = truncate_prompt(scene, caps.max_prompt_chars)
    if truncated_scene != scene:
        warnings.append(SCENE_TRUNCATED)

    dialogue_text, dialogue_mode, dialogue_warning = format_dialogue(dialogue or "", caps)
    if dialogue_warning:
        warnings.append(dialogue_warning)

    merged = remove_forbidden_words(truncated_scene + dialogue_text, caps.forbidden_words)
    merged = clean_prompt(merged, keep_newlines=dialogue_mode == "full")

    final = truncate_prompt(merged, caps.max_prompt_chars)
    if final != merged:
        warnings.append(FINAL_TRUNCATED)
        log.info("Final prompt for %s truncated to %d chars", caps.model_id, caps.max_prompt_chars)

    return CompiledPrompt(
        final_prompt=final,
        scene_prompt=truncated_scene,
        dialogue_text=dialogue_text.lstrip(". \n").strip(),
        dialogue_mode=dialogue_mode,
        was_truncated=SCENE_TRUNCATED in warnings or FINAL_TRUNCATED in warnings,
        warnings=warnings,
    )
