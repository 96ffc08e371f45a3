"""Rule-based scenario text → ScenarioBreakdown parser.

Recognised conventions::

    SCENE 1: The harbour          scene header (also INT. / EXT.)
    Mary: "We should go."         dialogue, optional (emotion) inside the line
    (she turns away)              action
    ---                           scene break

Without headers the text is split on blank lines before a capitalised
paragraph, then on horizontal rules, then into groups of three paragraphs.
"""
from __future__ import annotations

import hashlib
import logging
import re

from schemas import CameraSuggestion, CharacterProfile, DialogueBlock, SceneBreakdown, ScenarioBreakdown

from .config import DEFAULT_LANGUAGE

log = logging.getLogger(__name__)

MAX_SCENES_WARNING = 50
MAX_DURATION_WARNING = 600      # seconds
BASE_SCENE_DURATION = 5
MAX_SCENE_DURATION = 60
PARAGRAPHS_PER_SCENE = 3
DEFAULT_VISUAL_STYLE = "Cinematic, professional quality"

_SCENE_SPLITTERS = (
    r"\n(?=(?:SCENE|Scene)\s*(?:\d+|[:\-])|INT\.|EXT\.)",
    r"\n{2,}(?=[A-Z])",
    r"\n(?=---+\n)",
)
_HEADER_RE = re.compile(
    r"^(?:(?:SCENE|Scene|scene)\s*(?:\d+\s*[:\-.]?|[:\-])|INT\.|EXT\.|INT/EXT\.)\s*(.*)$"
)
_RULE_RE = re.compile(r"^-{3,}\s*$")
_DIALOGUE_RE = re.compile(r"^([A-Z][A-Za-z ]+):\s*[\"“]?(.+?)[\"”]?\s*$")
_ACTION_RE = re.compile(r"\(([^)]+)\)")
_MENTION_RE = re.compile(r"\b([A-Z][a-z]+)\s+(?:walks|runs|stands|sits|looks|says|speaks|enters|exits|moves)\b")
_TIME_RE = re.compile(r"\b(morning|afternoon|evening|night|dawn|dusk|noon|midnight)\b", re.IGNORECASE)

EMOTION_WORDS = (
    "happy", "sad", "angry", "fearful", "surprised", "excited",
    "calm", "tense", "romantic", "dramatic", "mysterious", "peaceful",
    "anxious", "joyful", "melancholic", "nostalgic", "hopeful", "desperate",
)

_CAMERA_PATTERNS = (
    (r"\b(pan|panning)\b", "pan"),
    (r"\bdolly\b", "dolly"),
    (r"\btracking\b", "tracking"),
    (r"\b(crane|aerial)\b", "crane"),
    (r"\bzoom\b", "zoom"),
    (r"\b(orbit|360|revolve)\b", "orbit"),
    (r"\b(handheld|shaky)\b", "handheld"),
    (r"\b(static|still|locked)\b", "static"),
)

_TRANSITION_PATTERNS = (
    (r"\bfade (?:to|out)\b", "fade"),
    (r"\bdissolve to\b", "dissolve"),
    (r"\bwipe to\b", "wipe"),
    (r"\b(?:cut to|match cut|smash cut)\b", "cut"),
)

_LIGHTING_HINTS = (
    (r"\bgolden hour\b", "golden hour"),
    (r"\bneon\b", "neon"),
    (r"\bcandle", "candlelit"),
    (r"\bmoon(?:light|lit)?\b", "moonlit"),
    (r"\bsunset\b", "warm sunset"),
    (r"\b(?:dim|dark)\b", "low-key"),
)

VISUAL_STYLES = (
    (("dark", "shadow", "noir", "moody"), "Dark and moody, high contrast"),
    (("bright", "sunny", "cheerful", "vibrant"), "Bright and vibrant, warm colors"),
    (("dream", "surreal", "ethereal", "fantasy"), "Dreamlike and ethereal, soft focus"),
    (("gritty", "raw", "documentary", "realistic"), "Gritty and realistic, natural lighting"),
    (("romantic", "soft", "warm", "intimate"), "Soft and romantic, warm tones"),
    (("action", "dynamic", "intense", "fast"), "Dynamic and intense, sharp imagery"),
    (("horror", "creepy", "scary", "tense"), "Dark and unsettling, high tension"),
    (("sci-fi", "futuristic", "tech", "cyber"), "Futuristic and sleek, cool tones"),
)


def _stable_id(prefix: str, *parts: object) -> str:
    digest = hashlib.sha1("|".join(str(p) for p in parts).encode("utf-8")).hexdigest()
    return f"{prefix}-{digest[:12]}"


def split_into_scenes(text: str) -> list[str]:
    for splitter in _SCENE_SPLITTERS:
        parts = [p.strip() for p in re.split(splitter, text) if p.strip()]
        if len(parts) > 1:
            return parts

    paragraphs = [p.strip() for p in re.split(r"\n{2,}", text) if p.strip()]
    scenes = [
        "\n\n".join(paragraphs[i:i + PARAGRAPHS_PER_SCENE])
        for i in range(0, len(paragraphs), PARAGRAPHS_PER_SCENE)
    ]
    return scenes or [text.strip()]


def _is_header(line: str) -> bool:
    return bool(_HEADER_RE.match(line.strip()))


def extract_dialogue(text: str) -> list[DialogueBlock]:
    blocks: list[DialogueBlock] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if _is_header(line):
            continue
        match = _DIALOGUE_RE.match(line)
        if not match:
            continue
        spoken = match.group(2).strip()
        emotion = _ACTION_RE.search(spoken)
        spoken = _ACTION_RE.sub("", spoken).strip().strip("\"“”").strip()
        if not spoken:
            continue
        blocks.append(DialogueBlock(
            character=match.group(1).strip(),
            line=spoken,
            emotion=emotion.group(1) if emotion else None,
        ))
    return blocks


def extract_characters(text: str) -> list[str]:
    """Speakers and named subjects, in order of first appearance."""
    names: list[str] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if _is_header(line):
            continue
        match = _DIALOGUE_RE.match(line)
        if match and match.group(1).strip() not in names:
            names.append(match.group(1).strip())
    for match in _MENTION_RE.finditer(text):
        if match.group(1) not in names:
            names.append(match.group(1))
    return names


def extract_emotions(text: str) -> list[str]:
    lower = text.lower()
    return [e for e in EMOTION_WORDS if e in lower]


def extract_camera_suggestions(text: str) -> list[CameraSuggestion]:
    lower = text.lower()
    suggestions = [CameraSuggestion(type=kind) for pattern, kind in _CAMERA_PATTERNS if re.search(pattern, lower)]
    return suggestions or [CameraSuggestion(type="static")]


def detect_visual_style(text: str) -> str:
    lower = text.lower()
    for keywords, style in VISUAL_STYLES:
        if any(k in lower for k in keywords):
            return style
    return DEFAULT_VISUAL_STYLE


def _detect(text: str, patterns: tuple[tuple[str, str], ...]) -> str | None:
    lower = text.lower()
    for pattern, value in patterns:
        if re.search(pattern, lower):
            return value
    return None


def estimate_duration(dialogue_count: int, action_count: int, summary: str) -> float:
    duration = BASE_SCENE_DURATION + dialogue_count * 3 + action_count * 2 + (len(summary) // 100) * 2
    return float(min(MAX_SCENE_DURATION, max(BASE_SCENE_DURATION, duration)))


def _summarize(text: str) -> str:
    lines = [
        line for line in text.splitlines()
        if not _DIALOGUE_RE.match(line.strip()) and not _RULE_RE.match(line.strip())
    ]
    summary = _ACTION_RE.sub("", "\n".join(lines))
    return re.sub(r"\s+", " ", summary).strip()[:200]


def parse_scene(scene_text: str, index: int, total: int, scenario_id: str) -> SceneBreakdown:
    lines = scene_text.strip().splitlines()
    title = None
    if lines:
        header = _HEADER_RE.match(lines[0].strip())
        if header:
            title = header.group(1).strip() or None
            lines = lines[1:]
    body = "\n".join(lines)

    dialogue = extract_dialogue(body)
    actions = [a.strip() for a in _ACTION_RE.findall(body) if "emotion" not in a.lower()]
    summary = _summarize(body)
    time_of_day = _TIME_RE.search(body)

    transition = None
    if index < total - 1:
        transition = _detect(body, _TRANSITION_PATTERNS) or "cut"

    return SceneBreakdown(
        scene_id=_stable_id("scene", scenario_id, index),
        scene_number=index + 1,
        title=title,
        duration_estimate_sec=estimate_duration(len(dialogue), len(actions), summary),
        summary=summary,
        environment=summary[:100],
        characters=extract_characters(body),
        dialogue_blocks=dialogue,
        actions=actions,
        emotions=extract_emotions(body),
        visual_style=detect_visual_style(body),
        lighting=_detect(body, _LIGHTING_HINTS),
        time_of_day=time_of_day.group(1).lower() if time_of_day else None,
        camera_suggestions=extract_camera_suggestions(body),
        transition_to_next=transition,
    )


def parse_scenario(text: str, language: str = DEFAULT_LANGUAGE) -> tuple[ScenarioBreakdown, list[str]]:
    """Parse scenario text into a breakdown plus human-readable parsing notes.

    Ids are derived from the text, so the same input always yields the same
    breakdown. Raises ``ValueError`` for empty text.
    """
    if not text or not text.strip():
        raise ValueError("Scenario text is empty.")

    scenario_id = _stable_id("scenario", language, text)
    scene_texts = split_into_scenes(text)
    notes = [f"Detected {len(scene_texts)} scene(s)"]

    all_characters = extract_characters(text)
    notes.append(f"Found {len(all_characters)} character(s): {', '.join(all_characters)}")

    scenes = [parse_scene(t, i, len(scene_texts), scenario_id) for i, t in enumerate(scene_texts)]
    total = sum(s.duration_estimate_sec for s in scenes)

    warnings: list[str] = []
    if len(scenes) > MAX_SCENES_WARNING:
        warnings.append("Very long scenario detected. Consider breaking into multiple videos.")
    if total > MAX_DURATION_WARNING:
        warnings.append(f"Estimated duration ({round(total / 60)} min) exceeds typical limits.")

    global_style = {
        "genre": detect_visual_style(text).split(",")[0],
        "mood": scenes[0].emotions[0] if scenes[0].emotions else "cinematic",
    }

    breakdown = ScenarioBreakdown(
        scenario_id=scenario_id,
        total_duration_sec=total,
        scene_count=len(scenes),
        scenes=scenes,
        global_style=global_style,
        characters=[
            CharacterProfile(name=name, description="Character appearing in the scenario")
            for name in all_characters
        ],
        warnings=warnings,
    )
    log.info("Parsed scenario %s: %d scene(s), ~%.0fs", scenario_id, len(scenes), total)
    return breakdown, notes
