"""Split scenes into model-sized timeline segments.

Each scene is planned on its own: nothing here reads another scene or another
segment, so scenes can be planned in any order with the same result.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Optional, Sequence, TypeVar

from schemas import InlineTag, ModelCapabilities, SceneBreakdown, SegmentSettings

from .inline_tags import strip_tags
from .model_registry import dialogue_mode_for
from .tag_mapper import TagMapper, enhanced_negative_prompt, merge_settings

log = logging.getLogger(__name__)

T = TypeVar("T")

# Scene camera suggestion → segment camera
_SUGGESTED_CAMERA = {
    "static": "static",
    "pan": "pan",
    "dolly": "dolly-in",
    "crane": "crane",
    "tracking": "tracking",
    "zoom": "dolly-in",
    "orbit": "orbit",
    "handheld": "handheld",
}

BASE_DURATION_MIN = 3
BASE_DURATION_MAX = 5
CHARS_PER_SECOND = 50
DIALOGUE_EXTRA_SEC = 2
SLOW_PACE_FACTOR = 1.5
FAST_PACE_FACTOR = 0.7


@dataclass
class SegmentDraft:
    """A planned segment before prompt compilation and numbering."""
    scene_id: str
    index_in_scene: int
    segments_in_scene: int
    settings: SegmentSettings
    allotted_duration_sec: float
    dialogue_lines: list[str] = field(default_factory=list)
    dialogue_mode: str = "none"
    continuity_notes: Optional[str] = None

    @property
    def dialogue(self) -> str:
        return "\n".join(self.dialogue_lines)


def segment_count_for(duration_sec: float, max_duration_sec: int) -> int:
    return max(1, math.ceil(duration_sec / max_duration_sec))


def split_evenly(items: Sequence[T], count: int) -> list[list[T]]:
    """Split ``items`` into ``count`` contiguous chunks of ``ceil(len/count)``.

    Order is kept, chunks never overlap and trailing chunks may be empty.
    """
    per_chunk = math.ceil(len(items) / count) if items else 0
    return [list(items[i * per_chunk:(i + 1) * per_chunk]) for i in range(count)]


def scene_motion(scene: SceneBreakdown) -> str:
    """Scene-level motion inferred from emotions and actions."""
    emotions = [e.lower() for e in scene.emotions]
    actions = " ".join(scene.actions).lower()

    if "dramatic" in emotions or "intense" in emotions or "run" in actions or "fight" in actions:
        return "cinematic"
    if "calm" in emotions or "peaceful" in emotions or "romantic" in emotions:
        return "smooth"
    if "tense" in emotions or "mysterious" in emotions:
        return "slow"
    if "fast" in actions or "quick" in actions or "rush" in actions:
        return "dynamic"
    return "smooth"


def scene_camera(scene: SceneBreakdown) -> str:
    if scene.camera_suggestions:
        return _SUGGESTED_CAMERA.get(scene.camera_suggestions[0].type, "static")
    return "static"


def default_settings(
    caps: ModelCapabilities,
    scene: SceneBreakdown,
    index: int,
    count: int,
) -> SegmentSettings:
    """Lowest-precedence settings for sub-segment ``index`` of ``count``."""
    if index == count - 1:
        transition = scene.transition_to_next or "fade"
        if transition == "morph":
            transition = "dissolve"
    else:
        transition = "cut"

    return SegmentSettings(
        duration_sec=max(caps.min_duration_sec, min(BASE_DURATION_MAX, caps.max_duration_sec)),
        motion=scene_motion(scene),
        camera=scene_camera(scene),
        transition=transition,
        style_preset="cinematic",
        model_id=caps.model_id,
        first_frame_mode="none",
        lighting=scene.lighting,
        emotion=scene.emotions[0] if scene.emotions else None,
    )


def build_segment_prompt(
    scene: SceneBreakdown,
    index: int,
    actions: Sequence[str],
) -> str:
    parts: list[str] = []

    if index == 0:
        parts.append(f"Scene {scene.scene_number}.")
    else:
        parts.append(f"Scene {scene.scene_number}, part {index + 1}.")

    environment = strip_tags(scene.environment or scene.summary)
    if environment:
        parts.append(environment.rstrip(".") + ".")

    if scene.visual_style:
        parts.append(scene.visual_style.rstrip(".") + ".")

    if len(scene.characters) == 1:
        parts.append(f"{scene.characters[0]} is present.")
    elif scene.characters:
        parts.append(f"Characters: {', '.join(scene.characters)}.")

    if actions:
        parts.append(". ".join(a.rstrip(".") for a in actions) + ".")

    if scene.emotions:
        parts.append(f"Mood: {', '.join(scene.emotions)}.")

    if scene.camera_suggestions:
        cam = scene.camera_suggestions[0]
        parts.append(f"Camera: {cam.type}{f', {cam.speed}' if cam.speed else ''}.")

    if scene.lighting:
        parts.append(f"Lighting: {scene.lighting}.")

    if scene.time_of_day:
        parts.append(f"{scene.time_of_day.capitalize()}.")

    return " ".join(parts)


def optimal_duration(
    prompt_length: int,
    has_dialogue: bool,
    tags: Sequence[InlineTag],
    caps: ModelCapabilities,
) -> int:
    """Content-driven duration clamped to the model's limits."""
    duration = min(BASE_DURATION_MAX, max(BASE_DURATION_MIN, prompt_length // CHARS_PER_SECOND))

    if has_dialogue:
        duration += DIALOGUE_EXTRA_SEC

    pace = next((t.value.lower() for t in reversed(tags) if t.type == "pace"), None)
    if pace in ("slow", "very-slow"):
        duration = math.ceil(duration * SLOW_PACE_FACTOR)
    elif pace in ("fast", "very-fast"):
        duration = math.ceil(duration * FAST_PACE_FACTOR)

    return max(caps.min_duration_sec, min(duration, caps.max_duration_sec))


def plan_scene(
    scene: SceneBreakdown,
    caps: ModelCapabilities,
    tags: Sequence[InlineTag] = (),
    mapper: Optional[TagMapper] = None,
) -> list[SegmentDraft]:
    """Plan the segments for one scene. Always returns at least one draft."""
    mapper = mapper or TagMapper()

    count = segment_count_for(scene.duration_estimate_sec, caps.max_duration_sec)
    allotted = min(float(caps.max_duration_sec), scene.duration_estimate_sec / count)

    dialogue_chunks = split_evenly(scene.dialogue_blocks, count)
    action_chunks = split_evenly(scene.actions, count)
    tag_chunks = split_evenly(list(tags), count)

    drafts: list[SegmentDraft] = []
    for i in range(count):
        dialogue_lines = [f'{d.character}: "{d.line}"' for d in dialogue_chunks[i]]
        segment_tags = tag_chunks[i]

        prompt = build_segment_prompt(scene, i, action_chunks[i])
        content = " ".join([strip_tags(scene.summary), *action_chunks[i]])

        settings = merge_settings(
            default_settings(caps, scene, i, count),
            mapper.infer_from_prompt(content),
            mapper.map_tags(segment_tags),
        )
        settings.prompt = prompt
        settings.negative_prompt = enhanced_negative_prompt(prompt, segment_tags)
        settings.duration_sec = optimal_duration(len(prompt), bool(dialogue_lines), segment_tags, caps)

        drafts.append(SegmentDraft(
            scene_id=scene.scene_id,
            index_in_scene=i,
            segments_in_scene=count,
            settings=settings,
            allotted_duration_sec=round(allotted, 2),
            dialogue_lines=dialogue_lines,
            dialogue_mode=dialogue_mode_for(caps, bool(dialogue_lines)),
            continuity_notes=scene.continuity_notes,
        ))

    log.debug("Scene %s → %d segment(s) for %s", scene.scene_id, count, caps.model_id)
    return drafts
