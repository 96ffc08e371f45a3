"""Inline ``[type: value]`` directive extraction.

Tags are always derived fresh from the text; malformed brackets are left as
literal text and never raise.
"""
from __future__ import annotations

import logging
import re
from typing import Sequence

from schemas import InlineTag, SceneBreakdown

log = logging.getLogger(__name__)

TAG_PATTERN = r"\[(\w+):\s*([^\]]+)\]"


def extract_tags(text: str) -> list[InlineTag]:
    """Scan ``text`` left to right and return every well-formed tag."""
    if not text:
        return []
    return [
        InlineTag(type=m.group(1).lower(), value=m.group(2).strip(), offset=m.start())
        for m in re.finditer(TAG_PATTERN, text)
    ]


def strip_tags(text: str) -> str:
    """Remove well-formed tags and tidy the whitespace they leave behind."""
    cleaned = re.sub(TAG_PATTERN, "", text)
    cleaned = re.sub(r"[ \t]+", " ", cleaned)
    cleaned = re.sub(r" *\n *", "\n", cleaned)
    return cleaned.strip()


def _approximate_scene_length(scene: SceneBreakdown) -> int:
    length = len(scene.summary)
    length += sum(len(d.character) + len(d.line) for d in scene.dialogue_blocks)
    length += sum(len(a) for a in scene.actions)
    return max(1, length)


def scene_spans(scenes: Sequence[SceneBreakdown], text_length: int) -> list[tuple[int, int]]:
    """Approximate ``[start, end)`` character spans of each scene in the source text.

    Scene lengths are estimated from their parsed content and scaled so the
    spans cover ``text_length``. This is an approximation: tags close to a
    scene boundary can land in the neighbouring scene.
    """
    if not scenes:
        return []
    lengths = [_approximate_scene_length(s) for s in scenes]
    total = sum(lengths)
    scale = text_length / total if text_length > 0 else 1.0

    spans: list[tuple[int, int]] = []
    cumulative = 0
    start = 0
    for length in lengths:
        cumulative += length
        end = round(cumulative * scale)
        spans.append((start, end))
        start = end
    return spans


def assign_tags_to_scenes(
    tags: Sequence[InlineTag],
    scenes: Sequence[SceneBreakdown],
    text_length: int,
) -> dict[str, list[InlineTag]]:
    """Group ``tags`` by the scene whose approximate span holds their offset.

    Tags past the last boundary belong to the last scene. Source order is
    kept within each scene.
    """
    assigned: dict[str, list[InlineTag]] = {s.scene_id: [] for s in scenes}
    if not scenes:
        return assigned

    spans = scene_spans(scenes, text_length)
    for tag in tags:
        target = scenes[-1]
        for scene, (start, end) in zip(scenes, spans):
            if start <= tag.offset < end:
                target = scene
                break
        assigned[target.scene_id].append(tag)

    log.debug("Assigned %d tag(s) across %d scene(s)", len(tags), len(scenes))
    return assigned
