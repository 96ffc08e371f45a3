"""Inline tags and prompt keywords → segment settings.

Settings precedence when a segment is built (highest wins):

    explicit inline tag  >  prompt-inferred heuristic  >  computed default

Tags are applied in source order, so the last tag targeting a field wins.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Sequence

from schemas import InlineTag, SegmentSettings

log = logging.getLogger(__name__)


def _frozen(table: dict[str, str]) -> Mapping[str, str]:
    return MappingProxyType(table)


CAMERA_TAGS = _frozen({
    "close-up": "close-up",
    "extreme-close-up": "close-up",
    "wide": "wide",
    "extreme-wide": "wide",
    "medium-shot": "static",
    "dolly-in": "dolly-in",
    "dolly-out": "dolly-out",
    "push-in": "dolly-in",
    "pull-out": "dolly-out",
    "tracking": "tracking",
    "pan-left": "pan",
    "pan-right": "pan",
    "tilt-up": "tilt",
    "tilt-down": "tilt",
    "crane-up": "crane",
    "crane-down": "crane",
    "fpv": "fpv",
    "360-orbit": "orbit",
    "arc-shot": "orbit",
    "static": "static",
    "handheld": "handheld",
    "gimbal-smooth": "tracking",
    "aerial": "crane",
    "low-angle": "static",
    "high-angle": "static",
    "pov": "fpv",
    "over-shoulder": "static",
    "two-shot": "static",
})

MOTION_TAGS = _frozen({
    "smooth": "smooth",
    "slow": "slow",
    "very-slow": "slow",
    "fast": "fast",
    "very-fast": "fast",
    "dynamic": "dynamic",
    "jitter": "jitter",
    "none": "none",
    "cinematic": "cinematic",
    "static": "none",
    "flowing": "smooth",
    "building": "dynamic",
    "frenetic": "fast",
    "hypnotic": "slow",
    "meditative": "slow",
    "explosive": "fast",
    "abrupt": "jitter",
})

TRANSITION_TAGS = _frozen({
    "cut": "cut",
    "crossfade": "cross",
    "dissolve": "dissolve",
    "wipe": "wipe",
    "fade-to-black": "fade",
    "fade-from-black": "fade",
    "fade-to-white": "fade",
    "fade": "fade",
    "match-cut": "cut",
    "jump-cut": "cut",
    "whip-pan": "cut",
    "morph": "dissolve",
    "zoom-transition": "cross",
    "glitch-cut": "cut",
    "flash": "fade",
    "blur-transition": "dissolve",
    "none": "none",
})

STYLE_TAGS = _frozen({
    "cinematic": "cinematic",
    "realistic": "realistic",
    "dreamy": "dreamy",
    "anime": "anime",
    "vintage": "vintage",
    "noir": "noir",
    "documentary": "realistic",
    "music-video": "cinematic",
    "commercial": "cinematic",
    "art-film": "dreamy",
    "ghibli": "anime",
    "pixar-style": "cinematic",
    "grindhouse": "vintage",
    "film-photography": "vintage",
    "polaroid": "vintage",
    "modern": "realistic",
    "minimalist": "realistic",
    "hyperreal": "realistic",
    "abstract": "dreamy",
    "surreal": "dreamy",
})

MOOD_MOTION = _frozen({
    "calm": "slow",
    "peaceful": "slow",
    "serene": "slow",
    "tense": "dynamic",
    "dramatic": "cinematic",
    "suspenseful": "slow",
    "mysterious": "slow",
    "eerie": "slow",
    "melancholic": "slow",
    "nostalgic": "smooth",
    "hopeful": "smooth",
    "joyful": "dynamic",
    "romantic": "smooth",
    "intense": "fast",
    "chaotic": "jitter",
    "lonely": "slow",
    "triumphant": "cinematic",
    "ominous": "slow",
    "whimsical": "smooth",
    "dreamy": "slow",
    "energetic": "fast",
    "contemplative": "slow",
    "anxious": "jitter",
    "epic": "cinematic",
})

GENRE_STYLE = _frozen({
    "noir": "noir",
    "cyberpunk": "noir",
    "anime": "anime",
    "animation": "anime",
    "documentary": "realistic",
    "realism": "realistic",
})


@dataclass(frozen=True)
class TagTables:
    """Lookup tables used by :class:`TagMapper`. Swap them out in tests."""
    camera: Mapping[str, str] = field(default_factory=lambda: CAMERA_TAGS)
    motion: Mapping[str, str] = field(default_factory=lambda: MOTION_TAGS)
    transition: Mapping[str, str] = field(default_factory=lambda: TRANSITION_TAGS)
    style: Mapping[str, str] = field(default_factory=lambda: STYLE_TAGS)
    mood_motion: Mapping[str, str] = field(default_factory=lambda: MOOD_MOTION)
    genre_style: Mapping[str, str] = field(default_factory=lambda: GENRE_STYLE)
    enhancing_fx: frozenset[str] = field(default_factory=lambda: frozenset({"slow-motion", "time-lapse", "speed-ramp"}))


DEFAULT_TAG_TABLES = TagTables()

# Fields a tag or inference layer may set on SegmentSettings.
MERGEABLE_FIELDS = (
    "motion", "camera", "transition", "style_preset",
    "enhance_enabled", "lighting", "emotion", "sfx_cue",
)

# (pattern, value) pairs, first match wins within each group
_MOTION_HINTS = (
    (r"\b(run|chase|fight|explode|crash|race)\b", "fast"),
    (r"\b(slowly|gentle|calm|peaceful|quiet|still)\b", "slow"),
    (r"\b(dramatic|intense|powerful|epic)\b", "cinematic"),
)
_CAMERA_HINTS = (
    (r"\b(close[- ]?up|face|eyes|detail)\b", "close-up"),
    (r"\b(wide|landscape|vista|panorama|vast)\b", "wide"),
    (r"\b(follow|chase|track|pursue)\b", "tracking"),
    (r"\b(fly|aerial|above|bird[- ]?eye)\b", "crane"),
)
_STYLE_HINTS = (
    (r"\b(dream|fantasy|surreal|magical|ethereal)\b", "dreamy"),
    (r"\b(noir|shadow|dark|mystery|detective)\b", "noir"),
    (r"\b(anime|cartoon|animated)\b", "anime"),
    (r"\b(old|vintage|retro|classic|film)\b", "vintage"),
    (r"\b(real|authentic|documentary|true)\b", "realistic"),
)
_ENHANCE_HINT = r"\b(action|vfx|explosion|slow[- ]?motion|time[- ]?lapse)\b"


def _first_hint(text: str, hints: tuple[tuple[str, str], ...]) -> str | None:
    for pattern, value in hints:
        if re.search(pattern, text):
            return value
    return None


class TagMapper:
    def __init__(self, tables: TagTables = DEFAULT_TAG_TABLES):
        self.tables = tables

    def map_tags(self, tags: Sequence[InlineTag]) -> dict[str, Any]:
        """Convert tags to a partial settings dict.

        Every tag is kept under ``inline_tags``; tags of a known type are also
        recorded in ``tag_metadata`` even when their value is not in the
        vocabulary, in which case the target field is left alone.
        """
        settings: dict[str, Any] = {"inline_tags": list(tags), "tag_metadata": {}}
        metadata: dict[str, str] = settings["tag_metadata"]
        explicit_motion = False
        t = self.tables

        for tag in tags:
            kind = tag.type.lower()
            value = tag.value
            lower = value.lower()

            if kind == "camera":
                metadata["camera"] = value
                if lower in t.camera:
                    settings["camera"] = t.camera[lower]

            elif kind in ("motion", "pace"):
                metadata[kind] = value
                if lower in t.motion:
                    settings["motion"] = t.motion[lower]
                    explicit_motion = True

            elif kind == "transition":
                metadata["transition"] = value
                if lower in t.transition:
                    settings["transition"] = t.transition[lower]

            elif kind == "style":
                metadata["style"] = value
                if lower in t.style:
                    settings["style_preset"] = t.style[lower]

            elif kind == "mood":
                metadata["mood"] = value
                settings["emotion"] = value
                if lower in t.mood_motion and not explicit_motion:
                    settings["motion"] = t.mood_motion[lower]

            elif kind == "lighting":
                metadata["lighting"] = value
                settings["lighting"] = value

            elif kind == "fx":
                metadata["fx"] = value
                if lower in t.enhancing_fx:
                    settings["enhance_enabled"] = True

            elif kind == "sfx":
                metadata["sfx"] = value
                settings["sfx_cue"] = value

            elif kind == "genre":
                metadata["genre"] = value
                if lower in t.genre_style:
                    settings["style_preset"] = t.genre_style[lower]

            elif kind in ("weather", "lens"):
                metadata[kind] = value

            else:
                log.debug("Ignoring unknown tag type %r", tag.type)

        return settings

    def infer_from_prompt(self, text: str) -> dict[str, Any]:
        """Keyword heuristics over the literal prompt text."""
        lower = text.lower()
        settings: dict[str, Any] = {}

        if motion := _first_hint(lower, _MOTION_HINTS):
            settings["motion"] = motion
        if camera := _first_hint(lower, _CAMERA_HINTS):
            settings["camera"] = camera
        if style := _first_hint(lower, _STYLE_HINTS):
            settings["style_preset"] = style
        if re.search(_ENHANCE_HINT, lower):
            settings["enhance_enabled"] = True

        return settings


def merge_settings(
    defaults: SegmentSettings,
    inferred: Mapping[str, Any],
    tagged: Mapping[str, Any],
) -> SegmentSettings:
    """Layer ``inferred`` then ``tagged`` over ``defaults``.

    Layers are applied lowest first, so a field set by a tag always beats the
    same field from inference, which beats the default.
    """
    update: dict[str, Any] = {}
    for layer in (inferred, tagged):
        for name in MERGEABLE_FIELDS:
            if layer.get(name) is not None:
                update[name] = layer[name]

    update["inline_tags"] = list(tagged.get("inline_tags", []))
    update["tag_metadata"] = dict(tagged.get("tag_metadata", {}))
    return defaults.model_copy(update=update)


# ---------------------------------------------------------------------------
# Negative prompts
# ---------------------------------------------------------------------------

DEFAULT_NEGATIVES = (
    "blurry",
    "distorted",
    "low quality",
    "watermark",
    "text overlay",
    "extra limbs",
    "deformed",
    "flickering",
    "inconsistent lighting",
    "jarring cuts",
    "unnatural motion",
)


def default_negative_prompt() -> str:
    return ", ".join(DEFAULT_NEGATIVES)


def enhanced_negative_prompt(content: str, tags: Sequence[InlineTag]) -> str:
    """Default negatives plus content- and style-specific ones."""
    extra: list[str] = []
    lower = content.lower()

    if any(word in lower for word in ("person", "character", "human")):
        extra += ["bad anatomy", "wrong proportions", "clone artifacts"]
    if any(word in lower for word in ("face", "portrait")):
        extra += ["asymmetric eyes", "distorted face", "uncanny valley"]
    if any(word in lower for word in ("text", "sign", "logo")):
        extra += ["misspelled text", "gibberish text", "wrong letters"]

    style = next((tag.value.lower() for tag in tags if tag.type == "style"), None)
    if style == "realistic":
        extra += ["cartoon", "anime style", "stylized"]
    elif style == "anime":
        extra += ["photorealistic", "hyperreal"]

    return ", ".join(list(DEFAULT_NEGATIVES) + extra)
