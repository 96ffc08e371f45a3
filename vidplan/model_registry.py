"""Static capability registry for the supported video generation models.

Lookups never fail: an unrecognised id resolves through an ordered list of
strategies and finally to a conservative default record stamped with the id
that was asked for, so planning can continue for models this table does not
know about yet.
"""
from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Callable, Mapping, Optional

from schemas import ModelCapabilities

from .config import MIN_SEGMENT_DURATION

log = logging.getLogger(__name__)


def _caps(model_id: str, display_name: str, provider: str, **kwargs) -> ModelCapabilities:
    return ModelCapabilities(model_id=model_id, display_name=display_name, provider=provider, **kwargs)


_REGISTRY: dict[str, ModelCapabilities] = {
    # Wan
    "wan-2.5-i2v": _caps(
        "wan-2.5-i2v", "Wan 2.5 I2V", "wan",
        max_duration_sec=5, max_prompt_chars=350, supports_dialogue="limited", prompt_style="plain",
        style_tokens=("realistic", "smooth motion", "natural"),
    ),
    "wan-2.5-i2v-fast": _caps(
        "wan-2.5-i2v-fast", "Wan 2.5 I2V Fast", "wan",
        max_duration_sec=5, max_prompt_chars=250, supports_dialogue="limited", prompt_style="plain",
        style_tokens=("smooth", "natural"),
    ),
    # Kling
    "kling-2.5-pro": _caps(
        "kling-2.5-pro", "Kling 2.5 Pro", "kling",
        max_duration_sec=10, max_prompt_chars=600, supports_dialogue="full", prompt_style="cinematic_blocks",
        style_tokens=("cinematic", "ultra-realistic", "high detail", "4K", "film grain"),
    ),
    "kling-2.5-i2v-pro": _caps(
        "kling-2.5-i2v-pro", "Kling 2.5 I2V Pro", "kling",
        max_duration_sec=10, max_prompt_chars=600, supports_dialogue="full", prompt_style="cinematic_blocks",
        style_tokens=("cinematic", "ultra-realistic", "high detail", "4K"),
    ),
    "kling-1.5-pro": _caps(
        "kling-1.5-pro", "Kling 1.5 Pro", "kling",
        max_duration_sec=10, max_prompt_chars=500, supports_dialogue="full", prompt_style="cinematic_blocks",
        style_tokens=("cinematic", "professional"),
    ),
    # Runway
    "runway-gen3": _caps(
        "runway-gen3", "Runway Gen-3 Alpha", "runway",
        max_duration_sec=10, max_prompt_chars=500, supports_dialogue="full", prompt_style="runway_format",
        style_tokens=("cinematic", "photorealistic", "professional", "premium quality"),
        forbidden_words=("violent", "explicit", "gore"),
    ),
    "runway-gen3-turbo": _caps(
        "runway-gen3-turbo", "Runway Gen-3 Turbo", "runway",
        max_duration_sec=10, max_prompt_chars=400, supports_dialogue="full", prompt_style="runway_format",
        style_tokens=("cinematic", "photorealistic"),
        forbidden_words=("violent", "explicit"),
    ),
    # Luma
    "luma-dream-machine": _caps(
        "luma-dream-machine", "Luma Dream Machine", "luma",
        max_duration_sec=5, max_prompt_chars=400, supports_dialogue="full", prompt_style="plain",
        style_tokens=("cinematic", "dreamlike", "smooth", "high fidelity"),
    ),
    "luma-ray-2": _caps(
        "luma-ray-2", "Luma Ray 2", "luma",
        max_duration_sec=9, max_prompt_chars=500, supports_dialogue="full", prompt_style="plain",
        style_tokens=("cinematic", "professional", "realistic"),
    ),
    # MiniMax
    "minimax-video-01": _caps(
        "minimax-video-01", "MiniMax Video-01", "minimax",
        max_duration_sec=6, max_prompt_chars=400, supports_dialogue="limited", prompt_style="plain",
        style_tokens=("cinematic", "high quality"),
    ),
    # PixVerse
    "pixverse-v2": _caps(
        "pixverse-v2", "PixVerse V2", "pixverse",
        max_duration_sec=4, max_prompt_chars=350, supports_dialogue="limited", prompt_style="plain",
        style_tokens=("creative", "vibrant"),
    ),
    "pixverse-v3.5": _caps(
        "pixverse-v3.5", "PixVerse V3.5", "pixverse",
        max_duration_sec=8, max_prompt_chars=400, supports_dialogue="limited", prompt_style="plain",
        style_tokens=("creative", "dynamic", "vibrant"),
    ),
    # Stability
    "stable-video-diffusion": _caps(
        "stable-video-diffusion", "Stable Video Diffusion", "stability",
        max_duration_sec=4, max_prompt_chars=200, supports_dialogue="none", prompt_style="plain",
        style_tokens=("smooth motion", "consistent"),
    ),
    "animatediff-lightning": _caps(
        "animatediff-lightning", "AnimateDiff Lightning", "stability",
        max_duration_sec=2, max_prompt_chars=200, supports_dialogue="none", prompt_style="plain",
        style_tokens=("animated", "stylized"),
    ),
    # OpenAI / Google
    "sora": _caps(
        "sora", "Sora (OpenAI)", "openai",
        max_duration_sec=20, min_duration_sec=5, max_prompt_chars=1000, supports_dialogue="full",
        prompt_style="cinematic_blocks", style_tokens=("cinematic", "photorealistic", "high detail"),
    ),
    "sora-turbo": _caps(
        "sora-turbo", "Sora Turbo (Fast)", "openai",
        max_duration_sec=10, min_duration_sec=3, max_prompt_chars=500, supports_dialogue="full",
        prompt_style="cinematic_blocks", style_tokens=("cinematic", "photorealistic"),
    ),
    "veo-2": _caps(
        "veo-2", "Veo 2 (Google)", "google",
        max_duration_sec=10, min_duration_sec=4, max_prompt_chars=800, supports_dialogue="full",
        prompt_style="plain", style_tokens=("cinematic", "realistic", "high fidelity"),
    ),
    "veo-2-flash": _caps(
        "veo-2-flash", "Veo 2 Flash", "google",
        max_duration_sec=6, max_prompt_chars=400, supports_dialogue="limited",
        prompt_style="plain", style_tokens=("cinematic", "smooth"),
    ),
}

REGISTRY: Mapping[str, ModelCapabilities] = MappingProxyType(_REGISTRY)

DEFAULT_CAPABILITIES = ModelCapabilities(
    model_id="unknown",
    display_name="Unknown Model",
    provider="custom",
    max_duration_sec=5,
    min_duration_sec=MIN_SEGMENT_DURATION,
    max_prompt_chars=300,
    supports_dialogue="limited",
    prompt_style="plain",
    style_tokens=("high quality",),
)

LookupStrategy = Callable[[str, Mapping[str, ModelCapabilities]], Optional[ModelCapabilities]]


def normalize_model_id(model_id: str) -> str:
    return model_id.strip().lower().replace("_", "-")


def _exact_match(normalized: str, registry: Mapping[str, ModelCapabilities]) -> Optional[ModelCapabilities]:
    return registry.get(normalized)


def _partial_match(normalized: str, registry: Mapping[str, ModelCapabilities]) -> Optional[ModelCapabilities]:
    if not normalized:
        return None
    for key, caps in registry.items():
        if key in normalized or normalized in key:
            return caps
    return None


LOOKUP_STRATEGIES: tuple[LookupStrategy, ...] = (_exact_match, _partial_match)


def get_model_capabilities(
    model_id: str,
    registry: Mapping[str, ModelCapabilities] = REGISTRY,
    strategies: tuple[LookupStrategy, ...] = LOOKUP_STRATEGIES,
) -> ModelCapabilities:
    """Resolve ``model_id`` to its capabilities. Never raises."""
    normalized = normalize_model_id(model_id or "")
    for strategy in strategies:
        caps = strategy(normalized, registry)
        if caps is not None:
            return caps

    log.warning("Model not found in registry: %s, using defaults", model_id)
    return DEFAULT_CAPABILITIES.model_copy(update={"model_id": model_id, "display_name": model_id})


def is_known_model(model_id: str) -> bool:
    """True when ``model_id`` resolves without falling back to the default record."""
    normalized = normalize_model_id(model_id or "")
    return any(strategy(normalized, REGISTRY) is not None for strategy in LOOKUP_STRATEGIES)


def has_model(model_id: str) -> bool:
    return normalize_model_id(model_id) in REGISTRY


def list_models() -> list[ModelCapabilities]:
    return list(REGISTRY.values())


def models_by_provider(provider: str) -> list[ModelCapabilities]:
    return [caps for caps in REGISTRY.values() if caps.provider == provider]


def dialogue_mode_for(caps: ModelCapabilities, has_dialogue: bool) -> str:
    """How dialogue is rendered for ``caps``: full, compressed, visual_only or none."""
    if not has_dialogue:
        return "none"
    if caps.supports_dialogue == "full":
        return "full"
    if caps.supports_dialogue == "limited":
        return "compressed"
    return "visual_only"
