from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Literal, Optional

Motion = Literal["smooth", "slow", "dynamic", "jitter", "none", "fast", "cinematic"]
Camera = Literal[
    "static", "close-up", "wide", "dolly-in", "dolly-out", "tracking",
    "fpv", "crane", "pan", "tilt", "orbit", "handheld",
]
Transition = Literal["fade", "cut", "cross", "dissolve", "wipe", "none"]
StylePreset = Literal["none", "cinematic", "realistic", "dreamy", "anime", "vintage", "noir"]
FirstFrameMode = Literal["auto", "manual", "none"]
DialogueHandlingMode = Literal["full", "compressed", "visual_only", "none"]
SegmentStatus = Literal["pending", "generating", "generated", "error"]


class InlineTag(BaseModel):
    """A ``[type: value]`` directive found at ``offset`` in the scenario text."""
    model_config = ConfigDict(frozen=True)

    type: str
    value: str
    offset: int = Field(default=0, ge=0)


class SegmentSettings(BaseModel):
    """Working record built for one output segment before it is stamped."""
    model_config = ConfigDict(protected_namespaces=())

    prompt: str = ""
    negative_prompt: str = ""
    duration_sec: int = Field(default=5, gt=0)
    motion: Motion = "smooth"
    camera: Camera = "static"
    transition: Transition = "cut"
    style_preset: StylePreset = "cinematic"
    enhance_enabled: bool = False
    seed: Optional[int] = None
    model_id: str = ""
    first_frame_mode: FirstFrameMode = "none"
    inline_tags: List[InlineTag] = Field(default_factory=list)
    tag_metadata: Dict[str, str] = Field(default_factory=dict)
    lighting: Optional[str] = None
    emotion: Optional[str] = None
    sfx_cue: Optional[str] = None


class TimelineSegment(SegmentSettings):
    """Finalized, model-stamped segment handed to persistence and execution."""
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    segment_id: str
    segment_number: int = Field(..., ge=1)
    scene_id: str
    allotted_duration_sec: float = Field(default=0.0, description="Time-sliced share of the scene estimate")
    final_prompt: str
    dialogue: Optional[str] = Field(None, description="Dialogue as rendered for the target model")
    dialogue_handling_mode: DialogueHandlingMode = "none"
    continuity_notes: Optional[str] = None
    status: SegmentStatus = "pending"
