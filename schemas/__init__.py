from .model_capabilities import ModelCapabilities, DialogueSupport, PromptStyle
from .scene_breakdown import (
    CameraSuggestion, CharacterProfile, DialogueBlock, SceneBreakdown, ScenarioBreakdown,
)
from .segment import InlineTag, SegmentSettings, TimelineSegment
from .generation_plan import (
    ContinuitySettings, GeneratedTimeline, PlanOptions, PlanProgress, PlanResult,
    ScenarioImprovement, VideoGenerationPlan,
)

__all__ = [
    "ModelCapabilities", "DialogueSupport", "PromptStyle",
    "CameraSuggestion", "CharacterProfile", "DialogueBlock", "SceneBreakdown", "ScenarioBreakdown",
    "InlineTag", "SegmentSettings", "TimelineSegment",
    "ContinuitySettings", "GeneratedTimeline", "PlanOptions", "PlanProgress", "PlanResult",
    "ScenarioImprovement", "VideoGenerationPlan",
]
