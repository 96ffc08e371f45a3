from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Literal, Optional

from .scene_breakdown import ScenarioBreakdown
from .segment import TimelineSegment


class PlanOptions(BaseModel):
    enable_frame_chaining: bool = True
    style_consistency: bool = True
    character_consistency: bool = True
    seed: Optional[int] = Field(None, description="Base seed; segment n gets seed + n - 1")


class ContinuitySettings(BaseModel):
    """Advisory consistency hints for the execution side. Not enforced here."""
    model_config = ConfigDict(frozen=True)

    character_consistency: bool = True
    lighting_consistency: bool = True
    style_consistency: bool = True


class PlanProgress(BaseModel):
    model_config = ConfigDict(frozen=True)

    completed_segments: int = 0
    total_segments: int = 0
    current_segment_id: Optional[str] = None


class GeneratedTimeline(BaseModel):
    model_config = ConfigDict(frozen=True)

    timeline_id: str
    scenario_id: str
    total_duration_sec: float = Field(..., description="Sum of segment durations")
    segment_count: int
    segments: List[TimelineSegment]
    models_used: List[str] = Field(default_factory=list)
    global_style_lock: Dict[str, str] = Field(default_factory=dict)
    continuity_settings: ContinuitySettings = Field(default_factory=ContinuitySettings)
    warnings: List[str] = Field(default_factory=list)
    created_at: str


class VideoGenerationPlan(BaseModel):
    """Execution manifest consumed by the generation worker."""
    model_config = ConfigDict(frozen=True)

    plan_id: str
    timeline_id: str
    execution_order: List[str] = Field(..., description="Segment ids in planner order")
    models_used: List[str] = Field(default_factory=list)
    estimated_generation_time_sec: int = 0
    frame_chaining_enabled: bool = True
    global_style_lock: Dict[str, str] = Field(default_factory=dict)
    continuity_settings: ContinuitySettings = Field(default_factory=ContinuitySettings)
    status: Literal["pending", "running", "paused", "completed", "failed"] = "pending"
    progress: PlanProgress = Field(default_factory=PlanProgress)


class PlanResult(BaseModel):
    timeline: GeneratedTimeline
    plan: VideoGenerationPlan
    breakdown: Optional[ScenarioBreakdown] = None
    warnings: List[str] = Field(default_factory=list)


class ScenarioImprovement(BaseModel):
    improved_scenario: str
    original_length: int
    improved_length: int
    changes_made: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    estimated_duration_sec: float = 0.0
    scene_count_estimate: int = 0
