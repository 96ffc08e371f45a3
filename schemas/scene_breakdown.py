from pydantic import BaseModel, Field
from typing import Dict, List, Literal, Optional

CameraSuggestionType = Literal["static", "pan", "dolly", "crane", "tracking", "zoom", "orbit", "handheld"]
SceneTransition = Literal["cut", "fade", "dissolve", "wipe", "morph"]


class DialogueBlock(BaseModel):
    character: str
    line: str
    emotion: Optional[str] = None


class CameraSuggestion(BaseModel):
    type: CameraSuggestionType = "static"
    direction: Optional[str] = None
    speed: Optional[Literal["slow", "medium", "fast"]] = None
    notes: Optional[str] = None


class SceneBreakdown(BaseModel):
    """One narrative unit produced by the scene parser. Read-only to the planner."""
    scene_id: str
    scene_number: int = 1
    title: Optional[str] = None
    duration_estimate_sec: float = Field(default=5.0, ge=0, description="Estimated on-screen time")
    summary: str = ""
    environment: str = ""
    characters: List[str] = Field(default_factory=list)
    dialogue_blocks: List[DialogueBlock] = Field(default_factory=list)
    actions: List[str] = Field(default_factory=list)
    emotions: List[str] = Field(default_factory=list)
    visual_style: str = "Cinematic, professional quality"
    lighting: Optional[str] = None
    time_of_day: Optional[str] = None
    camera_suggestions: List[CameraSuggestion] = Field(default_factory=list)
    transition_to_next: Optional[SceneTransition] = None
    continuity_notes: Optional[str] = None


class CharacterProfile(BaseModel):
    name: str
    description: str = "Character appearing in the scenario"
    visual_notes: Optional[str] = None


class ScenarioBreakdown(BaseModel):
    """Ordered scenes for a whole scenario plus scenario-wide style hints."""
    scenario_id: str
    title: str = "Untitled Scenario"
    total_duration_sec: float = 0.0
    scene_count: int = 0
    scenes: List[SceneBreakdown]
    global_style: Dict[str, str] = Field(default_factory=dict, description="genre, mood, color_palette")
    characters: List[CharacterProfile] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
