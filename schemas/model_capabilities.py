from pydantic import BaseModel, ConfigDict, Field
from typing import Literal, Tuple

DialogueSupport = Literal["full", "limited", "none"]
PromptStyle = Literal["plain", "cinematic_blocks", "runway_format"]


class ModelCapabilities(BaseModel):
    """Static limits and prompt-formatting rules for one video generation model."""
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_id: str
    display_name: str
    provider: str = "custom"
    max_duration_sec: int = Field(..., gt=0, description="Longest clip the model renders in one call")
    min_duration_sec: int = Field(default=2, gt=0, description="Shortest clip the model accepts")
    max_prompt_chars: int = Field(..., gt=3, description="Hard prompt length budget")
    supports_dialogue: DialogueSupport = "limited"
    prompt_style: PromptStyle = "plain"
    style_tokens: Tuple[str, ...] = ()
    forbidden_words: Tuple[str, ...] = ()
