"""Scenario segmentation and timeline planning for AI video models."""
from .model_registry import get_model_capabilities
from .pipeline import PlanningPipeline, plan_timeline
from .prompt_compiler import compile_final_prompt

__all__ = ["get_model_capabilities", "PlanningPipeline", "plan_timeline", "compile_final_prompt"]
