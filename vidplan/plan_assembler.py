"""Wrap planned segments into a timeline and an execution plan."""
from __future__ import annotations

import hashlib
import logging
from datetime import datetime, timezone
from typing import Mapping, Optional, Sequence

from schemas import (
    ContinuitySettings, GeneratedTimeline, PlanOptions, PlanProgress, TimelineSegment, VideoGenerationPlan,
)

from .config import LARGE_PLAN_SEGMENTS, SECONDS_PER_SEGMENT_ESTIMATE

log = logging.getLogger(__name__)


def _plan_ids(scenario_id: str, segments: Sequence[TimelineSegment]) -> tuple[str, str]:
    digest = hashlib.sha1(
        "|".join([scenario_id, *(s.segment_id for s in segments)]).encode("utf-8")
    ).hexdigest()[:12]
    return f"timeline-{digest}", f"plan-{digest}"


def assemble_plan(
    segments: Sequence[TimelineSegment],
    *,
    scenario_id: str,
    model_ids: Sequence[str],
    options: Optional[PlanOptions] = None,
    target_duration_sec: Optional[float] = None,
    global_style: Optional[Mapping[str, str]] = None,
    warnings: Sequence[str] = (),
) -> tuple[GeneratedTimeline, VideoGenerationPlan, list[str]]:
    """Build the timeline and plan around ``segments`` without touching them.

    The timeline total is the sum of segment durations. A total that misses
    ``target_duration_sec`` is reported as a warning, never corrected.
    """
    options = options or PlanOptions()
    all_warnings = list(warnings)

    total = sum(s.duration_sec for s in segments)
    models_used = list(dict.fromkeys(model_ids))
    style_lock = {k: v for k, v in (global_style or {}).items() if v}
    continuity = ContinuitySettings(
        character_consistency=options.character_consistency,
        lighting_consistency=options.style_consistency,
        style_consistency=options.style_consistency,
    )

    if len(segments) > LARGE_PLAN_SEGMENTS:
        all_warnings.append(f"Large plan with {len(segments)} segments. Generation may take a long time.")
    if target_duration_sec is not None and total != target_duration_sec:
        all_warnings.append(f"Actual duration ({total}s) differs from target ({target_duration_sec:g}s)")

    timeline_id, plan_id = _plan_ids(scenario_id, segments)

    timeline = GeneratedTimeline(
        timeline_id=timeline_id,
        scenario_id=scenario_id,
        total_duration_sec=total,
        segment_count=len(segments),
        segments=list(segments),
        models_used=models_used,
        global_style_lock=style_lock,
        continuity_settings=continuity,
        warnings=all_warnings,
        created_at=datetime.now(timezone.utc).isoformat(),
    )

    plan = VideoGenerationPlan(
        plan_id=plan_id,
        timeline_id=timeline_id,
        execution_order=[s.segment_id for s in segments],
        models_used=models_used,
        estimated_generation_time_sec=len(segments) * SECONDS_PER_SEGMENT_ESTIMATE,
        frame_chaining_enabled=options.enable_frame_chaining,
        global_style_lock=style_lock,
        continuity_settings=continuity,
        progress=PlanProgress(total_segments=len(segments)),
    )

    log.info("Assembled %s: %d segment(s), %ss total", timeline_id, len(segments), total)
    return timeline, plan, all_warnings
