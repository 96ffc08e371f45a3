"""Orchestrates scenario text → timeline and generation plan."""
from __future__ import annotations

import hashlib
import logging
import random
import threading
from typing import Callable, Optional, Sequence

from schemas import (
    InlineTag, ModelCapabilities, PlanOptions, PlanResult, ScenarioBreakdown, TimelineSegment,
)

from .config import DEFAULT_LANGUAGE, DEFAULT_TONE, Config
from .improver import TextImprover, build_improvers
from .inline_tags import assign_tags_to_scenes, extract_tags, strip_tags
from .model_registry import get_model_capabilities
from .plan_assembler import assemble_plan
from .prompt_compiler import build_enhanced_prompt, compile_final_prompt
from .scenario_parser import parse_scenario
from .segment_planner import SegmentDraft, plan_scene
from .tag_mapper import TagMapper

log = logging.getLogger(__name__)

MAX_SEED = 2**31 - 1


class PipelineCancelled(Exception):
    pass


def segment_id_for(scene_id: str, segment_number: int) -> str:
    digest = hashlib.sha1(f"{scene_id}:{segment_number}".encode("utf-8")).hexdigest()
    return f"seg-{digest[:12]}"


def plan_segments(
    breakdown: ScenarioBreakdown,
    inline_tags: Sequence[InlineTag],
    caps: ModelCapabilities,
    text_length: Optional[int] = None,
    mapper: Optional[TagMapper] = None,
) -> list[SegmentDraft]:
    """Plan every scene in order. Scenes are planned independently."""
    mapper = mapper or TagMapper()
    tags_by_scene = assign_tags_to_scenes(inline_tags, breakdown.scenes, text_length or 0)
    drafts: list[SegmentDraft] = []
    for scene in breakdown.scenes:
        drafts.extend(plan_scene(scene, caps, tags_by_scene[scene.scene_id], mapper))
    return drafts


def compile_segments(
    drafts: Sequence[SegmentDraft],
    caps: ModelCapabilities,
    options: PlanOptions,
    improvers: Sequence[TextImprover] = (),
    tone: str = DEFAULT_TONE,
    language: str = DEFAULT_LANGUAGE,
) -> tuple[list[TimelineSegment], list[str]]:
    """Compile final prompts and stamp drafts into numbered timeline segments."""
    segments: list[TimelineSegment] = []
    warnings: list[str] = []

    for number, draft in enumerate(drafts, start=1):
        settings = draft.settings
        enhanced = build_enhanced_prompt(settings.prompt, settings)
        compiled = compile_final_prompt(
            caps.model_id, enhanced, draft.dialogue or None,
            improvers=improvers, tone=tone, language=language, caps=caps,
        )
        warnings.extend(compiled.warnings)

        if options.seed is not None:
            seed = options.seed + number - 1
        else:
            seed = random.randint(0, MAX_SEED)

        if number > 1 and options.enable_frame_chaining:
            first_frame_mode = "auto"
        else:
            first_frame_mode = "none"

        data = settings.model_dump()
        data.update(
            seed=seed,
            first_frame_mode=first_frame_mode,
            model_id=caps.model_id,
            segment_id=segment_id_for(draft.scene_id, number),
            segment_number=number,
            scene_id=draft.scene_id,
            allotted_duration_sec=draft.allotted_duration_sec,
            final_prompt=compiled.final_prompt,
            dialogue=compiled.dialogue_text or None,
            dialogue_handling_mode=compiled.dialogue_mode,
            continuity_notes=draft.continuity_notes,
        )
        segments.append(TimelineSegment(**data))

    return segments, list(dict.fromkeys(warnings))


def plan_timeline(
    breakdown: ScenarioBreakdown,
    inline_tags: Sequence[InlineTag],
    model_id: str,
    options: Optional[PlanOptions] = None,
    *,
    improvers: Sequence[TextImprover] = (),
    text_length: Optional[int] = None,
    target_duration_sec: Optional[float] = None,
    tone: str = DEFAULT_TONE,
    language: str = DEFAULT_LANGUAGE,
    mapper: Optional[TagMapper] = None,
) -> PlanResult:
    """Turn a scene breakdown and its inline tags into a timeline and plan.

    ``text_length`` is the length of the source text the tag offsets refer
    to. Raises ``ValueError`` when the breakdown has no scenes or the model id
    is empty; every other degradation ends up in ``warnings``.
    """
    if not breakdown.scenes:
        raise ValueError("Scenario breakdown contains no scenes.")
    if not model_id or not model_id.strip():
        raise ValueError("Target model id is required.")

    options = options or PlanOptions()
    caps = get_model_capabilities(model_id)

    drafts = plan_segments(breakdown, inline_tags, caps, text_length, mapper)
    segments, warnings = compile_segments(drafts, caps, options, improvers, tone, language)

    timeline, plan, warnings = assemble_plan(
        segments,
        scenario_id=breakdown.scenario_id,
        model_ids=[caps.model_id],
        options=options,
        target_duration_sec=target_duration_sec,
        global_style=breakdown.global_style,
        warnings=[*breakdown.warnings, *warnings],
    )
    return PlanResult(timeline=timeline, plan=plan, breakdown=breakdown, warnings=warnings)


class PlanningPipeline:
    """Scenario planning pipeline with progress reporting and cancellation."""

    def __init__(
        self,
        config: Config,
        progress_cb: Callable[[str], None] | None = None,
        improvers: Sequence[TextImprover] | None = None,
    ):
        self.config = config
        self.progress_cb = progress_cb or (lambda msg: None)
        self.improvers = list(improvers) if improvers is not None else build_improvers(config)
        self.mapper = TagMapper()
        self._cancelled = threading.Event()
        self._text = ""
        self._breakdown: ScenarioBreakdown | None = None
        self._tags: list[InlineTag] = []
        self._caps: ModelCapabilities | None = None
        self._drafts: list[SegmentDraft] = []
        self._segments: list[TimelineSegment] = []
        self._warnings: list[str] = []

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def _check_cancel(self) -> None:
        if self._cancelled.is_set():
            raise PipelineCancelled("Pipeline cancelled by user.")

    @property
    def breakdown(self) -> ScenarioBreakdown | None:
        return self._breakdown

    @property
    def segments(self) -> list[TimelineSegment]:
        return self._segments

    def step_parse(self, scenario_text: str) -> ScenarioBreakdown:
        """Stage 1: Break the scenario into scenes."""
        self.progress_cb("📝 Stage 1/5: Parsing scenario...")
        self._check_cancel()

        self._text = scenario_text
        self._breakdown, notes = parse_scenario(strip_tags(scenario_text), self.config.language)
        for note in notes:
            self.progress_cb(f"  {note}")
        for scene in self._breakdown.scenes:
            self.progress_cb(
                f"  Scene {scene.scene_number}: ~{scene.duration_estimate_sec:.0f}s: {scene.summary[:60]}"
            )
        return self._breakdown

    def step_extract_tags(self, scenario_text: str) -> list[InlineTag]:
        """Stage 2: Collect inline directive tags."""
        self.progress_cb("🏷  Stage 2/5: Extracting inline tags...")
        self._check_cancel()

        self._tags = extract_tags(scenario_text)
        if self._tags:
            self.progress_cb("  " + ", ".join(f"[{t.type}: {t.value}]" for t in self._tags))
        else:
            self.progress_cb("  No inline tags found")
        return self._tags

    def step_plan_segments(self, model_id: str) -> list[SegmentDraft]:
        """Stage 3: Split scenes into model-sized segments."""
        self.progress_cb("🎬 Stage 3/5: Planning segments...")
        self._check_cancel()
        if self._breakdown is None:
            raise RuntimeError("step_parse must run before step_plan_segments")

        self._caps = get_model_capabilities(model_id)
        self._drafts = plan_segments(self._breakdown, self._tags, self._caps, len(self._text), self.mapper)
        self.progress_cb(
            f"  {len(self._drafts)} segment(s) for {self._caps.display_name} "
            f"(max {self._caps.max_duration_sec}s each)"
        )
        return self._drafts

    def step_compile_prompts(self, options: PlanOptions) -> list[TimelineSegment]:
        """Stage 4: Compile model-specific prompts."""
        self.progress_cb("✍️  Stage 4/5: Compiling prompts...")
        self._check_cancel()
        if self._caps is None:
            raise RuntimeError("step_plan_segments must run before step_compile_prompts")

        if self.improvers:
            self.progress_cb(f"  Using LLM improvers: {', '.join(i.name for i in self.improvers)}")
        self._segments, self._warnings = compile_segments(
            self._drafts, self._caps, options, self.improvers, self.config.tone, self.config.language,
        )
        for seg in self._segments:
            self.progress_cb(f"  #{seg.segment_number} [{seg.duration_sec}s] {seg.final_prompt[:70]}")
        return self._segments

    def step_assemble(self, target_duration_sec: float | None, options: PlanOptions) -> PlanResult:
        """Stage 5: Assemble the timeline and execution plan."""
        self.progress_cb("📦 Stage 5/5: Assembling plan...")
        self._check_cancel()

        timeline, plan, warnings = assemble_plan(
            self._segments,
            scenario_id=self._breakdown.scenario_id,
            model_ids=[self._caps.model_id],
            options=options,
            target_duration_sec=target_duration_sec,
            global_style=self._breakdown.global_style,
            warnings=[*self._breakdown.warnings, *self._warnings],
        )
        for warning in warnings:
            self.progress_cb(f"  ⚠ {warning}")
        return PlanResult(timeline=timeline, plan=plan, breakdown=self._breakdown, warnings=warnings)

    def run(
        self,
        scenario_text: str,
        model_id: str,
        target_duration_sec: float | None = None,
        options: PlanOptions | None = None,
    ) -> PlanResult:
        """Run all stages and return the assembled plan."""
        if not scenario_text or not scenario_text.strip():
            raise ValueError("Scenario text is empty.")
        if not model_id or not model_id.strip():
            raise ValueError("Target model id is required.")
        options = options or PlanOptions()

        log.info("Planning scenario (%d chars) for %s", len(scenario_text), model_id)
        self.step_parse(scenario_text)
        self.step_extract_tags(scenario_text)
        self.step_plan_segments(model_id)
        self.step_compile_prompts(options)
        result = self.step_assemble(target_duration_sec, options)

        self.progress_cb(
            f"\n✅ {result.timeline.segment_count} segment(s), "
            f"{result.timeline.total_duration_sec:.0f}s total"
        )
        return result
