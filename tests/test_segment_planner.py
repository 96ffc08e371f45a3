import pytest
from schemas import CameraSuggestion, DialogueBlock, InlineTag, ModelCapabilities, SceneBreakdown
from vidplan.model_registry import list_models
from vidplan.segment_planner import optimal_duration, plan_scene, segment_count_for, split_evenly

@pytest.fixture
def caps5():
    return ModelCapabilities(model_id="test-5s", display_name="Test 5s", max_duration_sec=5, max_prompt_chars=300)

def _scene(**kwargs):
    data = {"scene_id": "scene-1", "summary": "A lighthouse keeper climbs the stairs at night."}
    data.update(kwargs)
    return SceneBreakdown(**data)

def test_twelve_second_scene_on_five_second_model(caps5):
    drafts = plan_scene(_scene(duration_estimate_sec=12), caps5)
    assert len(drafts) == 3
    assert [d.allotted_duration_sec for d in drafts] == [4.0, 4.0, 4.0]
    assert sum(d.allotted_duration_sec for d in drafts) == pytest.approx(12)

def test_zero_duration_scene(caps5):
    drafts = plan_scene(_scene(duration_estimate_sec=0), caps5)
    assert len(drafts) == 1
    assert caps5.min_duration_sec <= drafts[0].settings.duration_sec <= caps5.max_duration_sec

def test_segment_count_formula():
    assert segment_count_for(0, 5) == 1
    assert segment_count_for(5, 5) == 1
    assert segment_count_for(5.1, 5) == 2
    assert segment_count_for(60, 4) == 15

def test_split_evenly():
    assert split_evenly([1, 2, 3, 4], 3) == [[1, 2], [3, 4], []]
    assert split_evenly([], 2) == [[], []]
    assert split_evenly([1, 2, 3], 1) == [[1, 2, 3]]

def test_dialogue_and_actions_distributed(caps5):
    scene = _scene(
        duration_estimate_sec=15,
        dialogue_blocks=[DialogueBlock(character="Mary", line=f"Line {i}") for i in range(4)],
        actions=["opens the door", "looks outside", "steps back"],
    )
    drafts = plan_scene(scene, caps5)
    assert [len(d.dialogue_lines) for d in drafts] == [2, 2, 0]
    assert drafts[0].dialogue == 'Mary: "Line 0"\nMary: "Line 1"'
    assert [d.dialogue_mode for d in drafts] == ["compressed", "compressed", "none"]
    assert "opens the door" in drafts[0].settings.prompt
    assert "looks outside" in drafts[1].settings.prompt
    assert "steps back" in drafts[2].settings.prompt

def test_durations_within_model_bounds():
    scene = _scene(
        duration_estimate_sec=30,
        summary="x" * 400,
        dialogue_blocks=[DialogueBlock(character="A", line="Hi")] * 6,
    )
    for tags in ([], [InlineTag(type="pace", value="very-slow", offset=0)], [InlineTag(type="pace", value="fast", offset=0)]):
        for caps in list_models():
            for draft in plan_scene(scene, caps, tags):
                assert caps.min_duration_sec <= draft.settings.duration_sec <= caps.max_duration_sec

def test_optimal_duration(caps5):
    caps10 = caps5.model_copy(update={"max_duration_sec": 10})
    slow = [InlineTag(type="pace", value="slow", offset=0)]
    fast = [InlineTag(type="pace", value="fast", offset=0)]
    assert optimal_duration(100, False, [], caps10) == 3
    assert optimal_duration(1000, False, [], caps10) == 5
    assert optimal_duration(100, True, [], caps10) == 5
    assert optimal_duration(100, True, slow, caps10) == 8
    assert optimal_duration(1000, False, fast, caps10) == 4
    assert optimal_duration(100, True, slow, caps5) == 5

def test_transitions(caps5):
    drafts = plan_scene(_scene(duration_estimate_sec=12), caps5)
    assert [d.settings.transition for d in drafts] == ["cut", "cut", "fade"]
    drafts = plan_scene(_scene(duration_estimate_sec=12, transition_to_next="dissolve"), caps5)
    assert drafts[-1].settings.transition == "dissolve"

def test_camera_from_scene_suggestion(caps5):
    drafts = plan_scene(_scene(camera_suggestions=[CameraSuggestion(type="dolly")]), caps5)
    assert drafts[0].settings.camera == "dolly-in"

def test_precedence_in_planned_segment(caps5):
    scene = _scene(summary="They run along the pier", emotions=["calm"])
    (plain,) = plan_scene(scene, caps5)
    assert plain.settings.motion == "fast"

    (tagged,) = plan_scene(scene, caps5, [InlineTag(type="motion", value="slow", offset=0)])
    assert tagged.settings.motion == "slow"
    assert tagged.settings.tag_metadata == {"motion": "slow"}

def test_scene_motion_default(caps5):
    (draft,) = plan_scene(_scene(summary="An empty room", emotions=["tense"]), caps5)
    assert draft.settings.motion == "slow"

def test_planning_is_independent_of_other_scenes(caps5):
    first = _scene(scene_id="a", duration_estimate_sec=9)
    second = _scene(scene_id="b", summary="A storm rolls in.", duration_estimate_sec=7)
    alone = plan_scene(second, caps5)
    plan_scene(first, caps5)
    again = plan_scene(second, caps5)
    assert [d.settings for d in alone] == [d.settings for d in again]
