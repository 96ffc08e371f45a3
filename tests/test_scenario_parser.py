import pytest
from vidplan.scenario_parser import (
    detect_visual_style, estimate_duration, extract_camera_suggestions, extract_dialogue, parse_scenario,
    split_into_scenes,
)

SCRIPT = """SCENE 1: Harbor
The ship docks at dawn.

SCENE 2: Market
Mary: "Fresh fish!"
(she waves)
"""

def test_scene_markers():
    breakdown, notes = parse_scenario(SCRIPT)
    assert breakdown.scene_count == 2
    first, second = breakdown.scenes

    assert first.title == "Harbor"
    assert first.time_of_day == "dawn"
    assert first.summary == "The ship docks at dawn."
    assert first.transition_to_next == "cut"
    assert first.duration_estimate_sec == 5

    assert second.title == "Market"
    assert [(d.character, d.line) for d in second.dialogue_blocks] == [("Mary", "Fresh fish!")]
    assert second.actions == ["she waves"]
    assert second.characters == ["Mary"]
    assert second.duration_estimate_sec == 10
    assert second.transition_to_next is None

    assert breakdown.total_duration_sec == 15
    assert notes[0] == "Detected 2 scene(s)"

def test_ids_are_deterministic():
    first, _ = parse_scenario(SCRIPT)
    second, _ = parse_scenario(SCRIPT)
    other, _ = parse_scenario(SCRIPT + "\nSCENE 3: Night\nThe lamps go out.")
    assert first == second
    assert first.scenario_id != other.scenario_id
    assert len({s.scene_id for s in first.scenes}) == 2

def test_empty_text():
    with pytest.raises(ValueError):
        parse_scenario("  \n ")

def test_paragraph_grouping():
    text = "the sun rises.\n\nbirds sing.\n\nwind blows.\n\nnight falls."
    assert split_into_scenes(text) == ["the sun rises.\n\nbirds sing.\n\nwind blows.", "night falls."]

def test_horizontal_rule_split():
    text = "the sun rises.\n---\nnight falls."
    assert len(split_into_scenes(text)) == 2

def test_dialogue_emotion():
    (block,) = extract_dialogue('Ann: "I knew it (angry)"')
    assert block.character == "Ann"
    assert block.line == "I knew it"
    assert block.emotion == "angry"

def test_duration_estimate_clamped():
    assert estimate_duration(0, 0, "") == 5
    assert estimate_duration(2, 1, "x" * 250) == 5 + 6 + 2 + 4
    assert estimate_duration(30, 0, "") == 60

def test_camera_and_style_detection():
    assert [c.type for c in extract_camera_suggestions("A slow pan across the bay")] == ["pan"]
    assert [c.type for c in extract_camera_suggestions("Nothing special")] == ["static"]
    assert detect_visual_style("A dark alley") == "Dark and moody, high contrast"
    assert detect_visual_style("A field") == "Cinematic, professional quality"

def test_long_scenario_warnings():
    many = "\n".join(f"SCENE {i}:\nA hill." for i in range(1, 53))
    breakdown, _ = parse_scenario(many)
    assert breakdown.scene_count == 52
    assert any("Very long scenario" in w for w in breakdown.warnings)

    chatty = "\n".join(
        f"SCENE {i}:\n" + "\n".join(f'Bob: "Line {j}"' for j in range(20)) for i in range(1, 12)
    )
    breakdown, _ = parse_scenario(chatty)
    assert breakdown.total_duration_sec == 11 * 60
    assert any("exceeds typical limits" in w for w in breakdown.warnings)

def test_global_style():
    breakdown, _ = parse_scenario("A tense standoff in a dark warehouse.")
    assert breakdown.global_style == {"genre": "Dark and moody", "mood": "tense"}

def test_header_titles():
    breakdown, _ = parse_scenario("INT. KITCHEN - DAY\nTom cooks.\nSCENE 2 - Garden\nRoses bloom.")
    assert [s.title for s in breakdown.scenes] == ["KITCHEN - DAY", "Garden"]

def test_scene_words_are_not_headers():
    text = "Scenery rolls past the window.\nScenes like this never last."
    assert split_into_scenes(text) == [text]
    breakdown, _ = parse_scenario(text)
    assert breakdown.scenes[0].title is None
