from schemas import SceneBreakdown
from vidplan.inline_tags import assign_tags_to_scenes, extract_tags, scene_spans, strip_tags

def test_extract_tags():
    tags = extract_tags("[camera: close-up] [mood: dramatic] John speaks to Mary.")
    assert [(t.type, t.value, t.offset) for t in tags] == [
        ("camera", "close-up", 0),
        ("mood", "dramatic", 19),
    ]

def test_type_lowercased_value_trimmed():
    (tag,) = extract_tags("Intro [Camera:   Wide Shot  ] outro")
    assert tag.type == "camera"
    assert tag.value == "Wide Shot"
    assert tag.offset == 6

def test_malformed_brackets_ignored():
    assert extract_tags("[camera close-up] [: wide] [unclosed: value") == []
    assert extract_tags("") == []

def test_tag_round_trip():
    for kind, value in [("camera", "dolly-in"), ("pace", "very-slow"), ("sfx", "distant thunder")]:
        (tag,) = extract_tags(f"[{kind}: {value}]")
        assert (tag.type, tag.value, tag.offset) == (kind, value, 0)

def test_extraction_is_repeatable():
    text = "[style: noir] A detective waits. [transition: fade]"
    assert extract_tags(text) == extract_tags(text)

def test_strip_tags():
    assert strip_tags("[camera: wide] A quiet   street. [mood: calm]") == "A quiet street."

def _scene(scene_id, length):
    return SceneBreakdown(scene_id=scene_id, summary="a" * length)

def test_scene_spans_scale_to_text():
    spans = scene_spans([_scene("a", 50), _scene("b", 50)], 200)
    assert spans == [(0, 100), (100, 200)]

def test_assign_tags_to_scenes():
    scenes = [_scene("a", 50), _scene("b", 50)]
    text = "[camera: wide]" + " " * 60 + "[mood: calm]" + " " * 14
    tags = extract_tags(text)
    assigned = assign_tags_to_scenes(tags, scenes, len(text))
    assert [t.value for t in assigned["a"]] == ["wide"]
    assert [t.value for t in assigned["b"]] == ["calm"]

def test_tags_past_last_boundary_go_to_last_scene():
    scenes = [_scene("a", 50), _scene("b", 50)]
    tags = extract_tags(" " * 150 + "[fx: time-lapse]")
    assigned = assign_tags_to_scenes(tags, scenes, 100)
    assert assigned["a"] == []
    assert [t.value for t in assigned["b"]] == ["time-lapse"]
