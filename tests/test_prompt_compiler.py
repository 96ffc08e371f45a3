import pytest
from schemas import SegmentSettings
from vidplan.model_registry import get_model_capabilities, list_models
from vidplan.prompt_compiler import (
    DIALOGUE_COMPRESSED, DIALOGUE_TO_VISUAL, FINAL_TRUNCATED, IMPROVEMENT_FAILED, SCENE_TRUNCATED,
    build_enhanced_prompt, clean_prompt, compile_final_prompt, enhance_by_style, format_dialogue, truncate_prompt,
)

class FailingImprover:
    name = "failing"

    def improve(self, text, style, tone, language):
        raise TimeoutError("took too long")

class FixedImprover:
    name = "fixed"

    def __init__(self, text):
        self.text = text

    def improve(self, text, style, tone, language):
        return self.text

def test_truncation_law():
    for text in ["", "short", "x" * 199, "x" * 200, "x" * 201, "word " * 500]:
        for limit in (4, 10, 200, 1000):
            out = truncate_prompt(text, limit)
            assert len(out) <= limit
            if len(text) <= limit:
                assert out == text
            else:
                assert out.endswith("...")
                assert out[:-3] == text[:limit - 3]

def test_build_enhanced_prompt():
    settings = SegmentSettings(camera="close-up", motion="cinematic", lighting="neon", emotion="dramatic")
    assert build_enhanced_prompt("A rainy alley.", settings) == (
        "A rainy alley. neon lighting. close-up shot. cinematic motion. cinematic style. dramatic atmosphere."
    )

def test_build_enhanced_prompt_skips_defaults():
    settings = SegmentSettings(camera="static", motion="none", style_preset="none")
    assert build_enhanced_prompt("A rainy alley", settings) == "A rainy alley."

def test_plain_style():
    caps = get_model_capabilities("wan-2.5-i2v")
    assert enhance_by_style("a dog runs", caps) == "A dog runs. cinematic atmosphere."
    assert enhance_by_style("dog runs", caps) == "A dog runs. cinematic atmosphere."
    assert enhance_by_style("the dog runs", caps, tone="documentary") == "The dog runs. documentary style atmosphere."
    assert enhance_by_style("A dog runs in a calm mood", caps) == "A dog runs in a calm mood"

def test_runway_style():
    caps = get_model_capabilities("runway-gen3")
    assert enhance_by_style("A man walks", caps) == "Wide shot. A man walks. Subtle natural motion."

def test_cinematic_blocks_style():
    caps = get_model_capabilities("kling-2.5-pro")
    out = enhance_by_style("A knight rides", caps)
    assert out.startswith("Cinematic scene. A knight rides. Smooth camera movement.")
    assert "Style: ultra-realistic, high detail, 4K." in out

def test_clean_prompt():
    assert clean_prompt("A  cat.. sits . .  here...") == "A cat. sits . here..."
    assert clean_prompt("Scene.\n\n\n\nDialogue:\nA: \"hi\"", keep_newlines=True) == "Scene.\n\nDialogue:\nA: \"hi\""

def test_format_dialogue_modes():
    full = get_model_capabilities("kling-2.5-pro")
    limited = get_model_capabilities("wan-2.5-i2v")
    none = get_model_capabilities("stable-video-diffusion")

    text, mode, warning = format_dialogue('Mary: "Hello"\nI love you', full)
    assert mode == "full" and warning is None
    assert text == '\n\nDialogue:\nMary: "Hello"\nCharacter: "I love you"'

    text, mode, warning = format_dialogue('Mary: "Hello"\nJohn: "Hi"', limited)
    assert (mode, warning) == ("compressed", DIALOGUE_COMPRESSED)
    assert text == '. Characters speak: "Hello, Hi"'

    text, mode, warning = format_dialogue('Mary: "Hello"\nJohn: "Hi"', none)
    assert (mode, warning) == ("visual_only", DIALOGUE_TO_VISUAL)
    assert text == ". Characters converse, expressions animated."

    assert format_dialogue("", full) == ("", "none", None)

def test_compressed_dialogue_capped():
    limited = get_model_capabilities("wan-2.5-i2v")
    text, _, _ = format_dialogue("Mary: " + "la " * 60, limited)
    content = text[len('. Characters speak: "'):-1]
    assert content.endswith("...")
    assert len(content) == 103

def test_dialogue_not_supported_is_visual_only():
    compiled = compile_final_prompt("stable-video-diffusion", "Mary stands by the window.", 'Mary: "Hello"')
    assert compiled.dialogue_mode == "visual_only"
    assert "Hello" not in compiled.final_prompt
    assert "Hello" not in compiled.dialogue_text
    assert "Character speaks" in compiled.final_prompt
    assert DIALOGUE_TO_VISUAL in compiled.warnings

def test_full_dialogue_block_kept():
    compiled = compile_final_prompt("kling-2.5-pro", "Mary stands by the window.", 'Mary: "Hello"')
    assert compiled.dialogue_mode == "full"
    assert 'Dialogue:\nMary: "Hello"' in compiled.final_prompt
    assert compiled.dialogue_text == 'Dialogue:\nMary: "Hello"'

def test_final_prompt_fits_every_model():
    scene = "A sprawling neon city at night with crowds and rain. " * 40
    dialogue = "\n".join(f'Speaker{i}: "This is a fairly long line of dialogue number {i}"' for i in range(20))
    for caps in list_models():
        compiled = compile_final_prompt(caps.model_id, scene, dialogue)
        assert compiled.length_chars <= caps.max_prompt_chars
        assert compiled.was_truncated
        assert SCENE_TRUNCATED in compiled.warnings

def test_final_truncation_warning():
    compiled = compile_final_prompt("kling-2.5-pro", "A knight rides. " * 30, 'Mary: "' + "words " * 40 + '"')
    assert FINAL_TRUNCATED in compiled.warnings
    assert compiled.final_prompt.endswith("...")
    assert len(compiled.final_prompt) <= 600

def test_forbidden_words_removed():
    compiled = compile_final_prompt("runway-gen3", "Wide shot. A Violent storm hits the gore-free coast, violently.")
    assert "violent " not in compiled.final_prompt.lower()
    assert "violently" in compiled.final_prompt
    assert "gore" not in compiled.final_prompt.split()

def test_improver_failure_falls_back():
    baseline = compile_final_prompt("wan-2.5-i2v", "a lantern glows in the fog")
    compiled = compile_final_prompt("wan-2.5-i2v", "a lantern glows in the fog", improvers=[FailingImprover()])
    assert compiled.final_prompt == baseline.final_prompt
    assert IMPROVEMENT_FAILED in compiled.warnings
    assert IMPROVEMENT_FAILED not in baseline.warnings

def test_improver_success():
    compiled = compile_final_prompt(
        "wan-2.5-i2v", "a lantern glows in the fog",
        improvers=[FailingImprover(), FixedImprover("A brass lantern glowing through thick fog")],
    )
    assert compiled.final_prompt.startswith("A brass lantern glowing through thick fog")
    assert IMPROVEMENT_FAILED not in compiled.warnings

@pytest.mark.parametrize("model_id", ["kling-2.5-pro", "runway-gen3", "luma-dream-machine", "unknown-model"])
def test_compile_is_deterministic(model_id):
    first = compile_final_prompt(model_id, "A boat drifts at dawn.", 'Ann: "Look"')
    second = compile_final_prompt(model_id, "A boat drifts at dawn.", 'Ann: "Look"')
    assert first == second
