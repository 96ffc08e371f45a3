import json

import pytest
import vidplan.config as config_mod
from vidplan.main import build_parser, main

@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    monkeypatch.setattr(config_mod, "CONFIG_DIR", tmp_path / "home")
    monkeypatch.setattr(config_mod, "CONFIG_FILE", tmp_path / "home" / "config.json")
    monkeypatch.setattr(config_mod, "LOG_FILE", tmp_path / "home" / "vidplan.log")
    for var in ("HF_TOKEN", "GEMINI_API_KEY", "VIDPLAN_IMPROVER"):
        monkeypatch.delenv(var, raising=False)

def test_parser_flags():
    args = build_parser().parse_args(["--text", "A scene", "--seed", "7", "--no-frame-chaining", "--no-llm"])
    assert args.text == "A scene"
    assert args.seed == 7
    assert args.no_frame_chaining
    assert args.no_llm
    assert args.model is None

def test_text_and_scenario_are_exclusive():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--text", "a", "--scenario", "b.txt"])

def test_list_models(capsys):
    main(["--list-models"])
    out = capsys.readouterr().out
    assert "kling-2.5-pro" in out
    assert "stable-video-diffusion" in out

def test_missing_input():
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 2

def test_plan_written(tmp_path, capsys):
    scenario = tmp_path / "story.txt"
    scenario.write_text('SCENE 1:\nA lighthouse at night.\nMary: "Is anyone there?"', encoding="utf-8")
    out_dir = tmp_path / "plans"

    with pytest.raises(SystemExit) as exc:
        main(["--scenario", str(scenario), "--model", "wan-2.5-i2v", "--seed", "1", "--no-llm",
              "--output", str(out_dir)])
    assert exc.value.code == 0

    (run_dir,) = list(out_dir.iterdir())
    timeline = json.loads((run_dir / "timeline.json").read_text(encoding="utf-8"))
    plan = json.loads((run_dir / "plan.json").read_text(encoding="utf-8"))
    assert (run_dir / "breakdown.json").exists()
    assert timeline["segments"][0]["seed"] == 1
    assert plan["execution_order"] == [s["segment_id"] for s in timeline["segments"]]
    assert "Plan written to" in capsys.readouterr().out

def test_empty_text_fails():
    with pytest.raises(SystemExit) as exc:
        main(["--text", "   ", "--no-llm"])
    assert exc.value.code == 1
