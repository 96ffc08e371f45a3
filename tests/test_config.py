import json
from pathlib import Path

import pytest
import vidplan.config as config_mod
from vidplan.config import Config

@pytest.fixture
def config_home(tmp_path, monkeypatch):
    monkeypatch.setattr(config_mod, "CONFIG_DIR", tmp_path)
    monkeypatch.setattr(config_mod, "CONFIG_FILE", tmp_path / "config.json")
    for var in ("HF_TOKEN", "GEMINI_API_KEY", "VIDPLAN_IMPROVER"):
        monkeypatch.delenv(var, raising=False)
    return tmp_path

def test_defaults(config_home):
    cfg = Config.load()
    assert cfg.hf_token == ""
    assert cfg.improver == "hf"
    assert cfg.default_model_id == "kling-2.5-pro"
    assert cfg.output_dir == Path("plans")

def test_env_overrides_file(config_home, monkeypatch):
    (config_home / "config.json").write_text(json.dumps({"hf_token": "from-file", "tone": "dreamlike"}))
    monkeypatch.setenv("HF_TOKEN", "from-env")
    monkeypatch.setenv("VIDPLAN_IMPROVER", "gemini")
    cfg = Config.load()
    assert cfg.hf_token == "from-env"
    assert cfg.improver == "gemini"
    assert cfg.tone == "dreamlike"

def test_save_and_reload(config_home):
    cfg = Config(gemini_api_key="g-key", improver="none", llm_timeout_sec=5.0, output_dir=Path("out"))
    cfg.save()
    loaded = Config.load()
    assert loaded.gemini_api_key == "g-key"
    assert loaded.improver == "none"
    assert loaded.llm_timeout_sec == 5.0
    assert loaded.output_dir == Path("out")

def test_invalid_file_ignored(config_home):
    (config_home / "config.json").write_text("{not json")
    assert Config.load().default_model_id == "kling-2.5-pro"

def test_unknown_improver_ignored(config_home, monkeypatch):
    monkeypatch.setenv("VIDPLAN_IMPROVER", "openai")
    assert Config.load().improver == "hf"
