"""Settings and API key management."""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_DIR = Path.home() / ".vidplan"
CONFIG_FILE = CONFIG_DIR / "config.json"
LOG_FILE = CONFIG_DIR / "vidplan.log"

# Planning defaults
DEFAULT_MODEL_ID = "kling-2.5-pro"
DEFAULT_LANGUAGE = "en"
DEFAULT_TONE = "cinematic"
MIN_SEGMENT_DURATION = 2        # seconds, floor for every model
LARGE_PLAN_SEGMENTS = 100       # warn above this many segments
SECONDS_PER_SEGMENT_ESTIMATE = 60

# Prompt improvement (LLM) – optional, falls back to rule-based shaping
IMPROVER_PROVIDERS = ("hf", "gemini", "none")
DEFAULT_HF_MODEL = "meta-llama/Llama-3.1-8B-Instruct"
DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"
LLM_TIMEOUT_SEC = 20.0
LLM_MAX_TOKENS = 500


@dataclass
class Config:
    hf_token: str = ""
    gemini_api_key: str = ""
    improver: str = "hf"            # "hf", "gemini" or "none"
    hf_model: str = DEFAULT_HF_MODEL
    gemini_model: str = DEFAULT_GEMINI_MODEL
    llm_timeout_sec: float = LLM_TIMEOUT_SEC
    default_model_id: str = DEFAULT_MODEL_ID
    language: str = DEFAULT_LANGUAGE
    tone: str = DEFAULT_TONE
    output_dir: Path = field(default_factory=lambda: Path("plans"))

    @classmethod
    def load(cls) -> "Config":
        """Load config from env vars then config file."""
        cfg = cls()

        # Env var takes priority
        token = os.environ.get("HF_TOKEN", "")
        gemini_key = os.environ.get("GEMINI_API_KEY", "")
        improver = os.environ.get("VIDPLAN_IMPROVER", "")

        # Fall back to config file
        if CONFIG_FILE.exists():
            try:
                data = json.loads(CONFIG_FILE.read_text(encoding="utf-8-sig"))
                if not token:
                    token = data.get("hf_token", "")
                if not gemini_key:
                    gemini_key = data.get("gemini_api_key", "")
                if not improver:
                    improver = data.get("improver", "")
                if hm := data.get("hf_model"):
                    cfg.hf_model = hm
                if gm := data.get("gemini_model"):
                    cfg.gemini_model = gm
                if data.get("llm_timeout_sec") is not None:
                    cfg.llm_timeout_sec = float(data["llm_timeout_sec"])
                if model_id := data.get("default_model_id"):
                    cfg.default_model_id = model_id
                if lang := data.get("language"):
                    cfg.language = lang
                if tone := data.get("tone"):
                    cfg.tone = tone
                if out := data.get("output_dir"):
                    cfg.output_dir = Path(out)
            except (json.JSONDecodeError, OSError, ValueError):
                pass

        cfg.hf_token = token
        cfg.gemini_api_key = gemini_key
        if improver in IMPROVER_PROVIDERS:
            cfg.improver = improver
        return cfg

    def save(self) -> None:
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        data = {
            "hf_token": self.hf_token,
            "gemini_api_key": self.gemini_api_key,
            "improver": self.improver,
            "hf_model": self.hf_model,
            "gemini_model": self.gemini_model,
            "llm_timeout_sec": self.llm_timeout_sec,
            "default_model_id": self.default_model_id,
            "language": self.language,
            "tone": self.tone,
            "output_dir": str(self.output_dir),
        }
        CONFIG_FILE.write_text(json.dumps(data, indent=2))
