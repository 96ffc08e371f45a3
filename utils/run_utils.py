import json
from datetime import datetime
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

class RunManager:
    def __init__(self, base_dir: str = "plans"):
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def create_run(self, run_id: Optional[str] = None) -> Path:
        if not run_id:
            run_id = datetime.now().strftime("%Y%m%d_%H%M%S")
        run_dir = self.base_dir / run_id
        run_dir.mkdir(exist_ok=True)
        return run_dir

    def save_json(self, run_dir: Path, filename: str, data: dict) -> Path:
        path = run_dir / filename
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        return path

    def save_model(self, run_dir: Path, filename: str, model: BaseModel) -> Path:
        return self.save_json(run_dir, filename, model.model_dump(mode="json"))

    def save_plan(self, run_dir: Path, result) -> list[Path]:
        """Write breakdown.json, timeline.json and plan.json for a PlanResult."""
        written = []
        if result.breakdown is not None:
            written.append(self.save_model(run_dir, "breakdown.json", result.breakdown))
        written.append(self.save_model(run_dir, "timeline.json", result.timeline))
        written.append(self.save_model(run_dir, "plan.json", result.plan))
        if result.warnings:
            written.append(self.save_json(run_dir, "warnings.json", {"warnings": result.warnings}))
        return written
