import json
import pytest
from schemas import ScenarioBreakdown, SceneBreakdown
from utils import HFClient, RunManager
from vidplan.pipeline import plan_timeline

def test_run_manager(tmp_path):
    rm = RunManager(base_dir=str(tmp_path / "runs"))
    run_dir = rm.create_run("test_123")

    assert run_dir.exists()
    assert run_dir.name == "test_123"

    rm.save_json(run_dir, "test.json", {"foo": "bar"})
    assert json.loads((run_dir / "test.json").read_text(encoding="utf-8")) == {"foo": "bar"}

def test_run_manager_default_run_id(tmp_path):
    rm = RunManager(base_dir=str(tmp_path / "nested" / "runs"))
    run_dir = rm.create_run()
    assert run_dir.parent == tmp_path / "nested" / "runs"

def test_save_plan(tmp_path):
    breakdown = ScenarioBreakdown(
        scenario_id="s1",
        scenes=[SceneBreakdown(scene_id="a", summary="A lighthouse on a cliff", duration_estimate_sec=8)],
    )
    result = plan_timeline(breakdown, [], "kling-2.5-pro", target_duration_sec=8)

    rm = RunManager(base_dir=str(tmp_path))
    run_dir = rm.create_run("plan")
    written = rm.save_plan(run_dir, result)

    names = {p.name for p in written}
    assert {"breakdown.json", "timeline.json", "plan.json"} <= names
    plan = json.loads((run_dir / "plan.json").read_text(encoding="utf-8"))
    assert plan["execution_order"] == [s.segment_id for s in result.timeline.segments]

def test_hf_client_requires_token(monkeypatch):
    monkeypatch.delenv("HF_TOKEN", raising=False)
    with pytest.raises(ValueError):
        HFClient()
