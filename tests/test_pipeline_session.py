from __future__ import annotations

import json
from pathlib import Path

import pytest

from exercise_rx.main import _ensure_env, build_parser, resolve_base_dir
from exercise_rx.pipeline_session import SessionPipeline

BASE_DIR = Path(__file__).resolve().parents[1]

BRIEF = """---
prompt_style: verbose
max_attempts: 3
---
# Patient

Age 67, knee osteoarthritis.
"""


def _brief(tmp_path, content=BRIEF):
    path = tmp_path / "brief.md"
    path.write_text(content, encoding="utf-8")
    return path


def test_mock_run_corrects_and_writes_artifacts(tmp_path):
    run_dir = tmp_path / "run"
    plan = SessionPipeline("mock", BASE_DIR).run(_brief(tmp_path), run_dir)

    assert plan["valid"] is True
    assert plan["state"] == "done"
    assert plan["attempts"] == 1
    assert plan["max_attempts"] == 3
    assert plan["counts"] == {"warmup": 5, "strength": 5, "cardio": 5, "core": 5}
    assert plan["exercises"]["cardio"][0] == "Brisk walk"

    assert (run_dir / "raw" / "attempt_0.txt").exists()
    assert (run_dir / "raw" / "attempt_1.txt").exists()
    first_report = json.loads((run_dir / "raw" / "attempt_0_report.json").read_text(encoding="utf-8"))
    assert first_report["valid"] is False
    assert "duplicate exercise names detected (warmup: arm circles)" in first_report["issues"]

    prompt = (run_dir / "raw" / "prompt.txt").read_text(encoding="utf-8")
    assert "INPUT:\n# Patient" in prompt
    assert "max_attempts" not in prompt

    saved = json.loads((run_dir / "artifacts" / "session_plan.json").read_text(encoding="utf-8"))
    assert saved == plan
    markdown = (run_dir / "artifacts" / "session_plan.md").read_text(encoding="utf-8")
    assert "## Warmup" in markdown
    assert "1. Arm circles" in markdown


def test_mock_run_exhausts_budget(tmp_path):
    plan = SessionPipeline("mock", BASE_DIR).run(_brief(tmp_path), tmp_path / "run", max_attempts=0)

    assert plan["valid"] is False
    assert plan["state"] == "exhausted"
    assert plan["attempts"] == 0
    assert plan["issues"]
    markdown = (tmp_path / "run" / "artifacts" / "session_plan.md").read_text(encoding="utf-8")
    assert "## Open Issues" in markdown


def test_brief_without_frontmatter_uses_minimal_prompt(tmp_path, monkeypatch):
    monkeypatch.setenv("RX_MAX_CORRECTIONS", "2")
    run_dir = tmp_path / "run"
    plan = SessionPipeline("mock", BASE_DIR).run(_brief(tmp_path, "Patient notes only.\n"), run_dir)

    assert plan["max_attempts"] == 2
    prompt = (run_dir / "raw" / "prompt.txt").read_text(encoding="utf-8")
    assert prompt.startswith("There are 4 exercise categories")


def test_unknown_prompt_style_is_rejected(tmp_path):
    brief = _brief(tmp_path, "---\nprompt_style: poetic\n---\nNotes\n")

    with pytest.raises(ValueError, match="prompt_style"):
        SessionPipeline("mock", BASE_DIR).run(brief, tmp_path / "run")


def test_unknown_mode_is_rejected():
    with pytest.raises(ValueError):
        SessionPipeline("offline", BASE_DIR)


def test_cli_parser_defaults():
    args = build_parser().parse_args(["--mode", "mock", "--brief", "brief.md"])

    assert args.provider == "openai"
    assert args.max_attempts is None
    assert args.max_output_tokens == 800


def test_live_mode_requires_provider_key(tmp_path, monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)

    with pytest.raises(RuntimeError, match="GEMINI_API_KEY"):
        _ensure_env(tmp_path, "gemini")


def test_base_dir_defaults_to_checkout():
    assert resolve_base_dir(None) == BASE_DIR


def test_base_dir_override_must_hold_configs_and_schemas(tmp_path):
    (tmp_path / "configs").mkdir()

    with pytest.raises(RuntimeError, match="schemas"):
        resolve_base_dir(str(tmp_path))

    (tmp_path / "schemas").mkdir()
    assert resolve_base_dir(str(tmp_path)) == tmp_path.resolve()
    args = build_parser().parse_args(["--mode", "mock", "--brief", "b.md", "--base-dir", str(tmp_path)])
    assert args.base_dir == str(tmp_path)
