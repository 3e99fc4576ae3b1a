from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Dict, Tuple

import yaml
from jsonschema import validate

from exercise_rx.adapters.factory import make_responder
from exercise_rx.adapters.llm_base import Backend, Responder
from exercise_rx.artifacts.writers import write_session_plan
from exercise_rx.gates.categories import Category
from exercise_rx.gates.correction import MAX_CORRECTIONS, CorrectionResult, run_with_correction
from exercise_rx.gates.parsers import parse_response
from exercise_rx.gates.validity import ValidationReport
from exercise_rx.utils.io import read_text, write_json, write_text

PROMPT_STYLES = ("minimal", "normal", "verbose")


class SessionPipeline:
    def __init__(self, mode: str, base_dir: Path, provider: str = Backend.OPENAI.value) -> None:
        if mode not in ("mock", "live"):
            raise ValueError(f"Unsupported mode: {mode}")
        self.mode = mode
        self.provider = provider
        self.base_dir = base_dir
        self.schemas_dir = base_dir / "schemas"
        self.prompts_dir = base_dir / "configs" / "prompts"

    def run(self, brief_path: Path, run_dir: Path, max_attempts: int | None = None) -> Dict:
        raw_dir = run_dir / "raw"
        artifacts_dir = run_dir / "artifacts"
        raw_dir.mkdir(parents=True, exist_ok=True)
        artifacts_dir.mkdir(parents=True, exist_ok=True)

        frontmatter, brief = self._parse_frontmatter(read_text(brief_path))
        style = str(frontmatter.get("prompt_style", "minimal")).strip().lower()
        if style not in PROMPT_STYLES:
            raise ValueError(f"Unsupported prompt_style: {style}")
        attempts_cap = self._max_attempts(max_attempts, frontmatter)

        prompt = self._build_prompt(style, brief)
        write_text(raw_dir / "prompt.txt", prompt)
        responder = self._adapter(self._system_prompt(frontmatter))

        def record(attempt: int, text: str, report: ValidationReport) -> None:
            write_text(raw_dir / f"attempt_{attempt}.txt", text)
            write_json(
                raw_dir / f"attempt_{attempt}_report.json",
                {
                    "valid": report.is_valid,
                    "counts": report.counts_by_name(),
                    "issues": report.issues,
                },
            )

        print(f"[pipeline] mode={self.mode} provider={self.provider} style={style} max_attempts={attempts_cap}")
        result = run_with_correction(prompt, responder, attempts_cap, on_attempt=record)

        plan = self._plan_payload(result, attempts_cap)
        validate(instance=plan, schema=self._load_schema("session_plan.schema.json"))
        write_json(artifacts_dir / "session_plan.json", plan)
        write_session_plan(artifacts_dir / "session_plan.md", plan)
        return plan

    def _adapter(self, system_prompt: str | None) -> Responder:
        if self.mode == "mock":
            return make_responder(Backend.MOCK, system_prompt=system_prompt)
        return make_responder(self.provider, system_prompt=system_prompt)

    def _build_prompt(self, style: str, brief: str) -> str:
        template = read_text(self.prompts_dir / f"session_{style}.md").strip()
        structure = read_text(self.prompts_dir / "output_structure.md").strip()
        return f"{template}\n\nINPUT:\n{brief.strip()}\n\n{structure}\n"

    def _system_prompt(self, frontmatter: Dict) -> str | None:
        configured = frontmatter.get("system_prompt")
        if configured:
            return str(configured)
        path = self.prompts_dir / "system.md"
        if path.exists():
            return read_text(path).strip() or None
        return None

    def _max_attempts(self, override: int | None, frontmatter: Dict) -> int:
        if override is not None:
            value = override
        elif frontmatter.get("max_attempts") is not None:
            value = int(frontmatter["max_attempts"])
        else:
            value = int(self._env("RX_MAX_CORRECTIONS", str(MAX_CORRECTIONS)))
        if value < 0:
            raise ValueError("max_attempts must be zero or greater.")
        return value

    def _plan_payload(self, result: CorrectionResult, attempts_cap: int) -> Dict:
        parsed = parse_response(result.text)
        return {
            "valid": result.report.is_valid,
            "state": result.state.value,
            "attempts": result.attempts,
            "max_attempts": attempts_cap,
            "counts": result.report.counts_by_name(),
            "issues": list(result.report.issues),
            "exercises": {category.value: list(parsed.items_for(category)) for category in Category},
        }

    def _parse_frontmatter(self, content: str) -> Tuple[Dict, str]:
        if not content.startswith("---"):
            return {}, content
        parts = content.split("---", 2)
        if len(parts) < 3:
            return {}, content
        meta_raw = parts[1].strip()
        body = parts[2].lstrip("\n")
        try:
            meta = yaml.safe_load(meta_raw) or {}
        except yaml.YAMLError:
            meta = {}
        if not isinstance(meta, dict):
            meta = {}
        return meta, body

    def _env(self, key: str, default: str) -> str:
        return os.getenv(key, default)

    def _load_schema(self, name: str) -> Dict:
        return json.loads(read_text(self.schemas_dir / name))
