from __future__ import annotations

import argparse
import os
from pathlib import Path

from dotenv import load_dotenv

from exercise_rx.adapters.llm_base import Backend
from exercise_rx.pipeline_session import SessionPipeline
from exercise_rx.utils.io import write_text
from exercise_rx.utils.time import utc_run_id

DEFAULT_BRIEF_TEMPLATE = """---
prompt_style: minimal
max_attempts: 5
---
# Patient

Describe the patient's health information, goals and precautions.

# Available exercises

List the available exercises for warmup, strength, cardio and core.
"""

_PROVIDER_KEYS = {
    Backend.OPENAI.value: "OPENAI_API_KEY",
    Backend.GEMINI.value: "GEMINI_API_KEY",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Exercise session planner with self-correction")
    parser.add_argument("--mode", choices=["mock", "live"], required=True)
    parser.add_argument("--brief", required=True)
    parser.add_argument("--provider", choices=sorted(_PROVIDER_KEYS), default=Backend.OPENAI.value)
    parser.add_argument("--max-attempts", type=int, default=None, help="Corrective re-asks allowed")
    parser.add_argument("--max-output-tokens", type=int, default=800)
    parser.add_argument("--temperature", type=float, default=0.2)
    parser.add_argument(
        "--base-dir",
        default=None,
        help="Directory holding configs/ and schemas/ (defaults to the source checkout)",
    )
    return parser


def _ensure_env(base_dir: Path, provider: str) -> None:
    load_dotenv(base_dir / ".env")
    key = _PROVIDER_KEYS[provider]
    if not os.getenv(key):
        raise RuntimeError(
            f"Missing required API key: {key}. Create a .env file from .env.example and set the key."
        )


def resolve_base_dir(override: str | None) -> Path:
    base_dir = Path(override).resolve() if override else Path(__file__).resolve().parents[1]
    missing = [name for name in ("configs", "schemas") if not (base_dir / name).is_dir()]
    if missing:
        raise RuntimeError(
            f"{base_dir} has no {', '.join(missing)} directory. "
            "Install with `pip install -e .` or pass --base-dir pointing at a checkout."
        )
    return base_dir


def main() -> None:
    args = build_parser().parse_args()
    base_dir = resolve_base_dir(args.base_dir)
    run_dir = base_dir / "runs" / utc_run_id()
    run_dir.mkdir(parents=True, exist_ok=True)

    os.environ["RX_MAX_OUTPUT_TOKENS"] = str(args.max_output_tokens)
    os.environ["RX_TEMPERATURE"] = str(args.temperature)

    if args.mode == "live":
        _ensure_env(base_dir, args.provider)

    brief_path = Path(args.brief)
    if not brief_path.exists():
        write_text(brief_path, DEFAULT_BRIEF_TEMPLATE)
        print(f"Brief template created at {brief_path}. Please edit it with patient details.")
        return

    write_text(run_dir / "inputs" / "brief.md", brief_path.read_text(encoding="utf-8"))

    pipeline = SessionPipeline(args.mode, base_dir, provider=args.provider)
    plan = pipeline.run(brief_path, run_dir, max_attempts=args.max_attempts)

    print((run_dir / "artifacts" / "session_plan.md").read_text(encoding="utf-8"))
    print(f"valid={plan['valid']} state={plan['state']} attempts={plan['attempts']}")
    print(f"Run written to {run_dir}")


if __name__ == "__main__":
    main()
