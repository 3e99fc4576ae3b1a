from __future__ import annotations

from pathlib import Path
from typing import Dict, List

from exercise_rx.utils.io import write_text


def write_session_plan(path: Path, plan: Dict) -> None:
    status = "valid" if plan["valid"] else plan["state"]
    lines: List[str] = [
        "# Exercise Session",
        "",
        f"Status: {status} after {plan['attempts']} correction(s)",
    ]
    for category, exercises in plan.get("exercises", {}).items():
        lines.extend(["", f"## {category.capitalize()}"])
        lines.extend([f"{index}. {name}" for index, name in enumerate(exercises, start=1)])
    if plan.get("issues"):
        lines.extend(["", "## Open Issues"])
        lines.extend([f"- {issue}" for issue in plan["issues"]])
    write_text(path, "\n".join(lines) + "\n")
