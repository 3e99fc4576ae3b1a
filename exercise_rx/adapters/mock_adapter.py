from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from .llm_base import Responder, ResponderFailure

_DEFAULT_SCRIPT: List[str] = [
    """Here is today's session.

**Warmup**
1. Arm circles
2. Marching in place
3. arm circles

Strength:
- Wall push-ups
- Chair squats
- Glute bridges
- Band rows
- Heel raises

<end_of_turn>""",
    """{
  "warmup": ["Arm circles", "Marching in place", "Shoulder rolls", "Hip circles", "Ankle pumps"],
  "strength": ["Wall push-ups", "Chair squats", "Glute bridges", "Band rows", "Heel raises"],
  "cardio": [{"name": "Brisk walk"}, {"name": "Step-ups"}, {"name": "Stationary bike"}, {"name": "Side steps"}, {"name": "Low-impact jacks"}],
  "core": ["Dead bug", "Bird dog", "Pelvic tilts", "Side plank on knees", "Seated knee lifts"]
}""",
]


@dataclass
class MockAdapter(Responder):
    """Replays scripted answers in order; the last one repeats once the script runs out."""

    responses: List[str] = field(default_factory=lambda: list(_DEFAULT_SCRIPT))
    system_prompt: str | None = None
    prompts: List[str] = field(default_factory=list)

    def respond(self, prompt: str) -> str:
        if not self.responses:
            raise ResponderFailure("Mock adapter has no scripted responses.")
        self.prompts.append(prompt)
        index = min(len(self.prompts), len(self.responses)) - 1
        return self.responses[index]
