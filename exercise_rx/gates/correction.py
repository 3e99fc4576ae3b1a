from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional

from exercise_rx.adapters.llm_base import Responder, ResponderFailure
from exercise_rx.gates.parsers import parse_response
from exercise_rx.gates.validity import ValidationReport, validate

MAX_CORRECTIONS = 5

REDO_SUFFIX = (
    "\n Provide 5 exercises per exercise category (warmup, strength, cardio and core) again"
)

AttemptHook = Callable[[int, str, ValidationReport], None]


class CorrectionState(str, Enum):
    AWAITING = "awaiting"
    VALIDATING = "validating"
    CORRECTING = "correcting"
    DONE = "done"
    EXHAUSTED = "exhausted"


@dataclass
class CorrectionResult:
    text: str
    report: ValidationReport
    attempts: int
    state: CorrectionState

    @property
    def exhausted(self) -> bool:
        return self.state is CorrectionState.EXHAUSTED


@dataclass
class RetrySession:
    responder: Responder
    max_attempts: int
    text: str = ""
    report: ValidationReport | None = None
    attempts: int = 0
    state: CorrectionState = CorrectionState.AWAITING

    def ask(self, prompt: str) -> None:
        text = self.responder.respond(prompt)
        if not isinstance(text, str):
            raise ResponderFailure(
                f"Responder returned {type(text).__name__} instead of text."
            )
        self.text = text
        self.state = CorrectionState.VALIDATING
        self.report = validate(parse_response(text))

    def settle(self) -> bool:
        """Move out of VALIDATING; True when another correction round is due."""
        if self.report is not None and self.report.is_valid:
            self.state = CorrectionState.DONE
            return False
        if self.attempts >= self.max_attempts:
            self.state = CorrectionState.EXHAUSTED
            return False
        self.state = CorrectionState.CORRECTING
        return True


def build_correction_prompt(issues: Iterable[str]) -> str:
    return "\n".join(issues) + REDO_SUFFIX


def run_with_correction(
    initial_prompt: str,
    responder: Responder,
    max_attempts: int = MAX_CORRECTIONS,
    on_attempt: Optional[AttemptHook] = None,
) -> CorrectionResult:
    """Ask once, then re-ask with the validation issues until the plan is valid.

    At most ``max_attempts`` corrective prompts are sent. Responder errors are
    not caught here; they end the run and reach the caller.
    """
    if max_attempts < 0:
        raise ValueError("max_attempts must be zero or greater.")

    session = RetrySession(responder=responder, max_attempts=max_attempts)
    session.ask(initial_prompt)
    _record(session, on_attempt)

    while session.settle():
        session.ask(build_correction_prompt(session.report.issues))
        session.attempts += 1
        _record(session, on_attempt)

    print(
        f"[correction] finished state={session.state.value} "
        f"attempts={session.attempts}/{session.max_attempts}"
    )
    return CorrectionResult(
        text=session.text,
        report=session.report,
        attempts=session.attempts,
        state=session.state,
    )


def _record(session: RetrySession, on_attempt: Optional[AttemptHook]) -> None:
    report = session.report
    print(
        f"[correction] attempt={session.attempts} valid={report.is_valid} "
        f"issues={len(report.issues)}"
    )
    if on_attempt is not None:
        on_attempt(session.attempts, session.text, report)
