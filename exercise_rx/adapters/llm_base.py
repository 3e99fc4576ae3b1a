from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class ResponderFailure(RuntimeError):
    """The model backend could not produce an answer for a prompt."""


class Backend(str, Enum):
    MOCK = "mock"
    OPENAI = "openai"
    GEMINI = "gemini"


@dataclass
class LLMResponse:
    raw_text: str


class Responder(Protocol):
    def respond(self, prompt: str) -> str:
        raise NotImplementedError

    def complete(self, prompt: str) -> LLMResponse:
        return LLMResponse(raw_text=self.respond(prompt))
