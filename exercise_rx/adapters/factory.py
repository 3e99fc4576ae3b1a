"""Responder factory."""
from __future__ import annotations

from exercise_rx.adapters.gemini_adapter import GeminiAdapter
from exercise_rx.adapters.llm_base import Backend, Responder
from exercise_rx.adapters.mock_adapter import MockAdapter
from exercise_rx.adapters.openai_adapter import OpenAIAdapter


def make_responder(backend: Backend | str, system_prompt: str | None = None) -> Responder:
    try:
        selected = backend if isinstance(backend, Backend) else Backend(backend.strip().lower())
    except ValueError as exc:
        raise ValueError(f"Unsupported backend: {backend}") from exc
    if selected is Backend.MOCK:
        return MockAdapter(system_prompt=system_prompt)
    if selected is Backend.GEMINI:
        return GeminiAdapter(system_prompt=system_prompt)
    return OpenAIAdapter(system_prompt=system_prompt)
