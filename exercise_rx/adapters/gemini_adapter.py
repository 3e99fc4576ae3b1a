from __future__ import annotations

import os
import random
import time
from typing import Any, Dict, List

from google import genai

from .llm_base import Responder, ResponderFailure


class GeminiAdapter(Responder):
    def __init__(self, system_prompt: str | None = None) -> None:
        api_key = os.getenv("GEMINI_API_KEY")
        if not api_key:
            raise RuntimeError("GEMINI_API_KEY is not set.")

        self.client = genai.Client(api_key=api_key)
        self.system_prompt = system_prompt

        primary = os.getenv("GEMINI_MODEL", "gemini-flash-latest")
        self.model_candidates: List[str] = [primary]
        for fallback in ("gemini-2.0-flash", "gemini-1.5-pro"):
            if fallback not in self.model_candidates:
                self.model_candidates.append(fallback)

        self.max_attempts = int(os.getenv("GEMINI_MAX_ATTEMPTS", "5"))
        self.base_delay = float(os.getenv("GEMINI_BASE_DELAY_SECONDS", "1.0"))
        self.history: List[Dict[str, Any]] = []

    def _is_transient(self, err: Exception) -> bool:
        msg = str(err).lower()
        return any(s in msg for s in ["503", "unavailable", "429", "too many", "timeout", "temporarily"])

    def _config(self) -> Dict[str, Any]:
        config: Dict[str, Any] = {
            "max_output_tokens": int(os.getenv("RX_MAX_OUTPUT_TOKENS", "800")),
            "temperature": float(os.getenv("RX_TEMPERATURE", "0.2")),
        }
        if self.system_prompt:
            config["system_instruction"] = self.system_prompt
        return config

    def respond(self, prompt: str) -> str:
        contents = self.history + [{"role": "user", "parts": [{"text": prompt}]}]
        last_err: Exception | None = None

        for model in self.model_candidates:
            for attempt in range(1, self.max_attempts + 1):
                try:
                    print(f"[gemini] model={model} attempt={attempt}/{self.max_attempts}")
                    response = self.client.models.generate_content(
                        model=model,
                        contents=contents,
                        config=self._config(),
                    )
                    text = getattr(response, "text", None)
                    if not text:
                        raise ResponderFailure("Gemini returned empty content.")
                    self.history = contents + [{"role": "model", "parts": [{"text": text}]}]
                    return text

                except Exception as e:
                    last_err = e
                    if not self._is_transient(e):
                        break

                    delay = self.base_delay * (2 ** (attempt - 1)) + random.random() * 0.5
                    print(f"[gemini] transient error: {e} -> sleeping {delay:.2f}s")
                    time.sleep(delay)

            print(f"[gemini] switching model after failures: {model}")

        raise ResponderFailure(
            "Gemini generate_content failed for all candidate models. "
            f"Last error: {last_err}"
        ) from last_err
