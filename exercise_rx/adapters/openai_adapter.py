from __future__ import annotations

import os
import time
from typing import Dict, List

from openai import OpenAI
from openai import APIConnectionError, APITimeoutError, RateLimitError, InternalServerError

from .llm_base import LLMResponse, Responder, ResponderFailure


class OpenAIAdapter(Responder):
    def __init__(self, system_prompt: str | None = None) -> None:
        self.api_key = os.getenv("OPENAI_API_KEY")
        if not self.api_key:
            raise RuntimeError("OPENAI_API_KEY is not set.")
        timeout = float(os.getenv("RX_RESPONDER_TIMEOUT_SECONDS", "60"))
        self.client = OpenAI(api_key=self.api_key, timeout=timeout, max_retries=0)
        self.model = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
        self.max_attempts = 4
        self.messages: List[Dict[str, str]] = []
        if system_prompt:
            self.messages.append({"role": "system", "content": system_prompt})

    def complete(self, prompt: str) -> LLMResponse:
        max_tokens = int(os.getenv("RX_MAX_OUTPUT_TOKENS", "800"))
        temperature = float(os.getenv("RX_TEMPERATURE", "0.2"))
        messages = self.messages + [{"role": "user", "content": prompt}]
        attempt = 0
        backoff = 1.0
        while True:
            attempt += 1
            try:
                response = self.client.chat.completions.create(
                    model=self.model,
                    messages=messages,
                    max_tokens=max_tokens,
                    temperature=temperature,
                )
                content = response.choices[0].message.content
                if content is None:
                    raise ResponderFailure("OpenAI returned empty content.")
                usage = getattr(response, "usage", None)
                if usage:
                    print(
                        f"[openai] model={self.model} "
                        f"prompt_tokens={getattr(usage, 'prompt_tokens', None)} "
                        f"completion_tokens={getattr(usage, 'completion_tokens', None)} "
                        f"total_tokens={getattr(usage, 'total_tokens', None)}"
                    )
                else:
                    print("[openai] usage not provided by SDK")
                self.messages = messages + [{"role": "assistant", "content": content}]
                return LLMResponse(raw_text=content)
            except RateLimitError as exc:
                error = getattr(exc, "error", None)
                code = getattr(error, "code", None)
                if code == "insufficient_quota":
                    raise ResponderFailure(
                        "OpenAI API quota exceeded. Please enable billing in your OpenAI account."
                    ) from exc
                if attempt >= self.max_attempts:
                    raise ResponderFailure(f"OpenAI rate limit persisted: {exc}") from exc
            except (APITimeoutError, APIConnectionError, InternalServerError) as exc:
                if attempt >= self.max_attempts:
                    raise ResponderFailure(f"OpenAI request failed: {exc}") from exc
            print(f"[openai] transient error on attempt {attempt}/{self.max_attempts}, sleeping {backoff:.1f}s")
            time.sleep(backoff)
            backoff *= 2

    def respond(self, prompt: str) -> str:
        return self.complete(prompt).raw_text
