from __future__ import annotations

from enum import Enum
from typing import Dict


class Category(str, Enum):
    WARMUP = "warmup"
    STRENGTH = "strength"
    CARDIO = "cardio"
    CORE = "core"


# Keys are already normalized: lowercase, no hyphens, no whitespace.
_SYNONYMS: Dict[str, Category] = {
    "warmup": Category.WARMUP,
    "warmups": Category.WARMUP,
    "strength": Category.STRENGTH,
    "cardio": Category.CARDIO,
    "core": Category.CORE,
}


def normalize_label(raw: str) -> str:
    lowered = raw.strip().lower()
    return "".join(ch for ch in lowered if ch != "-" and not ch.isspace())


def recognize(raw: object) -> Category | None:
    """Map a heading or JSON key onto one of the four categories.

    "warm-up", "Warm Up" and "warmup" all resolve to ``Category.WARMUP``.
    Anything unknown returns ``None``.
    """
    if not isinstance(raw, str):
        return None
    return _SYNONYMS.get(normalize_label(raw))
