from __future__ import annotations

import re

from exercise_rx.gates.categories import Category, recognize

MAX_META_TOKEN_LENGTH = 24

_META_EXACT = {"<end_of_turn>", "</s>", "<eot>", "<end>", "<stop>", "~~~"}
_META_TOKEN_RE = re.compile(r"^<((?:[^\W\d]|-)+)>$")
_DIVIDER_RE = re.compile(r"^[-=]{3,}$")
_HEADING_RE = re.compile(r"\b(warm[\-\s]?ups?|strength|cardio|core)\b", re.IGNORECASE)
_BULLET_RE = re.compile(r"^\s*(?:[-–—*•]|\d{1,2}[.)])\s*(.+?)\s*$")
_EMPHASIS_MARKERS = ("**", "__")


def is_meta_line(line: str) -> bool:
    """Chat-control tokens and code fences that carry no content."""
    text = line.strip()
    if not text:
        return False
    if text in _META_EXACT:
        return True
    if text.lower().replace(" ", "") == "<end-of-turn>":
        return True
    if text.startswith("```"):
        return True
    match = _META_TOKEN_RE.match(text)
    return bool(match) and len(match.group(1)) <= MAX_META_TOKEN_LENGTH


def is_divider(line: str) -> bool:
    return bool(_DIVIDER_RE.match(line.strip()))


def match_heading(line: str) -> Category | None:
    match = _HEADING_RE.search(line)
    if not match:
        return None
    return recognize(match.group(1))


def match_bullet(line: str) -> str | None:
    match = _BULLET_RE.match(line)
    if not match:
        return None
    return match.group(1).strip()


def clean_item(text: str) -> str:
    item = text.strip()
    for marker in _EMPHASIS_MARKERS:
        if len(item) >= len(marker) and item.startswith(marker) and item.endswith(marker):
            item = item[len(marker) : -len(marker)].strip()
            break
    return item
