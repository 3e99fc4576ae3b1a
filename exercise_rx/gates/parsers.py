from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List

from exercise_rx.gates.categories import Category, recognize
from exercise_rx.gates.patterns import (
    clean_item,
    is_divider,
    is_meta_line,
    match_bullet,
    match_heading,
)

# Greedy on purpose: spans from the first "{" to the last "}".
_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


@dataclass
class ParseResult:
    items: Dict[Category, List[str]] = field(default_factory=dict)
    extra_categories: List[str] = field(default_factory=list)
    duplicates: Dict[Category, List[str]] = field(default_factory=dict)

    def items_for(self, category: Category) -> List[str]:
        return self.items.get(category, [])

    def duplicates_for(self, category: Category) -> List[str]:
        return self.duplicates.get(category, [])

    def add_item(self, category: Category, name: str) -> bool:
        """Keep the first spelling of a name; later case-insensitive repeats go to duplicates."""
        kept = self.items.setdefault(category, [])
        key = name.lower()
        if any(existing.lower() == key for existing in kept):
            self.duplicates.setdefault(category, []).append(name)
            return False
        kept.append(name)
        return True

    def add_extra_category(self, label: str) -> None:
        if label not in self.extra_categories:
            self.extra_categories.append(label)


def parse_response(text: str) -> ParseResult:
    structured = try_structured(text)
    if structured is not None:
        _trace("structured object decoded")
        return structured
    _trace("no structured object, using freeform parser")
    return parse_freeform(text)


def _try_parse(text: str) -> Any:
    try:
        return json.loads(text)
    except (ValueError, RecursionError):
        return None


def _extract_names(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    names: List[str] = []
    for element in value:
        if isinstance(element, str):
            names.append(element)
        elif isinstance(element, dict) and isinstance(element.get("name"), str):
            names.append(element["name"])
    return names


def try_structured(text: str) -> ParseResult | None:
    match = _JSON_OBJECT_RE.search(text)
    if not match:
        return None
    payload = _try_parse(match.group(0))
    if not isinstance(payload, dict):
        return None

    parsed = ParseResult()
    for key, value in payload.items():
        category = recognize(key)
        if category is None:
            parsed.add_extra_category(key)
            continue
        parsed.items.setdefault(category, [])
        for raw in _extract_names(value):
            name = raw.strip()
            if name:
                parsed.add_item(category, name)
    return parsed


def parse_freeform(text: str) -> ParseResult:
    """Line-oriented fallback for headings followed by bulleted, numbered or plain lines.

    A blank line ends a section once it has captured an item. Right after a
    heading one blank line is tolerated and a second one ends the section.
    Unrecognized headings are never recorded as extra categories.
    """
    parsed = ParseResult()
    current: Category | None = None
    blank_streak = 0
    section_counts: Dict[Category, int] = {}

    for raw_line in text.splitlines():
        line = raw_line.strip()

        if is_meta_line(line):
            continue

        if not line:
            if current is None:
                blank_streak += 1
            elif section_counts.get(current, 0) > 0:
                current = None
                blank_streak = 0
            else:
                blank_streak += 1
                if blank_streak >= 2:
                    current = None
            continue
        blank_streak = 0

        if is_divider(line):
            continue

        heading = match_heading(line)
        if heading is not None:
            current = heading
            section_counts[heading] = 0
            continue

        if current is None:
            continue

        bullet = match_bullet(raw_line)
        candidate = clean_item(bullet if bullet is not None else line)
        if not candidate or is_meta_line(candidate):
            continue
        parsed.add_item(current, candidate)
        section_counts[current] = section_counts.get(current, 0) + 1

    return parsed


def _trace(note: str) -> None:
    if os.getenv("RX_DEBUG_PARSE", "") == "1":
        print(f"[parse] {note}")
