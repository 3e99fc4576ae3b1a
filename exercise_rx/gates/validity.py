from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from exercise_rx.gates.categories import Category
from exercise_rx.gates.parsers import ParseResult, parse_response

EXERCISES_PER_CATEGORY = 5


@dataclass
class ValidationReport:
    is_valid: bool
    counts: Dict[Category, int] = field(default_factory=dict)
    issues: List[str] = field(default_factory=list)

    def counts_by_name(self) -> Dict[str, int]:
        return {category.value: count for category, count in self.counts.items()}


def _count_issue(category: Category, count: int) -> str | None:
    name = category.value
    if count == 0:
        return f"no exercises given for {name}"
    if count == 1:
        return f"only 1 exercise given for {name}"
    if count < EXERCISES_PER_CATEGORY:
        return f"only {count} exercises given for {name}"
    if count > EXERCISES_PER_CATEGORY:
        return f"more than {EXERCISES_PER_CATEGORY} exercises for {name} (got {count})"
    return None


def _duplicates_issue(result: ParseResult) -> str:
    breakdown = " | ".join(
        f"{category.value}: " + ", ".join(result.duplicates_for(category))
        for category in Category
        if result.duplicates_for(category)
    )
    return f"duplicate exercise names detected ({breakdown})"


def validate(result: ParseResult) -> ValidationReport:
    counts: Dict[Category, int] = {}
    issues: List[str] = []

    for category in Category:
        count = len(result.items_for(category))
        counts[category] = count
        issue = _count_issue(category, count)
        if issue:
            issues.append(issue)

    if result.extra_categories:
        issues.append("unexpected categories: " + ", ".join(result.extra_categories))

    if any(result.duplicates_for(category) for category in Category):
        issues.append(_duplicates_issue(result))

    exact = all(
        len(result.items_for(category)) == EXERCISES_PER_CATEGORY for category in Category
    )
    return ValidationReport(is_valid=not issues and exact, counts=counts, issues=issues)


def validity_check(response: str) -> Tuple[bool, Dict[str, int], List[str]]:
    """Parse and validate a raw model response.

    Returns the verdict, per-category counts keyed by canonical name, and the
    list of issues.
    """
    report = validate(parse_response(response))
    return report.is_valid, report.counts_by_name(), report.issues


def improve_response(response: str) -> str:
    is_valid, _, issues = validity_check(response)
    if is_valid:
        return "ok"
    return "; ".join(issues)
