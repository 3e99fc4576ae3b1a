from __future__ import annotations

import pytest

from exercise_rx.gates.categories import Category, recognize


@pytest.mark.parametrize(
    "raw",
    ["warmup", "Warmup", "  WARM-UP ", "warm up", "Warm Ups", "warmups"],
)
def test_recognize_warmup_spellings(raw):
    assert recognize(raw) is Category.WARMUP


def test_recognize_other_categories():
    assert recognize("Strength") is Category.STRENGTH
    assert recognize(" cardio\n") is Category.CARDIO
    assert recognize("CORE") is Category.CORE


def test_recognize_unknown_returns_none():
    assert recognize("Mobility") is None
    assert recognize("") is None
    assert recognize("core exercises") is None
    assert recognize(None) is None


def test_category_order_is_fixed():
    assert [category.value for category in Category] == ["warmup", "strength", "cardio", "core"]
