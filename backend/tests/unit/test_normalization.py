from __future__ import annotations

import pytest

from app.services.ranges.normalization import normalize_lower, normalize_text


SAMPLES = [
    "Ford F-250",
    "Ford F‑250",
    "  Honda   Accord  ",
    "iPhone_15 Pro Max",
    "Samsung Galaxy Tab S9–FE",
    "\tMercedes-Benz\nSprinter ",
    "",
]


@pytest.mark.parametrize("text", SAMPLES)
def test_normalize_text_is_idempotent(text: str) -> None:
    once = normalize_text(text)
    assert normalize_text(once) == once


@pytest.mark.parametrize("text", SAMPLES)
def test_normalize_lower_is_idempotent(text: str) -> None:
    once = normalize_lower(text)
    assert normalize_lower(once) == once


def test_aggressive_form_strips_separators_and_unicode_dashes() -> None:
    assert normalize_text("Ford F-250") == "fordf250"
    assert normalize_text("Ford F‑250") == "fordf250"
    assert normalize_text("iPhone_15 Pro") == "iphone15pro"


def test_light_form_keeps_single_spaces_and_hyphens() -> None:
    assert normalize_lower("  Ford   F-250 ") == "ford f-250"
    assert normalize_lower("Honda\tAccord") == "honda accord"


def test_none_and_empty_are_empty_string() -> None:
    assert normalize_text(None) == ""
    assert normalize_lower(None) == ""
    assert normalize_text("   ") == ""
