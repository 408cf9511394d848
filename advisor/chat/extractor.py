"""
Rule-based preference extraction.

Every category (purpose, brands, budget) is evaluated on each message; inside a
category the first matching rule wins. Nothing here raises: a message without
usable signals yields an empty delta.
"""
from __future__ import annotations

import re
from dataclasses import dataclass

from ..recommendations.models import Budget, CollectedPreferences


@dataclass(frozen=True)
class PurposeRule:
    pattern: re.Pattern[str]
    purpose: str
    default_budget: tuple[float, float]


PURPOSE_RULES: list[PurposeRule] = [
    PurposeRule(re.compile(r"gaming|gamer|\bgames?\b"), "gaming", (800, 2500)),
    PurposeRule(re.compile(r"work|business|productivity|office"), "work", (600, 2000)),
    PurposeRule(re.compile(r"student|school|college|university"), "student", (300, 1200)),
    PurposeRule(re.compile(r"creative|design|video|photo|editing"), "creative", (1000, 3000)),
]

KNOWN_BRANDS: list[str] = [
    "apple",
    "dell",
    "hp",
    "lenovo",
    "asus",
    "acer",
    "msi",
    "razer",
    "microsoft",
    "samsung",
    "alienware",
    "gigabyte",
]

BUDGET_FLOOR = 100
BUDGET_CEILING = 5000
WINDOW = 200

_UPPER_RE = re.compile(r"\b(under|below|max|maximum|less than|up to|upto|within|no more than)\b")
_LOWER_RE = re.compile(r"\b(over|above|min|minimum|more than|at least|starting at)\b")
# "$1,200" or "1200", but not "512 GB", "15in", "144Hz" or "RTX 4060"
_NUMBER_RE = re.compile(
    r"(?<![\w.])(?<!rtx )(?<!gtx )(?<!rx )"
    r"\$?(\d{1,3}(?:,\d{3})+|\d+)"
    r"(?![\d.,]?\d)(?!\s*(?:k\b|gb|tb|mb|hz|ghz|mhz|w\b|inch|\")|in\b)",
)


def _extract_purpose(lower: str) -> tuple[list[str], Budget | None]:
    for rule in PURPOSE_RULES:
        if rule.pattern.search(lower):
            low, high = rule.default_budget
            return [rule.purpose], Budget(min=low, max=high)
    return [], None


def _extract_brands(lower: str) -> list[str]:
    return sorted({brand.title() for brand in KNOWN_BRANDS if brand in lower})


def _budget_anchor(lower: str) -> int | None:
    for match in _NUMBER_RE.finditer(lower):
        value = int(match.group(1).replace(",", ""))
        if BUDGET_FLOOR < value < BUDGET_CEILING:
            return value
    return None


def _extract_budget(lower: str) -> Budget | None:
    anchor = _budget_anchor(lower)
    if anchor is None:
        return None
    if _UPPER_RE.search(lower):
        return Budget(min=300 if anchor > 300 else BUDGET_FLOOR, max=anchor)
    if _LOWER_RE.search(lower):
        return Budget(min=anchor, max=max(3000, anchor + 500))
    return Budget(min=max(BUDGET_FLOOR, anchor - WINDOW), max=anchor + WINDOW)


def extract(utterance: str, existing: CollectedPreferences | None = None) -> CollectedPreferences:
    """Parse *utterance* into a preference delta to merge into *existing*."""
    lower = (utterance or "").lower()

    purposes, budget = _extract_purpose(lower)
    numeric_budget = _extract_budget(lower)
    if numeric_budget is not None:
        budget = numeric_budget

    return CollectedPreferences(
        purposes=purposes,
        budget=budget,
        brands=_extract_brands(lower),
    )
