"""
Static conversational vocabulary: lexicons, suggested actions and UI defaults.
"""
from __future__ import annotations

import copy
import re
from typing import Any

from .models import Affordance

SMALL_TALK_PHRASES: list[str] = [
    "hi",
    "hello",
    "hey",
    "yo",
    "thanks",
    "thank you",
    "thx",
    "ok",
    "okay",
    "cool",
    "nice",
    "great",
    "bye",
    "good morning",
    "good evening",
]

_AFFIRMATION_RE = re.compile(
    r"\b(yes|yeah|yep|yup|sure|correct|right|confirm(ed)?|exactly|perfect|"
    r"looks good|sounds good|go ahead|ok|okay|that's it|do it)\b"
)
_EXPLICIT_ASK_RE = re.compile(
    r"\b(recommend\w*|show me|show more|results?|suggest\w*|options|top picks|"
    r"what should i (buy|get)|which (one|laptop) should)\b"
)
_PUNCT_RE = re.compile(r"[^\w\s']")

MAX_SMALL_TALK_WORDS = 3


def normalize(utterance: str) -> str:
    return " ".join(_PUNCT_RE.sub(" ", (utterance or "").lower()).split())


def is_small_talk(utterance: str) -> bool:
    text = normalize(utterance)
    if not text:
        return True
    if is_explicit_ask(text):
        return False
    if text in SMALL_TALK_PHRASES:
        return True
    if len(text.split()) > MAX_SMALL_TALK_WORDS:
        return False
    return any(text == p or text.startswith(p + " ") for p in SMALL_TALK_PHRASES)


def is_affirmation(utterance: str) -> bool:
    return bool(_AFFIRMATION_RE.search(normalize(utterance)))


def is_explicit_ask(utterance: str) -> bool:
    return bool(_EXPLICIT_ASK_RE.search(normalize(utterance)))


# ---------------------------------------------------------------------------
# Suggested actions
# ---------------------------------------------------------------------------

SMALL_TALK_RESPONSE = (
    "Hi! I'm here to help you find the right laptop. "
    "What will you mainly use it for?"
)

PURPOSE_PICKS: list[Affordance] = [
    Affordance(type="purpose", text="Gaming", priority=1, value={"purposes": ["gaming"]}),
    Affordance(type="purpose", text="Work & productivity", priority=2, value={"purposes": ["work"]}),
    Affordance(type="purpose", text="School & study", priority=3, value={"purposes": ["student"]}),
]

STANDARD_ACTIONS: list[Affordance] = [
    Affordance(type="action", text="Show more", priority=90),
    Affordance(type="action", text="Refine", priority=91),
    Affordance(type="action", text="Compare top 3", priority=92),
    Affordance(type="action", text="Adjust budget", priority=93),
    Affordance(type="action", text="Adjust brands", priority=94),
]

CONFIRM_ACTIONS: list[Affordance] = [
    Affordance(type="confirm", text="Yes, show me laptops", priority=1),
    Affordance(type="action", text="Adjust budget", priority=2),
    Affordance(type="action", text="Adjust brands", priority=3),
]

FALLBACK_RESPONSE = (
    "Sorry, I'm having a little trouble right now. Tell me your budget, what "
    "you'll use the laptop for, or any brands you like, and I'll narrow it down."
)

_FALLBACK_TIERS: list[tuple[re.Pattern[str], list[Affordance]]] = [
    (
        re.compile(r"gaming|gamer"),
        [
            Affordance(type="action", text="Gaming laptops under $1,000", priority=1,
                       value={"price_max": 1000, "purposes": ["gaming"]}),
            Affordance(type="action", text="Gaming laptops $1,000 - $1,500", priority=2,
                       value={"price_min": 1000, "price_max": 1500, "purposes": ["gaming"]}),
            Affordance(type="action", text="Gaming laptops over $1,500", priority=3,
                       value={"price_min": 1500, "purposes": ["gaming"]}),
        ],
    ),
    (
        re.compile(r"work|business|office"),
        [
            Affordance(type="action", text="Business laptops under $800", priority=1,
                       value={"price_max": 800, "purposes": ["work"]}),
            Affordance(type="action", text="Business laptops $800 - $1,500", priority=2,
                       value={"price_min": 800, "price_max": 1500, "purposes": ["work"]}),
            Affordance(type="action", text="Premium business laptops", priority=3,
                       value={"price_min": 1500, "purposes": ["work"]}),
        ],
    ),
]

_GENERIC_FALLBACK: list[Affordance] = [
    Affordance(type="question", text="What's your budget range?", priority=1),
    Affordance(type="question", text="What will you use it for?", priority=2),
    Affordance(type="action", text="Show me gaming laptops", priority=3),
]


def fallback_affordances(utterance: str) -> list[Affordance]:
    lower = (utterance or "").lower()
    for pattern, tiers in _FALLBACK_TIERS:
        if pattern.search(lower):
            return [a.model_copy() for a in tiers]
    return [a.model_copy() for a in _GENERIC_FALLBACK]


def with_standard_actions(affordances: list[Affordance]) -> list[Affordance]:
    """*affordances* followed by the standard actions it does not already offer."""
    present = {a.text.lower() for a in affordances}
    return list(affordances) + [a.model_copy() for a in STANDARD_ACTIONS if a.text.lower() not in present]


# ---------------------------------------------------------------------------
# UI configuration
# ---------------------------------------------------------------------------

DEFAULT_UI_CONFIG: dict[str, Any] = {
    "layout": {
        "view_mode": "cards",
        "density": "normal",
        "sidebar_visible": True,
    },
    "filters": {
        "visible_filters": ["price", "brand", "use_case"],
        "advanced_filters_visible": False,
        "filter_complexity": "simple",
    },
    "content": {
        "spec_detail_level": "basic",
        "show_benchmarks": False,
        "show_technical_details": False,
        "comparison_mode": "simple",
    },
    "recommendations": {
        "explanation_depth": "moderate",
        "show_alternatives": True,
        "highlight_technical": False,
    },
    "interaction": {
        "chat_complexity": "conversational",
        "suggested_questions_complexity": 5,
        "enable_deep_dive_mode": False,
    },
}


def default_ui_config() -> dict[str, Any]:
    return copy.deepcopy(DEFAULT_UI_CONFIG)
