from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Protocol

from .models import FeedbackEvent, Sentiment, UserAction, WeightProfile

logger = logging.getLogger(__name__)

DEFAULT_WEIGHTS = WeightProfile()


class WeightProfileStore(Protocol):
    def get(self, user_id: str) -> WeightProfile | None: ...

    def put(self, user_id: str, profile: WeightProfile) -> None: ...


class InMemoryWeightStore:
    def __init__(self) -> None:
        self._profiles: dict[str, WeightProfile] = {}

    def get(self, user_id: str) -> WeightProfile | None:
        return self._profiles.get(user_id)

    def put(self, user_id: str, profile: WeightProfile) -> None:
        self._profiles[user_id] = profile

    def clear(self) -> None:
        self._profiles.clear()

    def __len__(self) -> int:
        return len(self._profiles)


def active_weights(store: WeightProfileStore, user_id: str) -> WeightProfile:
    """The user's learned weights, or the defaults for unknown users."""
    return store.get(user_id) or DEFAULT_WEIGHTS


# ---------------------------------------------------------------------------
# Adaptation rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AdaptationRule:
    name: str
    applies: Callable[[FeedbackEvent], bool]
    increments: dict[str, float]


def _positive_gaming(event: FeedbackEvent) -> bool:
    liked = event.sentiment == Sentiment.positive or event.action == UserAction.purchased
    return liked and "gaming" in event.query.purposes


# Negative feedback has no rule yet; add one here to down-weight.
ADAPTATION_RULES: list[AdaptationRule] = [
    AdaptationRule(
        name="positive_gaming",
        applies=_positive_gaming,
        increments={"performance": 0.05, "specs": 0.05},
    ),
]


def adapt(
    store: WeightProfileStore,
    event: FeedbackEvent,
    rules: list[AdaptationRule] = ADAPTATION_RULES,
) -> WeightProfile:
    """Apply matching rules to the user's weights, renormalise and save."""
    current = active_weights(store, event.user_id).model_dump()

    for rule in rules:
        if rule.applies(event):
            logger.info("Adapting weights for user %s via rule %s", event.user_id, rule.name)
            for key, step in rule.increments.items():
                current[key] += step

    profile = WeightProfile(**current).normalized()
    store.put(event.user_id, profile)
    return profile
