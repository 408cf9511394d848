from __future__ import annotations

import logging

from ..recommendations.models import FeedbackEvent, WeightProfile
from ..recommendations.weights import WeightProfileStore, adapt
from .store import EventSink, record_best_effort, record_event

logger = logging.getLogger(__name__)

_feedback: dict[str, list[FeedbackEvent]] = {}


def append_feedback(event: FeedbackEvent) -> None:
    _feedback.setdefault(event.user_id, []).append(event)


def record_feedback(
    event: FeedbackEvent,
    weights: WeightProfileStore,
    sink: EventSink = record_event,
) -> WeightProfile:
    """Store *event*, adapt the user's weights and emit an analytics event."""
    append_feedback(event)
    profile = adapt(weights, event)
    record_best_effort(sink, "feedback", {
        "user_id": event.user_id,
        "session_id": event.session_id,
        "laptop_id": event.recommended_candidate.id,
        "action": event.action.value,
        "sentiment": event.sentiment.value if event.sentiment else None,
        "is_positive": event.is_positive,
    })
    logger.info("Recorded %s feedback from user %s", event.action.value, event.user_id)
    return profile


def get_user_feedback(user_id: str) -> list[FeedbackEvent]:
    return _feedback.get(user_id, [])


def get_feedback() -> list[FeedbackEvent]:
    return [event for events in _feedback.values() for event in events]


def clear_feedback() -> None:
    _feedback.clear()
