from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)

_events: list[dict[str, Any]] = []


@dataclass(frozen=True)
class Outcome:
    """Result of a best-effort side effect. Never raised, only inspected."""

    ok: bool
    error: str | None = None


EventSink = Callable[[str, dict[str, Any]], Any]


def record_event(event_type: str, data: dict[str, Any]) -> Outcome:
    _events.append({
        "type": event_type,
        "timestamp": time.time(),
        **data,
    })
    return Outcome(ok=True)


def record_best_effort(sink: EventSink, event_type: str, data: dict[str, Any]) -> Outcome:
    """Send an event to *sink*, turning any failure into a logged ``Outcome``."""
    try:
        result = sink(event_type, data)
    except Exception as exc:
        logger.warning("Failed to record %s event", event_type, exc_info=True)
        return Outcome(ok=False, error=str(exc))
    return result if isinstance(result, Outcome) else Outcome(ok=True)


def get_events() -> list[dict[str, Any]]:
    return _events


def clear_events() -> None:
    _events.clear()
