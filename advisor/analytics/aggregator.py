from __future__ import annotations

from collections import Counter
from typing import Any

from ..recommendations.models import FeedbackEvent
from .feedback import get_feedback


def feedback_summary(feedback: list[FeedbackEvent]) -> dict[str, Any]:
    positive = sum(1 for f in feedback if f.is_positive)
    return {
        "total": len(feedback),
        "positive": positive,
        "negative": len(feedback) - positive,
        "satisfaction_rate": round(positive / len(feedback) * 100, 1) if feedback else 0.0,
        "by_action": dict(Counter(f.action.value for f in feedback)),
        "by_sentiment": dict(Counter(f.sentiment.value for f in feedback if f.sentiment)),
    }


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    recs = [e for e in events if e["type"] == "recommendation"]
    turns = [e for e in events if e["type"] == "chat_turn"]

    # Average engine response time
    times = [r["response_time_ms"] for r in recs if "response_time_ms" in r]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    # Top purposes
    purpose_counter: Counter[str] = Counter()
    for r in recs:
        for p in r.get("purposes", []) or []:
            purpose_counter[p] += 1
    top_purposes = [{"name": n, "count": c} for n, c in purpose_counter.most_common(10)]

    # Top brands
    brand_counter: Counter[str] = Counter()
    for r in recs:
        for b in r.get("brands", []) or []:
            brand_counter[b] += 1
    top_brands = [{"name": n, "count": c} for n, c in brand_counter.most_common(10)]

    # Phase distribution of chat turns
    phases = dict(Counter(t.get("phase", "unknown") for t in turns))

    empty_results = sum(1 for r in recs if r.get("results_returned", 0) == 0)

    # Cache stats
    cache_hits = sum(1 for t in turns if t.get("cache_hit"))
    cache_misses = len(turns) - cache_hits

    return {
        "total_recommendations": len(recs),
        "total_chat_turns": len(turns),
        "degraded_turns": sum(1 for t in turns if t.get("degraded")),
        "empty_results": empty_results,
        "avg_response_time_ms": avg_time,
        "top_purposes": top_purposes,
        "top_brands": top_brands,
        "phase_distribution": phases,
        "cache_stats": {
            "hits": cache_hits,
            "misses": cache_misses,
            "hit_rate": round(cache_hits / len(turns) * 100, 1) if turns else 0.0,
        },
        "feedback_summary": feedback_summary(get_feedback()),
    }
