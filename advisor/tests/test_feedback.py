from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

import advisor.app as app_module
from advisor.analytics.feedback import clear_feedback, get_user_feedback, record_feedback
from advisor.recommendations.models import (
    CandidateProduct,
    FeedbackEvent,
    ScoringQuery,
    Sentiment,
    UserAction,
)
from advisor.recommendations.weights import DEFAULT_WEIGHTS, InMemoryWeightStore

client = TestClient(app_module.app)

LAPTOP = CandidateProduct(id="lp-x", name="Asus TUF 2023", brand="Asus", price=999)


def _event(user_id: str = "u1", **kwargs) -> FeedbackEvent:
    fields = {
        "session_id": "s1",
        "user_id": user_id,
        "recommended_candidate": LAPTOP,
        "action": UserAction.clicked,
        "query": ScoringQuery(purposes=["gaming"]),
    }
    fields.update(kwargs)
    return FeedbackEvent(**fields)


@pytest.fixture(autouse=True)
def _clean():
    clear_feedback()
    app_module.weight_store.clear()
    yield
    clear_feedback()


# ── Service ──────────────────────────────────────────────────────────────


def test_record_feedback_appends_history_and_emits_event():
    events = []
    record_feedback(_event(), InMemoryWeightStore(), sink=lambda t, d: events.append((t, d)))

    assert len(get_user_feedback("u1")) == 1
    assert events[0][0] == "feedback"
    assert events[0][1]["laptop_id"] == "lp-x"


def test_history_is_per_user():
    store = InMemoryWeightStore()
    record_feedback(_event("u1"), store)
    record_feedback(_event("u2"), store)
    assert len(get_user_feedback("u1")) == 1
    assert get_user_feedback("nobody") == []


def test_sink_failure_does_not_lose_feedback():
    def broken(event_type, data):
        raise RuntimeError("sink down")

    record_feedback(_event(), InMemoryWeightStore(), sink=broken)
    assert len(get_user_feedback("u1")) == 1


def test_is_positive():
    assert _event(action=UserAction.purchased).is_positive
    assert _event(action=UserAction.compared, sentiment=Sentiment.positive).is_positive
    assert not _event(action=UserAction.dismissed).is_positive


# ── HTTP ─────────────────────────────────────────────────────────────────


def test_feedback_endpoint_records():
    resp = client.post(
        "/feedback",
        json={"session_id": "s1", "laptop_id": "lp-009", "action": "clicked"},
        headers={"user-id": "alice"},
    )
    assert resp.status_code == 200
    assert resp.json() == {"status": "recorded", "total_feedback": 1}
    assert get_user_feedback("alice")[0].recommended_candidate.id == "lp-009"


def test_feedback_endpoint_adapts_weights():
    client.post(
        "/feedback",
        json={
            "session_id": "s1",
            "laptop_id": "lp-009",
            "action": "clicked",
            "sentiment": "positive",
            "query": {"purposes": ["gaming"]},
        },
        headers={"user-id": "gamer"},
    )
    profile = app_module.weight_store.get("gamer")
    assert profile.performance > DEFAULT_WEIGHTS.performance
    assert profile.total() == pytest.approx(1.0)


def test_feedback_unknown_laptop_is_404():
    resp = client.post("/feedback", json={"session_id": "s1", "laptop_id": "nope", "action": "clicked"})
    assert resp.status_code == 404


def test_feedback_validation_rejects_bad_action():
    resp = client.post("/feedback", json={"session_id": "s1", "laptop_id": "lp-009", "action": "liked"})
    assert resp.status_code == 422


def test_feedback_stats():
    for action, sentiment in (("clicked", None), ("purchased", "positive"), ("dismissed", "negative")):
        client.post("/feedback", json={
            "session_id": "s1",
            "laptop_id": "lp-001",
            "action": action,
            "sentiment": sentiment,
        })
    body = client.get("/feedback/stats").json()
    assert body["total"] == 3
    assert body["positive"] == 2
    assert body["negative"] == 1
    assert body["satisfaction_rate"] == 66.7
    assert body["by_action"] == {"clicked": 1, "purchased": 1, "dismissed": 1}
