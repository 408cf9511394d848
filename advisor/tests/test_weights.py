from __future__ import annotations

import pytest

from advisor.recommendations.models import (
    CandidateProduct,
    FeedbackEvent,
    ScoringQuery,
    Sentiment,
    UserAction,
    WeightProfile,
)
from advisor.recommendations.weights import (
    DEFAULT_WEIGHTS,
    AdaptationRule,
    InMemoryWeightStore,
    active_weights,
    adapt,
)

LAPTOP = CandidateProduct(id="lp-x", name="MSI Katana 2023", brand="MSI", price=1049)


def _event(purposes=("gaming",), action=UserAction.clicked, sentiment=Sentiment.positive) -> FeedbackEvent:
    return FeedbackEvent(
        session_id="s1",
        user_id="u1",
        query=ScoringQuery(purposes=list(purposes)),
        recommended_candidate=LAPTOP,
        action=action,
        sentiment=sentiment,
    )


def test_default_weights_sum_to_one():
    assert DEFAULT_WEIGHTS.total() == pytest.approx(1.0, abs=1e-9)


def test_unknown_user_gets_defaults():
    assert active_weights(InMemoryWeightStore(), "nobody") == DEFAULT_WEIGHTS


def test_positive_gaming_feedback_boosts_performance_and_specs():
    store = InMemoryWeightStore()
    profile = adapt(store, _event())

    assert profile.performance > DEFAULT_WEIGHTS.performance
    assert profile.specs > DEFAULT_WEIGHTS.specs
    assert profile.value < DEFAULT_WEIGHTS.value
    assert profile.total() == pytest.approx(1.0, abs=1e-9)
    assert store.get("u1") == profile


def test_purchase_counts_as_positive():
    profile = adapt(InMemoryWeightStore(), _event(action=UserAction.purchased, sentiment=None))
    assert profile.performance > DEFAULT_WEIGHTS.performance


def test_non_gaming_feedback_keeps_proportions():
    profile = adapt(InMemoryWeightStore(), _event(purposes=("work",)))
    assert profile.model_dump() == pytest.approx(DEFAULT_WEIGHTS.model_dump())


def test_negative_feedback_has_no_effect():
    profile = adapt(InMemoryWeightStore(), _event(sentiment=Sentiment.negative, action=UserAction.dismissed))
    assert profile.model_dump() == pytest.approx(DEFAULT_WEIGHTS.model_dump())


def test_repeated_feedback_stays_normalised():
    store = InMemoryWeightStore()
    for _ in range(10):
        profile = adapt(store, _event())
    assert profile.total() == pytest.approx(1.0, abs=1e-9)
    assert all(v > 0 for v in profile.model_dump().values())


def test_custom_rules():
    rule = AdaptationRule(name="always_value", applies=lambda e: True, increments={"value": 1.0})
    profile = adapt(InMemoryWeightStore(), _event(), rules=[rule])
    assert profile.value == pytest.approx((0.27 + 1.0) / 2.0)


def test_normalized_handles_zero_total():
    zero = WeightProfile(performance=0, value=0, brand=0, specs=0, recency=0, budget=0)
    assert zero.normalized() == WeightProfile()
