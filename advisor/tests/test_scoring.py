from __future__ import annotations

import pytest

from advisor.recommendations.components import (
    extract_ram_gb,
    score_cpu,
    score_gpu,
    score_ram,
    score_storage,
)
from advisor.recommendations.models import (
    Budget,
    CandidateProduct,
    FeedbackEvent,
    LaptopSpecs,
    ScoringQuery,
    UserAction,
)
from advisor.recommendations.scoring import (
    CandidateScorer,
    combine,
    infer_release_year,
    laptop_similarity,
)
from advisor.recommendations.weights import DEFAULT_WEIGHTS, InMemoryWeightStore

SUB_SCORES = (
    "similarity_score",
    "value_score",
    "recency_score",
    "user_preference_score",
    "brand_score",
    "budget_fit_score",
)


def _laptop(
    laptop_id: str = "lp-1",
    brand: str = "Asus",
    price: float = 1200,
    processor: str = "Intel Core i7-13700H",
    ram: str = "16GB",
    storage: str = "512GB SSD",
    graphics: str = "NVIDIA GeForce RTX 4060",
    year: int | None = 2023,
) -> CandidateProduct:
    return CandidateProduct(
        id=laptop_id,
        name=f"{brand} Laptop {laptop_id}",
        brand=brand,
        price=price,
        specs=LaptopSpecs(processor=processor, ram=ram, storage=storage, graphics=graphics),
        release_year=year,
    )


def _scorer(history=None) -> CandidateScorer:
    return CandidateScorer(
        InMemoryWeightStore(),
        history=history or (lambda user_id: []),
        current_year=2024,
    )


# ── Component tiers ──────────────────────────────────────────────────────


class TestComponents:
    def test_cpu_tiers(self):
        assert score_cpu("Intel Core i9-13980HX") == 1.0
        assert score_cpu("AMD Ryzen 5 5500U") == 0.7
        assert score_cpu("Apple M2") == 0.9
        assert score_cpu("Intel Celeron N4500") == 0.3

    def test_gpu_tiers(self):
        assert score_gpu("NVIDIA GeForce RTX 4080") == 1.0
        assert score_gpu("NVIDIA GeForce RTX 4060") == 0.8
        assert score_gpu("Intel Iris Xe") == 0.3
        assert score_gpu("Mystery GPU") == 0.4

    def test_ram(self):
        assert score_ram("32GB") == 1.0
        assert score_ram("16 GB DDR5") == 0.8
        assert score_ram("2GB") == 0.2
        assert extract_ram_gb("lots") == 4

    def test_storage_ignores_unit_spacing(self):
        assert score_storage("512 GB SSD") == score_storage("512GB SSD") == 0.8
        assert score_storage("1TB SSD") == 1.0
        assert score_storage("1TB HDD") == 0.3
        assert score_storage("64GB eMMC") == 0.5


# ── Release year ─────────────────────────────────────────────────────────


def test_release_year_from_name():
    assert infer_release_year("Dell XPS 15 2023") == 2023


def test_release_year_out_of_range_ignored():
    assert infer_release_year("Acer Aspire 2019") is None
    assert infer_release_year("ThinkPad 20226") is None


# ── Scorer ───────────────────────────────────────────────────────────────


class TestScorer:
    def test_sub_scores_bounded(self):
        query = ScoringQuery(purposes=["gaming"], budget=Budget(min=800, max=1500), brands=["Asus"])
        for laptop in (
            _laptop(),
            _laptop(price=0, year=None),
            _laptop(price=9000, processor="", ram="", storage="", graphics="", year=2020),
        ):
            result = _scorer().score(laptop, query, "u1")
            for name in SUB_SCORES:
                assert 0.0 <= getattr(result, name) <= 1.0

    def test_overpriced_laptop_is_penalised(self):
        laptop = _laptop(price=3000, storage="1TB SSD", graphics="NVIDIA GeForce RTX 4070")
        assert CandidateScorer.performance_estimate(laptop) == pytest.approx(0.9)

        result = _scorer().score(laptop, ScoringQuery(), "u1")

        # expected 1980 / price 3000 = 0.66 -> 0.33 * 0.6
        assert result.value_score == pytest.approx(0.198)
        assert result.warnings and "Overpriced" in result.warnings[0]

    def test_good_value_gets_reasoning(self):
        result = _scorer().score(_laptop(price=900), ScoringQuery(), "u1")
        assert any("Excellent value" in r for r in result.reasoning)

    def test_unknown_price_scores_neutral_value(self):
        result = _scorer().score(_laptop(price=0), ScoringQuery(), "u1")
        assert result.value_score == 0.5

    def test_recency_tiers(self):
        scorer = _scorer()
        assert scorer.score(_laptop(year=2024), ScoringQuery(), "u1").recency_score == 1.0
        assert scorer.score(_laptop(year=2022), ScoringQuery(), "u1").recency_score == 0.8
        assert scorer.score(_laptop(year=None), ScoringQuery(), "u1").recency_score == 0.5

        old = scorer.score(_laptop(year=2020), ScoringQuery(), "u1")
        assert old.recency_score == pytest.approx(0.8)
        assert any("4-year-old" in w for w in old.warnings)

    def test_brand_reputation_and_preference(self):
        assert CandidateScorer.brand_score(_laptop(brand="Apple"), ScoringQuery()) == 0.9
        assert CandidateScorer.brand_score(_laptop(brand="Apple"), ScoringQuery(brands=["apple"])) == 1.0
        assert CandidateScorer.brand_score(_laptop(brand="Razer"), ScoringQuery()) == 0.5

    def test_budget_fit(self):
        query = ScoringQuery(budget=Budget(min=1000, max=1400))
        assert CandidateScorer.budget_fit_score(_laptop(price=1200), query) == 1.0
        assert CandidateScorer.budget_fit_score(_laptop(price=1200), ScoringQuery()) == 0.5
        assert CandidateScorer.budget_fit_score(_laptop(price=5000), query) == 0.1

    def test_ram_requirement_in_text(self):
        reasoning: list[str] = []
        met = _scorer().similarity_score(_laptop(), ScoringQuery(text="need 16gb ram"), reasoning)
        missed = _scorer().similarity_score(_laptop(), ScoringQuery(text="need 32 gb ram"), [])
        assert met > missed
        assert any("Meets RAM requirement" in r for r in reasoning)

    def test_user_preference_without_history_is_neutral(self):
        assert _scorer().user_preference_score(_laptop(), "u1") == 0.5

    def test_user_preference_uses_positive_history(self):
        liked = _laptop("lp-9", price=1200)
        event = FeedbackEvent(
            session_id="s1",
            user_id="u1",
            recommended_candidate=liked,
            action=UserAction.clicked,
        )
        scorer = _scorer(history=lambda user_id: [event])
        # same brand, same price, both with specs: (0.3 + 0.2 + 0.5) / 3
        assert scorer.user_preference_score(_laptop("lp-1"), "u1") == pytest.approx(1 / 3)

    def test_scoring_is_deterministic(self):
        query = ScoringQuery(purposes=["gaming"], budget=Budget(min=800, max=1500))
        first = _scorer().score(_laptop(), query, "u1")
        second = _scorer().score(_laptop(), query, "u1")
        assert first == second

    def test_final_score_uses_weights(self):
        result = _scorer().score(_laptop(), ScoringQuery(purposes=["gaming"]), "u1")
        expected = combine(
            result.similarity_score,
            result.value_score,
            result.recency_score,
            result.user_preference_score,
            result.brand_score,
            result.budget_fit_score,
            DEFAULT_WEIGHTS,
        )
        assert result.score == pytest.approx(expected)


def test_laptop_similarity_without_specs():
    a = _laptop("a", processor="", ram="", storage="", graphics="")
    b = _laptop("b", brand="Dell", price=2400, processor="", ram="", storage="", graphics="")
    # different brand, price gap 50% -> proximity 0
    assert laptop_similarity(a, b) == 0.0
