from __future__ import annotations

import re
from datetime import datetime
from typing import Callable

from ..analytics.feedback import get_user_feedback
from .components import (
    extract_ram_gb,
    has_dedicated_gpu,
    has_ssd,
    score_cpu,
    score_gpu,
    score_ram,
    score_storage,
)
from .models import (
    CandidateProduct,
    FeedbackEvent,
    ScoredCandidate,
    ScoringQuery,
    WeightProfile,
)
from .weights import WeightProfileStore, active_weights

EXPECTED_PRICE_PER_PERFORMANCE = 2200
MIN_RELEASE_YEAR = 2020
MAX_RELEASE_YEAR = 2025

BRAND_REPUTATION: dict[str, float] = {
    "apple": 0.9,
    "dell": 0.8,
    "hp": 0.7,
    "lenovo": 0.8,
    "asus": 0.8,
    "acer": 0.6,
    "msi": 0.7,
    "alienware": 0.8,
}
UNKNOWN_BRAND_REPUTATION = 0.5

# (max age in years, score, reasoning)
RECENCY_TIERS: list[tuple[int, float, str]] = [
    (1, 1.0, "Latest generation technology"),
    (2, 0.8, "Recent model with modern features"),
    (3, 0.6, "Established model, still current"),
]

_YEAR_RE = re.compile(r"(?<!\d)20(\d{2})(?!\d)")
_RAM_REQUIREMENT_RE = re.compile(r"(\d{1,2})\s*gb\s*ram")


def infer_release_year(name: str, specs_text: str = "") -> int | None:
    for match in _YEAR_RE.finditer(f"{name} {specs_text}"):
        year = 2000 + int(match.group(1))
        if MIN_RELEASE_YEAR <= year <= MAX_RELEASE_YEAR:
            return year
    return None


# ---------------------------------------------------------------------------
# Purpose heuristics
# ---------------------------------------------------------------------------


def _ram_points(candidate: CandidateProduct, tiers: list[tuple[int, float]], floor: float) -> float:
    if not candidate.specs.ram:
        return 0.0
    size = extract_ram_gb(candidate.specs.ram)
    for minimum, points in tiers:
        if size >= minimum:
            return points
    return floor


def score_for_gaming(candidate: CandidateProduct) -> float:
    specs = candidate.specs
    score = 0.0
    if specs.graphics:
        score += score_gpu(specs.graphics) * 0.5
    score += _ram_points(candidate, [(16, 0.3), (8, 0.2)], 0.1)
    if specs.processor:
        score += score_cpu(specs.processor) * 0.2
    return min(score, 1.0)


def score_for_work(candidate: CandidateProduct) -> float:
    specs = candidate.specs
    score = 0.0
    if specs.processor:
        score += score_cpu(specs.processor) * 0.3
    score += _ram_points(candidate, [(16, 0.3), (8, 0.2)], 0.1)
    if has_ssd(specs.storage):
        score += 0.2
    score += 0.2  # base portability
    return min(score, 1.0)


def score_for_creative(candidate: CandidateProduct) -> float:
    specs = candidate.specs
    score = 0.0
    if specs.processor:
        score += score_cpu(specs.processor) * 0.3
    if specs.graphics:
        score += score_gpu(specs.graphics) * 0.3
    score += _ram_points(candidate, [(32, 0.3), (16, 0.2)], 0.1)
    if has_ssd(specs.storage):
        score += 0.1
    return min(score, 1.0)


def score_for_student(candidate: CandidateProduct) -> float:
    specs = candidate.specs
    score = 0.0
    if specs.processor:
        score += min(score_cpu(specs.processor), 0.7) * 0.3
    score += _ram_points(candidate, [(8, 0.3), (4, 0.2)], 0.1)
    if candidate.price < 800:
        score += 0.4
    elif candidate.price < 1200:
        score += 0.3
    else:
        score += 0.1
    return min(score, 1.0)


PURPOSE_SCORERS: dict[str, Callable[[CandidateProduct], float]] = {
    "gaming": score_for_gaming,
    "work": score_for_work,
    "business": score_for_work,
    "productivity": score_for_work,
    "creative": score_for_creative,
    "design": score_for_creative,
    "student": score_for_student,
    "school": score_for_student,
}


def match_purpose(candidate: CandidateProduct, purposes: list[str]) -> float:
    if not purposes:
        return 0.5
    total = 0.0
    for purpose in purposes:
        scorer = PURPOSE_SCORERS.get(purpose.lower())
        total += scorer(candidate) if scorer else 0.5
    return total / len(purposes)


# ---------------------------------------------------------------------------
# Scorer
# ---------------------------------------------------------------------------


class CandidateScorer:
    """Scores one candidate against a query with six independent sub-scores."""

    def __init__(
        self,
        weights: WeightProfileStore,
        history: Callable[[str], list[FeedbackEvent]] = get_user_feedback,
        current_year: int | None = None,
    ) -> None:
        self._weights = weights
        self._history = history
        self._current_year = current_year

    @property
    def current_year(self) -> int:
        return self._current_year or datetime.now().year

    def score(self, candidate: CandidateProduct, query: ScoringQuery, user_id: str) -> ScoredCandidate:
        reasoning: list[str] = []
        highlights: list[str] = []
        warnings: list[str] = []

        similarity = self.similarity_score(candidate, query, reasoning)
        value = self.value_score(candidate, reasoning, warnings)
        recency = self.recency_score(candidate, reasoning, warnings)
        user_pref = self.user_preference_score(candidate, user_id)
        brand = self.brand_score(candidate, query)
        budget_fit = self.budget_fit_score(candidate, query)

        weights = active_weights(self._weights, user_id)
        final = combine(similarity, value, recency, user_pref, brand, budget_fit, weights)

        if similarity > 0.8:
            highlights.append("Perfect match for your needs")
        if value > 0.8:
            highlights.append("Excellent value for money")
        if recency > 0.8:
            highlights.append("Latest generation technology")

        return ScoredCandidate(
            candidate=candidate,
            similarity_score=similarity,
            value_score=value,
            recency_score=recency,
            user_preference_score=user_pref,
            brand_score=brand,
            budget_fit_score=budget_fit,
            score=final,
            reasoning=reasoning,
            highlights=highlights,
            warnings=warnings or None,
        )

    # ── sub-scores ──────────────────────────────────────────────────────

    def similarity_score(self, candidate: CandidateProduct, query: ScoringQuery, reasoning: list[str]) -> float:
        factors: list[float] = []

        if query.purposes:
            purpose_score = match_purpose(candidate, query.purposes)
            factors.append(purpose_score)
            if purpose_score > 0.7:
                reasoning.append(f"Excellent match for {', '.join(query.purposes)}")

        if not candidate.specs.is_empty():
            factors.append(self._match_specs(candidate, query.text, reasoning))

        if query.brands:
            brand_lower = candidate.brand.lower()
            if any(b.lower() in brand_lower for b in query.brands):
                factors.append(0.9)
                reasoning.append(f"Matches your preferred brand: {candidate.brand}")
            else:
                factors.append(0.3)

        need = _RAM_REQUIREMENT_RE.search(query.text.lower()) if query.text else None
        if need and candidate.specs.ram:
            have = extract_ram_gb(candidate.specs.ram)
            needed = int(need.group(1))
            if have >= needed:
                factors.append(0.8)
                reasoning.append(f"Meets RAM requirement ({have}GB)")
            else:
                factors.append(0.2)

        return sum(factors) / len(factors) if factors else 0.5

    @staticmethod
    def _match_specs(candidate: CandidateProduct, text: str, reasoning: list[str]) -> float:
        lower = text.lower()
        score = 0.5
        if "gaming" in lower and has_dedicated_gpu(candidate.specs.graphics):
            score += 0.3
            reasoning.append("Dedicated graphics suitable for gaming")
        if ("fast" in lower or "performance" in lower) and has_ssd(candidate.specs.storage):
            score += 0.2
            reasoning.append("SSD storage for fast performance")
        return min(score, 1.0)

    @staticmethod
    def performance_estimate(candidate: CandidateProduct) -> float:
        specs = candidate.specs
        total = 0.0
        if specs.processor:
            total += score_cpu(specs.processor)
        if specs.ram:
            total += score_ram(specs.ram)
        if specs.storage:
            total += score_storage(specs.storage)
        if specs.graphics:
            total += score_gpu(specs.graphics)
        return min(total / 4, 1.0)

    def value_score(self, candidate: CandidateProduct, reasoning: list[str], warnings: list[str]) -> float:
        if candidate.price <= 0:
            return 0.5
        expected = self.performance_estimate(candidate) * EXPECTED_PRICE_PER_PERFORMANCE
        ratio = expected / candidate.price
        score = min(ratio, 2.0) / 2

        if ratio > 1.3:
            reasoning.append(
                f"Excellent value - {round((ratio - 1) * 100)}% better price-to-performance than average"
            )
        elif ratio < 0.7:
            warnings.append(f"Overpriced - {round((1 - ratio) * 100)}% above market rate for these specs")
            score *= 0.6

        return max(score, 0.1)

    def recency_score(self, candidate: CandidateProduct, reasoning: list[str], warnings: list[str]) -> float:
        year = candidate.release_year
        if year is None:
            return 0.5

        age = self.current_year - year
        for max_age, score, message in RECENCY_TIERS:
            if age <= max_age:
                reasoning.append(message)
                return score

        warnings.append(f"{age}-year-old technology - consider newer alternatives")
        return max(0.2, 1 - (age - 3) * 0.2)

    def user_preference_score(self, candidate: CandidateProduct, user_id: str) -> float:
        liked = [e for e in self._history(user_id) if e.is_positive]
        if not liked:
            return 0.5
        total = sum(laptop_similarity(candidate, e.recommended_candidate) for e in liked)
        return total / len(liked)

    @staticmethod
    def brand_score(candidate: CandidateProduct, query: ScoringQuery) -> float:
        brand = candidate.brand.lower()
        base = BRAND_REPUTATION.get(brand, UNKNOWN_BRAND_REPUTATION)
        if any(b.lower() == brand for b in query.brands):
            return min(base + 0.2, 1.0)
        return base

    @staticmethod
    def budget_fit_score(candidate: CandidateProduct, query: ScoringQuery) -> float:
        if query.budget is None or candidate.price <= 0:
            return 0.5
        mid = query.budget.midpoint
        diff = abs(candidate.price - mid) / max(200.0, mid)
        return max(0.1, 1 - diff)


def laptop_similarity(a: CandidateProduct, b: CandidateProduct) -> float:
    similarity = 0.0
    factors = 2

    if a.brand == b.brand:
        similarity += 0.3

    top = max(a.price, b.price)
    gap = abs(a.price - b.price) / top if top > 0 else 0.0
    similarity += max(0.0, 1 - gap * 2) * 0.2

    if not a.specs.is_empty() and not b.specs.is_empty():
        similarity += 0.5
        factors += 1

    return similarity / factors


def combine(
    similarity: float,
    value: float,
    recency: float,
    user_preference: float,
    brand: float,
    budget_fit: float,
    weights: WeightProfile,
) -> float:
    return (
        similarity * weights.specs
        + value * weights.value
        + recency * weights.recency
        + user_preference * weights.performance
        + brand * weights.brand
        + budget_fit * weights.budget
    )
