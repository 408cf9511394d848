from __future__ import annotations

import logging
import time
from typing import Protocol

from ..analytics.store import EventSink, Outcome, record_best_effort, record_event
from .config import DEFAULT_RECOMMENDATION_CONFIG, RecommendationConfig
from .models import (
    CandidateProduct,
    CatalogFilter,
    CollectedPreferences,
    RecommendationResult,
    ScoredCandidate,
    ScoringQuery,
)
from .scoring import CandidateScorer

logger = logging.getLogger(__name__)


class CatalogQueryService(Protocol):
    def query(
        self,
        price_min: float,
        price_max: float,
        brands: list[str] | None = None,
    ) -> list[CandidateProduct]: ...


def build_filter(
    preferences: CollectedPreferences,
    config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
) -> CatalogFilter:
    """Catalog filter for the collected preferences, defaulting the price window."""
    if preferences.budget is not None:
        price_min, price_max = preferences.budget.min, preferences.budget.max
    else:
        price_min, price_max = config.default_price_min, config.default_price_max
    return CatalogFilter(price_min=price_min, price_max=price_max, brands=list(preferences.brands))


def widen(price_min: float, price_max: float, fraction: float) -> tuple[float, float]:
    return max(0.0, price_min * (1 - fraction)), price_max * (1 + fraction)


def diversify(ranked: list[ScoredCandidate], limit: int, per_brand: int) -> list[ScoredCandidate]:
    seen: dict[str, int] = {}
    accepted: list[ScoredCandidate] = []
    for item in ranked:
        brand = item.candidate.brand.strip()
        if seen.get(brand, 0) >= per_brand:
            continue
        accepted.append(item)
        seen[brand] = seen.get(brand, 0) + 1
        if len(accepted) >= limit:
            break
    return accepted


def passes_value_filter(item: ScoredCandidate) -> bool:
    if item.value_score < 0.3 and item.recency_score < 0.4:
        logger.debug("Filtered out %s - poor value + old tech", item.candidate.name)
        return False
    if item.value_score < 0.2:
        logger.debug("Filtered out %s - severely overpriced", item.candidate.name)
        return False
    return True


class RecommendationEngine:
    """Retrieves, scores, ranks and filters laptops for one query."""

    def __init__(
        self,
        catalog: CatalogQueryService,
        scorer: CandidateScorer,
        sink: EventSink = record_event,
        config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
    ) -> None:
        self.catalog = catalog
        self.scorer = scorer
        self._sink = sink
        self.config = config

    def _query(self, price_min: float, price_max: float, brands: list[str]) -> list[CandidateProduct]:
        try:
            return self.catalog.query(price_min, price_max, brands or None)
        except Exception:
            logger.warning("Catalog query failed, treating as no candidates", exc_info=True)
            return []

    def retrieve(self, catalog_filter: CatalogFilter) -> tuple[list[CandidateProduct], bool]:
        """Candidates for *catalog_filter*, relaxing once by price and once by brand."""
        cfg = self.config
        low, high = widen(catalog_filter.price_min, catalog_filter.price_max, cfg.price_slack)
        candidates = self._query(low, high, catalog_filter.brands)
        if candidates:
            return candidates, False

        low, high = widen(low, high, cfg.relax_step)
        logger.info("No candidates, relaxing price window to %.0f-%.0f", low, high)
        candidates = self._query(low, high, catalog_filter.brands)
        if candidates or not catalog_filter.brands:
            return candidates, bool(candidates)

        logger.info("Still no candidates, dropping brand filter %s", catalog_filter.brands)
        candidates = self._query(low, high, [])
        return candidates, bool(candidates)

    def recommend(
        self,
        catalog_filter: CatalogFilter,
        preferences: CollectedPreferences,
        user_id: str,
        session_id: str | None = None,
        text: str = "",
    ) -> RecommendationResult:
        start_time = time.time()
        query = ScoringQuery.from_preferences(preferences, text)

        candidates, relaxed = self.retrieve(catalog_filter)
        if not candidates:
            self._record(user_id, session_id, query, [], 0, start_time)
            return RecommendationResult(recommendations=[], total_candidates=0)

        scored = [self.scorer.score(c, query, user_id) for c in candidates]
        scored.sort(key=lambda s: (-s.score, s.candidate.id))

        ranked = diversify(scored, self.config.max_results, self.config.max_per_brand)
        results = [s for s in ranked if passes_value_filter(s)]

        self._record(user_id, session_id, query, results, len(candidates), start_time)
        logger.info("Recommended %d of %d candidates for user %s", len(results), len(candidates), user_id)

        return RecommendationResult(
            recommendations=results,
            total_candidates=len(candidates),
            relaxed=relaxed,
            candidates=candidates,
        )

    def _record(
        self,
        user_id: str,
        session_id: str | None,
        query: ScoringQuery,
        results: list[ScoredCandidate],
        total_candidates: int,
        start_time: float,
    ) -> Outcome:
        return record_best_effort(self._sink, "recommendation", {
            "user_id": user_id,
            "session_id": session_id,
            "purposes": query.purposes,
            "brands": query.brands,
            "budget": query.budget.model_dump() if query.budget else None,
            "total_candidates": total_candidates,
            "results_returned": len(results),
            "laptop_ids": [r.candidate.id for r in results],
            "response_time_ms": round((time.time() - start_time) * 1000, 1),
        })
