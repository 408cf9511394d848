from __future__ import annotations

from fastapi import FastAPI, Header, HTTPException, Query

from .analytics.aggregator import compute_analytics, feedback_summary
from .analytics.feedback import get_feedback, record_feedback
from .analytics.store import get_events
from .chat.cache import TTLCache
from .chat.config import DEFAULT_CONVERSATION_CONFIG
from .chat.models import ChatRequest, TurnResult
from .chat.orchestrator import ConversationOrchestrator
from .chat.session_store import InMemorySessionStore
from .recommendations.catalog import get_catalog
from .recommendations.engine import RecommendationEngine, build_filter
from .recommendations.facets import Facets, compute_facets
from .recommendations.models import (
    FeedbackEvent,
    FeedbackRequest,
    FeedbackResponse,
    RecommendationRequest,
    RecommendationResult,
)
from .recommendations.scoring import CandidateScorer
from .recommendations.weights import InMemoryWeightStore

app = FastAPI(title="Laptop Advisor API", version="1.0.0")

catalog = get_catalog()
weight_store = InMemoryWeightStore()
session_store = InMemorySessionStore()
turn_cache = TTLCache(DEFAULT_CONVERSATION_CONFIG.cache_capacity, DEFAULT_CONVERSATION_CONFIG.cache_ttl)
engine = RecommendationEngine(catalog, CandidateScorer(weight_store))
orchestrator = ConversationOrchestrator(
    engine,
    session_store,
    cache=turn_cache,
    catalog_sample=catalog.sample,
)

ANONYMOUS = "anonymous"


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/ui-config")
def ui_config(user_id: str = Header(default=ANONYMOUS, alias="user-id")) -> dict:
    return orchestrator.get_adaptive_ui_config(user_id)


@app.get("/facets", response_model=Facets)
def facets(
    price_min: float | None = Query(default=None, ge=0),
    price_max: float | None = Query(default=None, ge=0),
    brands: list[str] | None = Query(default=None),
) -> Facets:
    return compute_facets(catalog.frame(price_min, price_max, brands))


# ── Chat endpoint ────────────────────────────────────────────────────────


@app.post("/chat", response_model=TurnResult)
def chat(
    body: ChatRequest,
    user_id: str = Header(default=ANONYMOUS, alias="user-id"),
) -> TurnResult:
    return orchestrator.process_turn(
        user_id or ANONYMOUS,
        body.message,
        session_id=body.session_id,
        context=body.context,
    )


# ── Recommendation endpoints ─────────────────────────────────────────────


@app.post("/recommendations", response_model=RecommendationResult)
def recommendations(
    body: RecommendationRequest,
    user_id: str = Header(default=ANONYMOUS, alias="user-id"),
) -> RecommendationResult:
    catalog_filter = build_filter(body.preferences, engine.config)
    return engine.recommend(
        catalog_filter,
        body.preferences,
        user_id or ANONYMOUS,
        session_id=body.session_id,
        text=body.text,
    )


@app.post("/feedback", response_model=FeedbackResponse)
def feedback(
    body: FeedbackRequest,
    user_id: str = Header(default=ANONYMOUS, alias="user-id"),
) -> FeedbackResponse:
    laptop = catalog.get(body.laptop_id)
    if laptop is None:
        raise HTTPException(status_code=404, detail=f"Unknown laptop: {body.laptop_id}")

    event = FeedbackEvent(
        session_id=body.session_id,
        user_id=user_id or ANONYMOUS,
        query=body.query,
        recommended_candidate=laptop,
        action=body.action,
        sentiment=body.sentiment,
    )
    record_feedback(event, weight_store)
    return FeedbackResponse(status="recorded", total_feedback=len(get_feedback()))


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.get("/analytics")
def analytics() -> dict:
    return compute_analytics(get_events())


@app.get("/feedback/stats")
def feedback_stats() -> dict:
    return feedback_summary(get_feedback())


@app.get("/cache/stats")
def cache_stats() -> dict:
    return turn_cache.stats()
