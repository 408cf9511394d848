from __future__ import annotations

import json
import logging
import time
import uuid
from typing import Any, Callable

from ..analytics.store import EventSink, record_best_effort, record_event
from ..llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from ..llm.groq_client import RESPONSE_FORMAT_INSTRUCTIONS, complete_turn
from ..recommendations.engine import RecommendationEngine, build_filter
from ..recommendations.facets import candidates_frame, choose_narrowing_question
from ..recommendations.models import CandidateProduct, CollectedPreferences, ScoredCandidate
from .affordances import (
    FALLBACK_RESPONSE,
    PURPOSE_PICKS,
    SMALL_TALK_RESPONSE,
    default_ui_config,
    fallback_affordances,
    is_affirmation,
    is_explicit_ask,
    is_small_talk,
    normalize,
    with_standard_actions,
)
from .cache import TTLCache, make_key
from .config import DEFAULT_CONVERSATION_CONFIG, ConversationConfig
from .convergence import TurnSignals, apply_convergence_policy, describe_preferences
from .extractor import extract
from .models import (
    Affordance,
    ConversationSession,
    ConversationTurn,
    ModelTurn,
    Phase,
    TurnResult,
)
from .session_store import SessionStore

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You are a friendly laptop shopping assistant. Your job is to learn what the \
user needs (purpose, budget, brands, must-have specs) in as few questions as \
possible and move them toward concrete recommendations.

Phases: initial -> discovery -> filtering -> recommendation (-> refinement).
Ask at most one short question per turn. Never invent laptops that are not in \
the catalog sample.

## Conversation state
- Current phase: {phase}
- Turn: {turn}
- Collected preferences: {preferences}

## Recent messages
{history}

## Catalog sample
| Name | Brand | Price | CPU | RAM | GPU |
|---|---|---|---|---|---|
{catalog}

"""

NO_RESULTS_RESPONSE = (
    "I couldn't find laptops matching all of that. "
    "Want to widen your budget or try other brands?"
)

ModelCall = Callable[[str, str, LLMConfig], "ModelTurn | None"]


def summarize_recommendations(
    recommendations: list[ScoredCandidate],
    preferences: CollectedPreferences,
) -> str:
    lines = [f"Here are my top {len(recommendations)} picks for {describe_preferences(preferences)}:"]
    for rank, item in enumerate(recommendations[:2], start=1):
        laptop = item.candidate
        lines.append(f"{rank}. {laptop.name} (${laptop.price:,.0f})")
        points = (item.highlights + item.reasoning)[:2]
        lines.extend(f"   • {p}" for p in points)
    lines.append("Want me to compare the top 3, show more options, or adjust your budget?")
    return "\n".join(lines)


class ConversationOrchestrator:
    """Drives one conversational turn from utterance to composed reply."""

    def __init__(
        self,
        engine: RecommendationEngine,
        sessions: SessionStore,
        cache: TTLCache | None = None,
        llm_config: LLMConfig = DEFAULT_LLM_CONFIG,
        config: ConversationConfig = DEFAULT_CONVERSATION_CONFIG,
        complete: ModelCall = complete_turn,
        catalog_sample: Callable[[int], list[CandidateProduct]] | None = None,
        sink: EventSink = record_event,
    ) -> None:
        self.engine = engine
        self.sessions = sessions
        self.config = config
        self.cache = cache if cache is not None else TTLCache(config.cache_capacity, config.cache_ttl)
        self.llm_config = llm_config
        self._complete = complete
        self._catalog_sample = catalog_sample
        self._sink = sink

    # ── public operations ───────────────────────────────────────────────

    def process_turn(
        self,
        user_id: str,
        utterance: str,
        session_id: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> TurnResult:
        start_time = time.time()
        session = self._load_session(user_id, session_id)
        affirmed = is_affirmation(utterance)
        delta = extract(utterance, session.preferences)

        # 1. Small talk never advances the conversation
        if (
            is_small_talk(utterance)
            and delta.is_empty()
            and not (session.awaiting_confirmation and affirmed)
        ):
            self.sessions.put(session)
            return TurnResult(
                response=SMALL_TALK_RESPONSE,
                session_id=session.session_id,
                phase=session.phase,
                affordances=[a.model_copy() for a in PURPOSE_PICKS],
            )

        # 2. Identical question in the same conversational state
        cache_key = make_key(
            normalize(utterance),
            session.phase.value,
            session.preferences.model_dump(mode="json"),
            session.awaiting_confirmation,
            session.confirmed,
        )
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info("[CACHE HIT] Returning cached turn for session %s", session.session_id)
            self.sessions.put(session)
            turn = cached.model_copy(update={"session_id": session.session_id}, deep=True)
            self._record(user_id, turn, start_time, cache_hit=True)
            return turn

        # 3. Merge what the user told us
        # Only the user's own words count as a change; model echoes do not
        before = session.preferences
        session.preferences = before.merge(delta)
        user_changed = session.preferences != before

        # 4. Ask the model for a draft
        model_turn = self._complete(self.build_system_prompt(session), utterance, self.llm_config)
        degraded = model_turn is None
        if model_turn is None:
            model_turn = self._fallback_turn(session, utterance)
        elif model_turn.collected_data is not None:
            session.preferences = session.preferences.merge(model_turn.collected_data)

        # 5. Converge
        signals = TurnSignals(
            affirmed=affirmed,
            explicit_ask=is_explicit_ask(utterance),
            preferences_changed=user_changed,
        )
        decision = apply_convergence_policy(model_turn, session, signals, self.config)
        if decision.overridden:
            logger.info(
                "Convergence override for session %s: %s -> %s",
                session.session_id, model_turn.phase.value, decision.phase.value,
            )

        session.phase = decision.phase
        session.awaiting_confirmation = decision.awaiting_confirmation
        session.confirmed = session.confirmed or decision.confirmed

        # 6. Advance
        session.turn_count += 1

        response = decision.response
        affordances = list(decision.affordances)
        recommendations: list[ScoredCandidate] = []
        database_filter = model_turn.database_filter

        # 7. Recommend
        if decision.recommend:
            database_filter = build_filter(session.preferences, self.engine.config)
            result = self.engine.recommend(
                database_filter,
                session.preferences,
                user_id,
                session_id=session.session_id,
                text=utterance,
            )
            if (
                result.total_candidates > self.config.narrowing_threshold
                and not session.narrowing_asked
            ):
                question = choose_narrowing_question(candidates_frame(result.candidates))
                session.narrowing_asked = True
                session.phase = Phase.discovery
                if question is not None:
                    logger.info(
                        "%d candidates for session %s, asking %s",
                        result.total_candidates, session.session_id, question.type,
                    )
                    response = question.text
                    affordances = [
                        Affordance(type="question", text=o.label, priority=i, value=o.value)
                        for i, o in enumerate(question.options, start=1)
                    ]
            elif result.recommendations:
                recommendations = result.recommendations
                response = summarize_recommendations(recommendations, session.preferences)
            else:
                response = NO_RESULTS_RESPONSE

        # 8. Compose
        turn = TurnResult(
            response=response,
            session_id=session.session_id,
            phase=session.phase,
            affordances=with_standard_actions(affordances),
            recommendations=recommendations,
            database_filter=database_filter,
        )

        self._remember(session, utterance, response)
        self.sessions.put(session)

        if not degraded:
            self.cache.set(cache_key, turn)
        self._record(user_id, turn, start_time, degraded=degraded)
        return turn

    def get_adaptive_ui_config(self, user_id: str, context: dict[str, Any] | None = None) -> dict[str, Any]:
        return default_ui_config()

    # ── helpers ─────────────────────────────────────────────────────────

    def _load_session(self, user_id: str, session_id: str | None) -> ConversationSession:
        if session_id:
            existing = self.sessions.get(session_id)
            if existing is not None:
                return existing
            logger.info("Unknown session %s, starting a new one", session_id)
        return ConversationSession(session_id=str(uuid.uuid4()), user_id=user_id)

    def _record(
        self,
        user_id: str,
        turn: TurnResult,
        start_time: float,
        cache_hit: bool = False,
        degraded: bool = False,
    ) -> None:
        record_best_effort(self._sink, "chat_turn", {
            "user_id": user_id,
            "session_id": turn.session_id,
            "phase": turn.phase.value,
            "results_returned": len(turn.recommendations),
            "cache_hit": cache_hit,
            "degraded": degraded,
            "response_time_ms": round((time.time() - start_time) * 1000, 1),
        })

    def _remember(self, session: ConversationSession, user_message: str, assistant_message: str) -> None:
        turns = list(session.turns)
        turns.append(ConversationTurn(role="user", content=user_message))
        turns.append(ConversationTurn(role="assistant", content=assistant_message))
        session.turns = turns[-self.config.max_history_messages:]

    def _fallback_turn(self, session: ConversationSession, utterance: str) -> ModelTurn:
        phase = session.phase if session.phase != Phase.initial else Phase.discovery
        return ModelTurn(
            response=FALLBACK_RESPONSE,
            phase=phase,
            affordances=fallback_affordances(utterance),
        )

    def build_system_prompt(self, session: ConversationSession) -> str:
        history = "\n".join(f"{t.role}: {t.content}" for t in session.turns) or "(none)"
        sample = self._sample()
        catalog = "\n".join(
            f"| {p.name} | {p.brand} | ${p.price:,.0f} | {p.specs.processor or '?'} "
            f"| {p.specs.ram or '?'} | {p.specs.graphics or '?'} |"
            for p in sample
        ) or "| (unavailable) | | | | | |"
        prompt = SYSTEM_PROMPT.format(
            phase=session.phase.value,
            turn=session.turn_count,
            preferences=json.dumps(session.preferences.model_dump(mode="json")),
            history=history,
            catalog=catalog,
        )
        return prompt + RESPONSE_FORMAT_INSTRUCTIONS

    def _sample(self) -> list[CandidateProduct]:
        if self._catalog_sample is None:
            return []
        try:
            return self._catalog_sample(self.config.catalog_sample_size)
        except Exception:
            logger.warning("Catalog sample unavailable for prompt", exc_info=True)
            return []
