"""
Convergence policy.

Keeps conversations from looping in open-ended discovery: after a bounded
number of exchanges (or as soon as there is something to go on) the user gets
a confirmation summary, and once they accept it, results.
"""
from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, Field

from ..recommendations.models import CollectedPreferences
from .affordances import CONFIRM_ACTIONS
from .config import DEFAULT_CONVERSATION_CONFIG, ConversationConfig
from .models import Affordance, ConversationSession, ModelTurn, Phase


@dataclass(frozen=True)
class TurnSignals:
    affirmed: bool = False
    explicit_ask: bool = False
    preferences_changed: bool = False


class ConvergenceDecision(BaseModel):
    phase: Phase
    response: str
    affordances: list[Affordance] = Field(default_factory=list)
    recommend: bool = False
    awaiting_confirmation: bool = False
    confirmed: bool = False
    overridden: bool = False


def describe_preferences(preferences: CollectedPreferences) -> str:
    purpose = " / ".join(preferences.purposes) if preferences.purposes else "general-purpose"
    if preferences.budget:
        budget = f"${preferences.budget.min:,.0f} - ${preferences.budget.max:,.0f}"
    else:
        budget = "no fixed budget"
    brands = ", ".join(preferences.brands) if preferences.brands else "any brand"
    return f"a {purpose} laptop, budget {budget}, {brands}"


def confirmation_summary(preferences: CollectedPreferences) -> str:
    return (
        f"Just to confirm, you're looking for {describe_preferences(preferences)}. "
        "Shall I pull up my top picks, or would you like to adjust anything?"
    )


def should_force(
    model_turn: ModelTurn,
    state: ConversationSession,
    signals: TurnSignals,
    config: ConversationConfig = DEFAULT_CONVERSATION_CONFIG,
) -> bool:
    return (
        state.turn_count >= config.force_after_turns
        or (model_turn.phase != Phase.recommendation and not state.preferences.is_empty())
        or model_turn.phase == Phase.recommendation
        or signals.explicit_ask
    )


def apply_convergence_policy(
    model_turn: ModelTurn,
    state: ConversationSession,
    signals: TurnSignals,
    config: ConversationConfig = DEFAULT_CONVERSATION_CONFIG,
) -> ConvergenceDecision:
    """
    Decide the phase, text and next step for this turn.

    *state* is the session after this turn's preferences were merged and
    before its turn count is incremented. Pure: neither argument is mutated.
    """
    if signals.explicit_ask:
        return ConvergenceDecision(
            phase=Phase.recommendation,
            response=model_turn.response,
            affordances=list(model_turn.affordances),
            recommend=True,
            confirmed=True,
            overridden=model_turn.phase != Phase.recommendation,
        )

    if state.awaiting_confirmation and signals.affirmed and not signals.preferences_changed:
        return ConvergenceDecision(
            phase=Phase.recommendation,
            response=model_turn.response,
            affordances=list(model_turn.affordances),
            recommend=True,
            confirmed=True,
            overridden=model_turn.phase != Phase.recommendation,
        )

    if state.confirmed:
        phase = Phase.refinement if signals.preferences_changed else Phase.recommendation
        return ConvergenceDecision(
            phase=phase,
            response=model_turn.response,
            affordances=list(model_turn.affordances),
            recommend=True,
            confirmed=True,
            overridden=model_turn.phase != phase,
        )

    if should_force(model_turn, state, signals, config):
        return ConvergenceDecision(
            phase=Phase.discovery,
            response=confirmation_summary(state.preferences),
            affordances=[a.model_copy() for a in CONFIRM_ACTIONS],
            awaiting_confirmation=True,
            overridden=True,
        )

    phase = model_turn.phase
    if phase in (Phase.recommendation, Phase.refinement):
        phase = Phase.discovery
    return ConvergenceDecision(
        phase=phase,
        response=model_turn.response,
        affordances=list(model_turn.affordances),
        awaiting_confirmation=state.awaiting_confirmation,
    )
