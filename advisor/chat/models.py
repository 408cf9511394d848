from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..recommendations.models import Budget, CatalogFilter, CollectedPreferences, ScoredCandidate

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    initial = "initial"
    discovery = "discovery"
    filtering = "filtering"
    recommendation = "recommendation"
    refinement = "refinement"


class Affordance(BaseModel):
    type: str = "action"  # question | action | purpose | confirm
    text: str
    priority: int = 0
    value: dict[str, Any] | None = None


class ConversationTurn(BaseModel):
    role: str
    content: str


class ConversationSession(BaseModel):
    session_id: str
    user_id: str = "anonymous"
    phase: Phase = Phase.initial
    turn_count: int = 0
    preferences: CollectedPreferences = Field(default_factory=CollectedPreferences)
    turns: list[ConversationTurn] = Field(default_factory=list)
    awaiting_confirmation: bool = False
    confirmed: bool = False
    narrowing_asked: bool = False


class ModelTurn(BaseModel):
    """Structured reply expected from the language model."""

    response: str
    phase: Phase = Phase.discovery
    affordances: list[Affordance] = Field(default_factory=list)
    collected_data: CollectedPreferences | None = None
    database_filter: CatalogFilter | None = None

    @field_validator("collected_data", mode="before")
    @classmethod
    def _drop_unusable_budget(cls, value: Any) -> Any:
        if not isinstance(value, dict) or value.get("budget") is None:
            return value
        try:
            Budget.model_validate(value["budget"])
        except ValidationError:
            logger.warning("Ignoring unusable budget from model: %s", value["budget"])
            return {**value, "budget": None}
        return value


class TurnResult(BaseModel):
    response: str
    session_id: str
    phase: Phase
    affordances: list[Affordance] = Field(default_factory=list)
    recommendations: list[ScoredCandidate] = Field(default_factory=list)
    database_filter: CatalogFilter | None = None


# ── HTTP payloads ────────────────────────────────────────────────────────


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=1000)
    session_id: str | None = None
    context: dict[str, Any] = Field(default_factory=dict)
