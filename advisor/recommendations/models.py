from __future__ import annotations

import time
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Budget(BaseModel):
    min: float = Field(..., ge=0)
    max: float = Field(..., gt=0)

    @model_validator(mode="after")
    def _check_range(self) -> Budget:
        if self.min > self.max:
            raise ValueError(f"budget min {self.min} exceeds max {self.max}")
        return self

    @property
    def midpoint(self) -> float:
        return (self.min + self.max) / 2


class CollectedPreferences(BaseModel):
    budget: Budget | None = None
    purposes: list[str] = Field(default_factory=list)
    brands: list[str] = Field(default_factory=list)
    specs: dict = Field(default_factory=dict)
    priorities: list[str] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.budget or self.purposes or self.brands or self.specs or self.priorities)

    def merge(self, delta: CollectedPreferences) -> CollectedPreferences:
        """Shallow merge: non-empty fields of *delta* replace ours wholesale."""
        merged = self.model_copy(deep=True)
        if delta.budget is not None:
            merged.budget = delta.budget.model_copy()
        if delta.purposes:
            merged.purposes = sorted(set(delta.purposes))
        if delta.brands:
            merged.brands = sorted(set(delta.brands))
        if delta.specs:
            merged.specs = dict(delta.specs)
        if delta.priorities:
            merged.priorities = list(delta.priorities)
        return merged


class LaptopSpecs(BaseModel):
    processor: str | None = None
    ram: str | None = None
    storage: str | None = None
    graphics: str | None = None

    def is_empty(self) -> bool:
        return not (self.processor or self.ram or self.storage or self.graphics)


class CandidateProduct(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    brand: str
    price: float
    specs: LaptopSpecs = Field(default_factory=LaptopSpecs)
    release_year: int | None = None


class CatalogFilter(BaseModel):
    price_min: float = Field(default=300, ge=0)
    price_max: float = Field(default=3000, ge=0)
    brands: list[str] = Field(default_factory=list)


class ScoringQuery(BaseModel):
    """What the scorer matches a candidate against."""

    purposes: list[str] = Field(default_factory=list)
    budget: Budget | None = None
    brands: list[str] = Field(default_factory=list)
    text: str = ""

    @classmethod
    def from_preferences(cls, preferences: CollectedPreferences, text: str = "") -> ScoringQuery:
        parts = [text] if text else []
        parts.extend(preferences.priorities)
        return cls(
            purposes=list(preferences.purposes),
            budget=preferences.budget,
            brands=list(preferences.brands),
            text=" ".join(parts),
        )


class ScoredCandidate(BaseModel):
    candidate: CandidateProduct
    similarity_score: float = Field(..., ge=0.0, le=1.0)
    value_score: float = Field(..., ge=0.0, le=1.0)
    recency_score: float = Field(..., ge=0.0, le=1.0)
    user_preference_score: float = Field(..., ge=0.0, le=1.0)
    brand_score: float = Field(..., ge=0.0, le=1.0)
    budget_fit_score: float = Field(..., ge=0.0, le=1.0)
    score: float
    reasoning: list[str] = Field(default_factory=list)
    highlights: list[str] = Field(default_factory=list)
    warnings: list[str] | None = None


class RecommendationResult(BaseModel):
    recommendations: list[ScoredCandidate]
    total_candidates: int
    relaxed: bool = False
    candidates: list[CandidateProduct] = Field(default_factory=list, exclude=True)


class WeightProfile(BaseModel):
    performance: float = 0.28
    value: float = 0.27
    brand: float = 0.12
    specs: float = 0.18
    recency: float = 0.08
    budget: float = 0.07

    def total(self) -> float:
        return sum(self.model_dump().values())

    def normalized(self) -> WeightProfile:
        total = self.total()
        if total <= 0:
            return WeightProfile()
        return WeightProfile(**{k: v / total for k, v in self.model_dump().items()})


class UserAction(str, Enum):
    clicked = "clicked"
    purchased = "purchased"
    dismissed = "dismissed"
    compared = "compared"


class Sentiment(str, Enum):
    positive = "positive"
    negative = "negative"


class FeedbackEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    session_id: str
    user_id: str
    query: ScoringQuery = Field(default_factory=ScoringQuery)
    recommended_candidate: CandidateProduct
    action: UserAction
    sentiment: Sentiment | None = None
    timestamp: float = Field(default_factory=time.time)

    @property
    def is_positive(self) -> bool:
        return (
            self.action in (UserAction.clicked, UserAction.purchased)
            or self.sentiment == Sentiment.positive
        )


# ── HTTP payloads ────────────────────────────────────────────────────────


class RecommendationRequest(BaseModel):
    preferences: CollectedPreferences = Field(default_factory=CollectedPreferences)
    text: str = Field(default="", max_length=1000)
    session_id: str | None = None


class FeedbackRequest(BaseModel):
    session_id: str = Field(..., min_length=1)
    laptop_id: str = Field(..., min_length=1)
    action: UserAction
    sentiment: Sentiment | None = None
    query: ScoringQuery = Field(default_factory=ScoringQuery)


class FeedbackResponse(BaseModel):
    status: str
    total_feedback: int
