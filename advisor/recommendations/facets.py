"""
Catalog facets and the narrowing question.

When too many laptops match, we ask the one question (price or brand) whose
answer splits the remaining candidates with the larger information gain.
"""
from __future__ import annotations

import math

import numpy as np
import pandas as pd
from pydantic import BaseModel, Field

PRICE_BUCKETS = 6
MIN_BUCKET_STEP = 50
TOP_BRANDS = 15
QUESTION_BRANDS = 8


class PriceBucket(BaseModel):
    min: int
    max: int
    count: int


class BrandCount(BaseModel):
    brand: str
    count: int


class Facets(BaseModel):
    candidates: int
    price_min: float
    price_max: float
    buckets: list[PriceBucket] = Field(default_factory=list)
    brands: list[BrandCount] = Field(default_factory=list)


class NarrowingOption(BaseModel):
    label: str
    value: dict


class NarrowingQuestion(BaseModel):
    type: str  # "price_range" | "brand_select"
    text: str
    options: list[NarrowingOption]


def entropy(counts: list[int] | np.ndarray) -> float:
    arr = np.asarray(counts, dtype=float)
    arr = arr[arr > 0]
    if arr.size == 0:
        return 0.0
    p = arr / arr.sum()
    return float(-(p * np.log2(p)).sum())


def brand_counts(df: pd.DataFrame, limit: int = TOP_BRANDS) -> list[BrandCount]:
    brands = df["brand"].fillna("").astype(str).str.strip()
    counts = brands[brands != ""].value_counts()
    # value_counts orders by count; break ties alphabetically for stable output
    pairs = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))[:limit]
    return [BrandCount(brand=b, count=int(c)) for b, c in pairs]


def price_histogram(prices: np.ndarray, buckets: int = PRICE_BUCKETS) -> list[PriceBucket]:
    if prices.size == 0:
        return []
    low, high = float(prices.min()), float(prices.max())
    step = max(MIN_BUCKET_STEP, math.ceil((high - low) / buckets))
    result: list[PriceBucket] = []
    for i in range(buckets):
        bmin = low + i * step
        bmax = high if i == buckets - 1 else bmin + step
        count = int(((prices >= bmin) & (prices <= bmax)).sum())
        result.append(PriceBucket(min=math.floor(bmin), max=math.ceil(bmax), count=count))
    return result


def compute_facets(df: pd.DataFrame) -> Facets:
    prices = df["price"].dropna().to_numpy(dtype=float)
    return Facets(
        candidates=len(df),
        price_min=float(prices.min()) if prices.size else 0.0,
        price_max=float(prices.max()) if prices.size else 0.0,
        buckets=price_histogram(prices),
        brands=brand_counts(df),
    )


def choose_narrowing_question(df: pd.DataFrame) -> NarrowingQuestion | None:
    """Pick a budget or brand question for the candidates in *df*."""
    n = len(df)
    if n == 0:
        return None

    prices = np.sort(df["price"].dropna().to_numpy(dtype=float))
    median = float(prices[len(prices) // 2]) if prices.size else 0.0
    left = int((prices <= median).sum())
    right = int((prices > median).sum())
    # an answer reveals as many bits as its distribution carries
    price_gain = entropy([left, right])

    top = brand_counts(df, limit=QUESTION_BRANDS)
    brand_gain = entropy([b.count for b in top]) if top else 0.0

    if price_gain >= brand_gain:
        mid = int(round(median))
        low = max(100, math.floor(median * 0.8))
        high = math.ceil(median * 1.2)
        return NarrowingQuestion(
            type="price_range",
            text="What budget range fits you better?",
            options=[
                NarrowingOption(label=f"Up to ${mid:,}", value={"price_max": mid}),
                NarrowingOption(label=f"${mid:,} and above", value={"price_min": mid}),
                NarrowingOption(label=f"${low:,} - ${high:,}", value={"price_min": low, "price_max": high}),
            ],
        )

    return NarrowingQuestion(
        type="brand_select",
        text="Any preferred brands?",
        options=[NarrowingOption(label=b.brand, value={"brands": [b.brand]}) for b in top],
    )


def candidates_frame(candidates: list) -> pd.DataFrame:
    return pd.DataFrame(
        [{"id": c.id, "brand": c.brand, "price": c.price} for c in candidates],
        columns=["id", "brand", "price"],
    )
