from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

_DEFAULT_CATALOG_CSV = Path(__file__).resolve().parent.parent / "data" / "processed" / "laptops.csv"


@dataclass(frozen=True)
class RecommendationConfig:
    max_results: int = 5
    max_per_brand: int = 2
    price_slack: float = 0.20
    relax_step: float = 0.25
    default_price_min: float = 300.0
    default_price_max: float = 3000.0
    catalog_path: Path = Path(os.getenv("LAPTOP_CATALOG_CSV", str(_DEFAULT_CATALOG_CSV)))


DEFAULT_RECOMMENDATION_CONFIG = RecommendationConfig()
