from __future__ import annotations

import json
import logging
from pathlib import Path

import pandas as pd

from .config import DEFAULT_RECOMMENDATION_CONFIG
from .models import CandidateProduct, LaptopSpecs
from .scoring import infer_release_year

logger = logging.getLogger(__name__)

SPEC_COLUMNS = ["processor", "ram", "storage", "graphics"]


def _prepare(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    for col in SPEC_COLUMNS:
        if col not in df.columns:
            df[col] = None
    df["id"] = df["id"].astype(str)
    df["price"] = pd.to_numeric(df["price"], errors="coerce")
    df = df.dropna(subset=["price"])
    df["brand"] = df["brand"].fillna("").astype(str).str.strip()
    df["brand_lower"] = df["brand"].str.lower()
    df["release_year"] = [
        infer_release_year(
            str(row["name"]),
            json.dumps({c: str(row[c]) for c in SPEC_COLUMNS if pd.notna(row[c])}),
        )
        for _, row in df.iterrows()
    ]
    return df.reset_index(drop=True)


def _to_product(row: pd.Series) -> CandidateProduct:
    specs = LaptopSpecs(**{
        c: str(row[c]) for c in SPEC_COLUMNS if pd.notna(row[c]) and str(row[c]).strip()
    })
    year = row.get("release_year")
    return CandidateProduct(
        id=str(row["id"]),
        name=str(row["name"]),
        brand=str(row["brand"]),
        price=float(row["price"]),
        specs=specs,
        release_year=int(year) if pd.notna(year) else None,
    )


class Catalog:
    """In-process catalog query service over a laptop DataFrame."""

    def __init__(self, df: pd.DataFrame) -> None:
        self._df = _prepare(df)

    @classmethod
    def from_csv(cls, path: Path) -> Catalog:
        return cls(pd.read_csv(path))

    @classmethod
    def from_products(cls, products: list[CandidateProduct]) -> Catalog:
        rows = [
            {
                "id": p.id,
                "name": p.name,
                "brand": p.brand,
                "price": p.price,
                **p.specs.model_dump(),
            }
            for p in products
        ]
        return cls(pd.DataFrame(rows, columns=["id", "name", "brand", "price", *SPEC_COLUMNS]))

    def __len__(self) -> int:
        return len(self._df)

    def _mask(
        self,
        price_min: float | None,
        price_max: float | None,
        brands: list[str] | None,
    ) -> pd.Series:
        df = self._df
        mask = pd.Series(True, index=df.index)
        if price_min is not None:
            mask = mask & (df["price"] >= price_min)
        if price_max is not None:
            mask = mask & (df["price"] <= price_max)
        if brands:
            wanted = {b.strip().lower() for b in brands}
            mask = mask & df["brand_lower"].isin(wanted)
        return mask

    def frame(
        self,
        price_min: float | None = None,
        price_max: float | None = None,
        brands: list[str] | None = None,
    ) -> pd.DataFrame:
        return self._df.loc[self._mask(price_min, price_max, brands)]

    def query(
        self,
        price_min: float,
        price_max: float,
        brands: list[str] | None = None,
    ) -> list[CandidateProduct]:
        rows = self.frame(price_min, price_max, brands)
        logger.debug(
            "Catalog query price=%.0f-%.0f brands=%s -> %d rows",
            price_min, price_max, brands, len(rows),
        )
        return [_to_product(row) for _, row in rows.iterrows()]

    def sample(self, n: int) -> list[CandidateProduct]:
        """A stable spread of the catalog, cheapest to priciest."""
        if self._df.empty or n <= 0:
            return []
        ordered = self._df.sort_values(["price", "id"])
        step = max(1, len(ordered) // n)
        return [_to_product(row) for _, row in ordered.iloc[::step].head(n).iterrows()]

    def get(self, laptop_id: str) -> CandidateProduct | None:
        rows = self._df.loc[self._df["id"] == str(laptop_id)]
        if rows.empty:
            return None
        return _to_product(rows.iloc[0])


_catalog: Catalog | None = None


def get_catalog() -> Catalog:
    """Return the default in-memory catalog, loading it on first call."""
    global _catalog
    if _catalog is None:
        _catalog = Catalog.from_csv(DEFAULT_RECOMMENDATION_CONFIG.catalog_path)
    return _catalog
