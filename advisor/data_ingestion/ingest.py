from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import List

import pandas as pd
from datasets import load_dataset

from .config import DEFAULT_INGESTION_CONFIG, IngestionConfig

logger = logging.getLogger(__name__)

CANONICAL_COLUMNS: List[str] = [
    "id",
    "name",
    "brand",
    "price",
    "processor",
    "ram",
    "storage",
    "graphics",
]

# Brands whose canonical spelling is not title case
BRAND_SPELLINGS = {"hp": "HP", "msi": "MSI", "lg": "LG"}

_PRICE_CHARS_RE = re.compile(r"[^\d.]")


def _normalize_price(raw: float | int | str | None) -> float | None:
    if raw is None:
        return None
    text = _PRICE_CHARS_RE.sub("", str(raw))
    try:
        value = float(text)
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


def _normalize_brand(raw: str | None, name: str = "") -> str:
    brand = str(raw).strip() if raw is not None and pd.notna(raw) else ""
    if not brand and name:
        # Listings without a brand column usually lead with it
        brand = name.split()[0]
    if not brand:
        return ""
    return BRAND_SPELLINGS.get(brand.lower(), brand[:1].upper() + brand[1:])


def run_ingestion(config: IngestionConfig = DEFAULT_INGESTION_CONFIG) -> Path:
    """
    Execute the catalog ingestion pipeline.

    Steps:
    - Load the raw CSV export as a Hugging Face dataset.
    - Map raw fields into the canonical laptop schema.
    - Drop rows without a usable name or price.
    - Persist the cleaned catalog as CSV.
    """
    config.processed_data_dir.mkdir(parents=True, exist_ok=True)

    dataset = load_dataset("csv", data_files=str(config.raw_path), split="train")
    df = dataset.to_pandas()

    # Listing exports name the same fields differently
    def _first_present(columns: List[str]) -> str | None:
        for col in columns:
            if col in df.columns:
                return col
        return None

    col_id = _first_present(["id", "laptop_id", "sku", "product_id"])
    col_name = _first_present(["name", "title", "product_name", "model"])
    col_brand = _first_present(["brand", "manufacturer", "company"])
    col_price = _first_present(["price", "price_usd", "Price", "list_price"])
    col_processor = _first_present(["processor", "cpu", "Cpu", "processor_name"])
    col_ram = _first_present(["ram", "memory", "Ram"])
    col_storage = _first_present(["storage", "ssd", "Memory", "hdd"])
    col_graphics = _first_present(["graphics", "gpu", "Gpu", "graphics_card"])

    canonical = pd.DataFrame()
    canonical["id"] = df[col_id].astype(str) if col_id else df.index.astype(str)
    canonical["name"] = df[col_name].fillna("").astype(str).str.strip() if col_name else ""

    brands = df[col_brand] if col_brand else pd.Series([None] * len(df))
    canonical["brand"] = [
        _normalize_brand(b, n) for b, n in zip(brands, canonical["name"])
    ]

    if col_price:
        canonical["price"] = df[col_price].apply(_normalize_price)
    else:
        canonical["price"] = pd.NA

    for target, source in (
        ("processor", col_processor),
        ("ram", col_ram),
        ("storage", col_storage),
        ("graphics", col_graphics),
    ):
        canonical[target] = df[source].fillna("").astype(str).str.strip() if source else ""

    before = len(canonical)
    canonical = canonical[(canonical["name"] != "") & canonical["price"].notna()]
    if len(canonical) < before:
        logger.info("Dropped %d rows without name or price", before - len(canonical))

    canonical = canonical[CANONICAL_COLUMNS]

    output_path = config.processed_path
    canonical.to_csv(output_path, index=False)
    logger.info("Wrote %d laptops to %s", len(canonical), output_path)
    return output_path


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    path = run_ingestion()
    print(f"Ingestion complete. Processed data saved to: {path}")
