from pathlib import Path

import pandas as pd

from advisor.data_ingestion.config import IngestionConfig
from advisor.data_ingestion.ingest import CANONICAL_COLUMNS, run_ingestion
from advisor.recommendations.catalog import Catalog


def _write_raw(path: Path) -> None:
    pd.DataFrame([
        {"title": "Dell XPS 13 2023", "company": "dell", "price_usd": "$1,199.00",
         "cpu": "Intel Core i7-1360P", "memory": "16GB", "ssd": "512GB SSD", "gpu": "Intel Iris Xe"},
        {"title": "HP Victus 16 2023", "company": "hp", "price_usd": "899",
         "cpu": "AMD Ryzen 7 7840HS", "memory": "16GB", "ssd": "512GB SSD", "gpu": "RTX 4050"},
        {"title": "Lenovo LOQ 15", "company": "", "price_usd": "849.99",
         "cpu": "Intel Core i5-12450HX", "memory": "8GB", "ssd": "512GB SSD", "gpu": "RTX 3050"},
        {"title": "Mystery Laptop", "company": "Acme", "price_usd": "call us",
         "cpu": "", "memory": "", "ssd": "", "gpu": ""},
    ]).to_csv(path, index=False)


def test_run_ingestion_normalizes_listing_export(tmp_path: Path):
    """
    End-to-end ingestion over a small raw export.

    Uses a temporary directory so we don't pollute real data directories.
    """
    raw = tmp_path / "raw.csv"
    _write_raw(raw)
    cfg = IngestionConfig(raw_path=raw, processed_data_dir=tmp_path / "processed")

    output_path = run_ingestion(config=cfg)

    assert output_path.is_file(), "Processed CSV should be created"
    df = pd.read_csv(output_path)
    assert list(df.columns) == CANONICAL_COLUMNS
    assert len(df) == 3, "Rows without a price should be dropped"
    assert df["price"].tolist() == [1199.0, 899.0, 849.99]
    assert df["brand"].tolist() == ["Dell", "HP", "Lenovo"]


def test_processed_catalog_is_loadable(tmp_path: Path):
    raw = tmp_path / "raw.csv"
    _write_raw(raw)
    output_path = run_ingestion(IngestionConfig(raw_path=raw, processed_data_dir=tmp_path))

    catalog = Catalog.from_csv(output_path)
    assert len(catalog) == 3
    assert catalog.get("0").release_year == 2023


def test_seed_catalog_is_canonical():
    path = Path(__file__).resolve().parent.parent / "data" / "processed" / "laptops.csv"
    df = pd.read_csv(path)
    assert list(df.columns) == CANONICAL_COLUMNS
    assert df["id"].is_unique
    assert (df["price"] > 0).all()
