"""
Configuration for the laptop catalog ingestion pipeline.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class IngestionConfig:
    raw_path: Path = Path("advisor/data/raw/laptops_raw.csv")
    processed_data_dir: Path = Path("advisor/data/processed")
    processed_filename: str = "laptops.csv"

    @property
    def processed_path(self) -> Path:
        return self.processed_data_dir / self.processed_filename


DEFAULT_INGESTION_CONFIG = IngestionConfig()
