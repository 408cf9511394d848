"""
Catalog ingestion package.

Responsibilities:
- Load a raw laptop listing export (CSV) through Hugging Face ``datasets``.
- Normalize it into the canonical laptop schema.
- Persist the processed catalog locally for the recommendation engine.
"""
