"""
Laptop recommendation engine.

Responsibilities:
- Query the catalog for candidates inside a (slackened) price window.
- Score candidates on fit, value, recency, brand, budget and past behaviour.
- Rank, diversify by brand and drop poor value-for-money picks.
- Adapt per-user scoring weights from feedback.
"""
