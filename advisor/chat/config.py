from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ConversationConfig:
    force_after_turns: int = 2
    narrowing_threshold: int = 50
    cache_ttl: float = 300.0  # 5 minutes
    cache_capacity: int = 500
    catalog_sample_size: int = 8
    max_history_messages: int = 6  # 3 exchanges


DEFAULT_CONVERSATION_CONFIG = ConversationConfig()
