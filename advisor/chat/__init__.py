"""
Conversation layer.

Responsibilities:
- Extract preferences from each user message.
- Keep per-session state and steer it toward recommendations.
- Compose replies and suggested actions for the client.
"""
