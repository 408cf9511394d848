"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Ask the model for the next conversational turn as structured JSON.
- Substitute a cheaper model when the primary one is not available.
- Report failure to the caller instead of raising, so it can fall back.
"""
