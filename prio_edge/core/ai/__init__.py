"""LLM integration used by lead scoring.

Prompts carry lead notes and call summaries; providers must never log them.
"""

from .prompts import intent_score_prompts
from .providers import AIProvider, AIProviderError, FakeProvider, OpenAIProvider

__all__ = ["AIProvider", "AIProviderError", "FakeProvider", "OpenAIProvider", "intent_score_prompts"]
