from . import airtable, intent_score, system

__all__ = ["airtable", "intent_score", "system"]
