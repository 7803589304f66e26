from .service import IntentScorer, parse_score

__all__ = ["IntentScorer", "parse_score"]
