from __future__ import annotations

import logging
import re
from typing import Any, Mapping, Optional

from prio_edge.core.ai.prompts import intent_score_prompts
from prio_edge.core.ai.providers import AIProvider, AIProviderError
from prio_edge.core.errors import ErrorKind, ProxyError, server_misconfig, upstream_failure
from prio_edge.core.result import Result, failure, success

logger = logging.getLogger(__name__)

MIN_SCORE = 1
MAX_SCORE = 5
SCORE_MAX_TOKENS = 5
SCORE_TEMPERATURE = 0.1

_LEADING_INT_RE = re.compile(r"^[+-]?[0-9]+")


def parse_score(reply: Optional[str]) -> Optional[int]:
    """Read the leading integer of a reply, like ``parseInt(reply, 10)``.

    ``"4"`` and ``"4 - HIGH"`` give 4; ``"HIGH"`` and ``""`` give None.
    """
    match = _LEADING_INT_RE.match((reply or "").strip())
    if match is None:
        return None
    return int(match.group(0))


class IntentScorer:
    """Single-shot lead intent scoring. No retries: failures go straight back."""

    def __init__(
        self,
        *,
        provider: AIProvider,
        model: str,
        configured: bool = True,
        timeout_seconds: float = 30.0,
    ) -> None:
        self._provider = provider
        self._model = model
        self._configured = configured
        self._timeout_seconds = timeout_seconds

    @property
    def configured(self) -> bool:
        return self._configured

    async def score(self, fields: Mapping[str, Any]) -> Result[int, ProxyError]:
        if not self._configured:
            logger.error("OPENAI_TOKEN is not configured; cannot score leads")
            return failure(server_misconfig())

        system_prompt, user_prompt = intent_score_prompts(fields)
        try:
            reply, usage = await self._provider.complete(
                model=self._model,
                system_prompt=system_prompt,
                user_prompt=user_prompt,
                timeout_seconds=self._timeout_seconds,
                max_tokens=SCORE_MAX_TOKENS,
                temperature=SCORE_TEMPERATURE,
            )
        except AIProviderError as exc:
            logger.error("OpenAI API error (status=%s): %s", exc.status, exc)
            return failure(upstream_failure("AI scoring failed"))

        content = (reply or "").strip()
        score = parse_score(content)
        if score is None or not MIN_SCORE <= score <= MAX_SCORE:
            logger.error("Invalid score from %s: %r", self._provider.name, content[:50])
            return failure(ProxyError(ErrorKind.UPSTREAM_FAILURE, "Invalid score returned"))

        logger.info(
            "Scored lead %d (tokens_in=%d, tokens_out=%d)",
            score,
            usage.tokens_in,
            usage.tokens_out,
            extra={"score": score, "tokens_in": usage.tokens_in, "tokens_out": usage.tokens_out},
        )
        return success(score)


__all__ = ["IntentScorer", "MAX_SCORE", "MIN_SCORE", "parse_score"]
