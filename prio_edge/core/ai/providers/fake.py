from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .base import AIProviderError, Usage


@dataclass
class FakeCall:
    model: str
    system_prompt: str
    user_prompt: str
    max_tokens: int
    temperature: float


@dataclass
class FakeProvider:
    """Deterministic provider for tests and local runs.

    Returns ``reply`` for every call, or raises ``AIProviderError`` when
    ``fail_status`` is set. Calls are recorded for assertions.
    """

    reply: str = "3"
    fail_status: Optional[int] = None
    calls: list[FakeCall] = field(default_factory=list)
    name: str = "fake"

    async def complete(
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
        timeout_seconds: float,
        max_tokens: int,
        temperature: float,
    ) -> tuple[str, Usage]:
        self.calls.append(
            FakeCall(
                model=model,
                system_prompt=system_prompt,
                user_prompt=user_prompt,
                max_tokens=max_tokens,
                temperature=temperature,
            )
        )
        if self.fail_status is not None:
            raise AIProviderError(f"fake provider HTTP {self.fail_status}", status=self.fail_status)
        return self.reply, Usage(tokens_in=len(user_prompt.split()), tokens_out=1)
