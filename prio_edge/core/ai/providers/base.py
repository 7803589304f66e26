from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol


class AIProviderError(RuntimeError):
    """Raised when an AI provider fails (network, auth, invalid response)."""

    def __init__(self, message: str, *, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


@dataclass(frozen=True)
class Usage:
    tokens_in: int = 0
    tokens_out: int = 0


class AIProvider(Protocol):
    name: str

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
        """Return the assistant reply text and token usage.

        Implementations must not log prompts: they carry lead notes.
        """
