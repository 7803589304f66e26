from __future__ import annotations

import json
import logging
from typing import Any

import aiohttp

from .base import AIProviderError, Usage

logger = logging.getLogger(__name__)


def _token_param_name_for_model(model: str) -> str:
    """
    Chat Completions accepts ``max_tokens`` for the 4.x family, while GPT-5
    models only accept ``max_completion_tokens``.
    """

    m = (model or "").strip().lower()
    if m.startswith("gpt-5"):
        return "max_completion_tokens"
    return "max_tokens"


def _supports_temperature(model: str) -> bool:
    # GPT-5 chat-completions rejects custom temperature values.
    m = (model or "").strip().lower()
    return not m.startswith("gpt-5")


def build_chat_payload(
    *,
    model: str,
    system_prompt: str,
    user_prompt: str,
    max_tokens: int,
    temperature: float,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "model": model,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        _token_param_name_for_model(model): int(max_tokens),
    }
    if _supports_temperature(model):
        payload["temperature"] = temperature
    return payload


def extract_reply_text(data: Any) -> str:
    """Text of the first choice, or "" for any body that does not have one."""
    choices = data.get("choices") if isinstance(data, dict) else None
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return ""
    message = choices[0].get("message")
    content = message.get("content") if isinstance(message, dict) else None
    return content if isinstance(content, str) else ""


def extract_usage(data: Any) -> Usage:
    usage_raw = data.get("usage") if isinstance(data, dict) else None
    if not isinstance(usage_raw, dict):
        return Usage()
    return Usage(
        tokens_in=int(usage_raw.get("prompt_tokens") or 0),
        tokens_out=int(usage_raw.get("completion_tokens") or 0),
    )


class OpenAIProvider:
    name = "openai"

    def __init__(self, *, api_key: str, base_url: str = "https://api.openai.com/v1") -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")

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
        if not self._api_key:
            raise AIProviderError("OpenAI token is missing")

        url = f"{self._base_url}/chat/completions"
        payload = build_chat_payload(
            model=model,
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            max_tokens=max_tokens,
            temperature=temperature,
        )
        timeout = aiohttp.ClientTimeout(total=float(timeout_seconds))
        headers = {"Authorization": f"Bearer {self._api_key}", "Content-Type": "application/json"}
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(url, headers=headers, json=payload) as resp:
                    raw = await resp.text()
                    status = resp.status
        except aiohttp.ClientError as exc:
            raise AIProviderError(f"OpenAI request failed: {exc}") from exc

        if status >= 400:
            raise AIProviderError(f"OpenAI HTTP {status}: {raw[:4000]}", status=status)
        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise AIProviderError(f"Invalid JSON from OpenAI: {exc}", status=status) from exc

        return extract_reply_text(data), extract_usage(data)
