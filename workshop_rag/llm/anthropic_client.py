"""Thin wrapper around the Anthropic Messages API."""

from __future__ import annotations

from typing import Optional

from anthropic import AnthropicError, AsyncAnthropic

from workshop_rag.config import settings
from workshop_rag.errors import ProviderError


class AnthropicChatClient:
    """Async Anthropic client bounded by the configured timeout, without retries."""

    provider = "anthropic"

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        base_url: Optional[str] = None,
    ) -> None:
        if not api_key:
            raise ValueError("An Anthropic API key is required.")
        self.model = model or settings.anthropic_model_chat
        self.client = AsyncAnthropic(
            api_key=api_key,
            base_url=base_url or settings.anthropic_base_url,
            timeout=timeout or settings.llm_timeout_seconds,
            max_retries=0,
        )

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: Optional[float] = None,
        max_output_tokens: Optional[int] = None,
    ) -> str:
        try:
            message = await self.client.messages.create(
                model=self.model,
                max_tokens=max_output_tokens or settings.llm_max_output_tokens,
                temperature=settings.llm_temperature if temperature is None else temperature,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
            )
        except AnthropicError as exc:
            raise ProviderError("Anthropic", str(exc)) from exc
        texts = [block.text for block in message.content if getattr(block, "type", None) == "text"]
        return "\n".join(texts).strip()
