"""Thin wrapper around the OpenAI Responses API."""

from __future__ import annotations

from typing import Optional

from openai import AsyncOpenAI, OpenAIError

from workshop_rag.config import settings
from workshop_rag.errors import ProviderError


class OpenAIChatClient:
    """Async OpenAI client bounded by the configured timeout, without retries."""

    provider = "openai"

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        base_url: Optional[str] = None,
    ) -> None:
        if not api_key:
            raise ValueError("An OpenAI API key is required.")
        self.model = model or settings.openai_model_chat
        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url or settings.openai_base_url,
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
            response = await self.client.responses.create(
                model=self.model,
                temperature=settings.llm_temperature if temperature is None else temperature,
                max_output_tokens=max_output_tokens or settings.llm_max_output_tokens,
                input=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
            )
        except OpenAIError as exc:
            raise ProviderError("OpenAI", str(exc)) from exc
        return self._extract_text(response)

    @staticmethod
    def _extract_text(response) -> str:
        chunks: list[str] = []
        for item in response.output or []:
            for content in getattr(item, "content", None) or []:
                content_type = getattr(content, "type", None)
                content_text = getattr(content, "text", None)
                if isinstance(content, dict):
                    content_type = content.get("type", content_type)
                    content_text = content.get("text", content_text)
                if content_type in {"output_text", "text"} and content_text:
                    chunks.append(str(content_text))
        return "\n".join(part.strip() for part in chunks if part).strip()
