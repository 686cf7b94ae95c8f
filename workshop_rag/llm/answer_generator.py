"""Glue module that turns a retrieval bundle into a structured workshop answer."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, Dict, List, Optional, Protocol

from pydantic import BaseModel, ValidationError

from workshop_rag.config import settings
from workshop_rag.errors import ProviderError
from workshop_rag.llm.anthropic_client import AnthropicChatClient
from workshop_rag.llm.openai_client import OpenAIChatClient
from workshop_rag.llm.prompts import SYSTEM_PROMPT, build_user_prompt
from workshop_rag.models.qa import ChatAnswer
from workshop_rag.models.retrieval import MatchedPart, RetrievalResult
from workshop_rag.utils.tokenization import clip_text

logger = logging.getLogger(__name__)

NO_MATCH_ANSWER = "I could not find a confident match in the indexed content."
FALLBACK_ITEMS = 3
FALLBACK_TITLES = 5
SUMMARY_CHARS = 280

PROVIDER_ALIASES = {"claude": "anthropic"}
PROVIDER_LABELS = {"openai": "OpenAI", "anthropic": "Anthropic"}

FENCED_JSON_PATTERN = re.compile(r"```json\s*([\s\S]+?)\s*```", re.IGNORECASE)


class ChatClient(Protocol):
    async def complete(self, system_prompt: str, user_prompt: str) -> str: ...


ClientFactory = Callable[..., ChatClient]


class ChatOutcome(BaseModel):
    provider_used: Optional[str] = None
    model_used: Optional[str] = None
    answer: ChatAnswer


def _dump_all(items) -> List[Dict[str, Any]]:
    return [item.model_dump(by_alias=True, mode="json") for item in items]


def _display_part(part: MatchedPart) -> Dict[str, Any]:
    return {
        "partNo": part.part_no,
        "katNo": part.kat_no,
        "description": part.description,
        "usage": part.usage,
        "qty": part.qty,
        "diagramId": part.diagram_id,
        "diagramUrl": part.diagram_url,
        "ref": part.ref,
    }


def build_fallback_answer(
    query: str, retrieval: RetrievalResult, selected_engine: Optional[str] = None
) -> ChatAnswer:
    """Template an answer from the top retrieval entries without calling any model."""
    top_chunks = retrieval.top_chunks[:FALLBACK_ITEMS]

    answer = NO_MATCH_ANSWER
    if top_chunks:
        titles = list(dict.fromkeys(chunk.title for chunk in top_chunks))
        engine_note = f" (engine: {selected_engine})" if selected_engine else ""
        answer = (
            f'I found relevant procedures for "{query}"{engine_note}.\n'
            f"Top matches: {'; '.join(titles[:FALLBACK_TITLES])}."
        )

    return ChatAnswer(
        answer=answer,
        procedure_summary="\n".join(
            f"{chunk.title}: {clip_text(chunk.text, SUMMARY_CHARS)}" for chunk in top_chunks
        ),
        required_parts=[_display_part(part) for part in retrieval.matched_parts[:FALLBACK_ITEMS]],
        required_tools=_dump_all(retrieval.tools[:FALLBACK_ITEMS]),
        torque_specs=_dump_all(retrieval.torque_specs[:FALLBACK_ITEMS]),
        diagram_grounding=_dump_all(retrieval.diagram_grounding[:FALLBACK_ITEMS]),
        warnings=list(retrieval.warnings),
        citations=_dump_all(retrieval.citations),
    )


def extract_json_from_text(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """Find a JSON object in a model reply: bare, fenced, or between the outer braces."""
    if not text or not isinstance(text, str):
        return None
    trimmed = text.strip()
    candidates = [trimmed]
    fenced = FENCED_JSON_PATTERN.search(trimmed)
    if fenced:
        candidates.append(fenced.group(1))
    first, last = trimmed.find("{"), trimmed.rfind("}")
    if first != -1 and last > first:
        candidates.append(trimmed[first : last + 1])
    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except ValueError:
            continue
        if isinstance(parsed, dict):
            return parsed
    return None


def parse_answer(text: Optional[str]) -> Optional[ChatAnswer]:
    data = extract_json_from_text(text)
    if data is None:
        return None
    try:
        return ChatAnswer.model_validate(data)
    except ValidationError as exc:
        logger.debug("Model answer failed validation: %s", exc)
        return None


def backfill_answer(
    answer: ChatAnswer, retrieval: RetrievalResult, provider_warning: Optional[str] = None
) -> ChatAnswer:
    """Evidence always comes from retrieval when the chosen payload lacks it."""
    update: Dict[str, Any] = {}
    if not answer.citations:
        update["citations"] = _dump_all(retrieval.citations)
    if not answer.diagram_grounding:
        update["diagram_grounding"] = _dump_all(retrieval.diagram_grounding)
    warnings = list(answer.warnings) or list(retrieval.warnings)
    if provider_warning and provider_warning not in warnings:
        warnings.append(provider_warning)
    update["warnings"] = warnings
    if not answer.answer.strip():
        update["answer"] = NO_MATCH_ANSWER
    return answer.model_copy(update=update)


class AnswerGenerator:
    """Generates workshop answers, falling back to a templated answer on any provider problem."""

    def __init__(self, clients: Optional[Dict[str, ClientFactory]] = None) -> None:
        self.clients: Dict[str, ClientFactory] = clients or {
            "openai": OpenAIChatClient,
            "anthropic": AnthropicChatClient,
        }

    @staticmethod
    def _server_key(provider: str) -> Optional[str]:
        if not settings.allow_server_llm_keys:
            return None
        return {
            "openai": settings.openai_api_key,
            "anthropic": settings.anthropic_api_key,
        }.get(provider)

    @staticmethod
    def _default_model(provider: str) -> Optional[str]:
        return {
            "openai": settings.openai_model_chat,
            "anthropic": settings.anthropic_model_chat,
        }.get(provider)

    async def generate(
        self,
        query: str,
        retrieval: RetrievalResult,
        selected_engine: Optional[str] = None,
        provider: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
    ) -> ChatOutcome:
        fallback = build_fallback_answer(query, retrieval, selected_engine)
        requested = (provider or "").strip()
        name = PROVIDER_ALIASES.get(requested.lower(), requested.lower())
        if not name:
            return ChatOutcome(answer=backfill_answer(fallback, retrieval))

        if name not in self.clients:
            warning = f'Unsupported provider "{requested}". Returned retrieval-based fallback.'
            return ChatOutcome(answer=backfill_answer(fallback, retrieval, warning))

        label = PROVIDER_LABELS.get(name, requested)
        key = api_key or self._server_key(name)
        if not key:
            warning = (
                f"{label} provider requested but no API key was provided in chat settings; "
                "returned retrieval-based fallback."
            )
            return ChatOutcome(answer=backfill_answer(fallback, retrieval, warning))

        chosen_model = model or self._default_model(name)
        try:
            client = self.clients[name](
                api_key=key, model=chosen_model, timeout=settings.llm_timeout_seconds
            )
            reply = await client.complete(
                SYSTEM_PROMPT, build_user_prompt(query, retrieval, selected_engine)
            )
        except ProviderError as exc:
            logger.warning("%s chat failure: %s", label, exc)
            warning = f"{label} request failed; returned retrieval-based fallback."
            return ChatOutcome(answer=backfill_answer(fallback, retrieval, warning))

        parsed = parse_answer(reply)
        if parsed is None:
            logger.warning("%s reply could not be parsed as a structured answer", label)
            warning = f"{label} returned an unparsable response; returned retrieval-based fallback."
            return ChatOutcome(answer=backfill_answer(fallback, retrieval, warning))

        return ChatOutcome(
            provider_used=name,
            model_used=chosen_model,
            answer=backfill_answer(parsed, retrieval),
        )
