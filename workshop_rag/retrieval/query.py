"""Query analysis: scoring tokens, literal part numbers and repair intent."""

from __future__ import annotations

from typing import Iterable, List

from pydantic import BaseModel, ConfigDict

from workshop_rag.utils.tokenization import extract_part_numbers, tokenize

INTENT_PHRASES = ("replace", "remove", "install", "change")
INTENT_TOKENS = frozenset({"replace", "remove", "install", "change", "repair"})


class QueryAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    query: str
    query_lower: str
    tokens: List[str]
    part_numbers: List[str]
    procedure_intent: bool


def detect_procedure_intent(query: str, tokens: Iterable[str]) -> bool:
    """True when the query asks how to remove, install, replace or repair something.

    The substring check catches inflected forms ("replacing", "installation") that
    the token check would miss; the token check adds "repair".
    """
    lower = query.lower()
    if any(phrase in lower for phrase in INTENT_PHRASES):
        return True
    return any(token in INTENT_TOKENS for token in tokens)


def analyze_query(query: str) -> QueryAnalysis:
    tokens = tokenize(query)
    return QueryAnalysis(
        query=query,
        query_lower=query.lower(),
        tokens=tokens,
        part_numbers=extract_part_numbers(query),
        procedure_intent=detect_procedure_intent(query, tokens),
    )
