"""Heuristic lexical ranking of procedure chunks."""

from __future__ import annotations

import math
import re
from typing import Dict, List, Optional, Tuple

from workshop_rag.models.chunk import ProcedureChunk
from workshop_rag.models.retrieval import Citation, ScoredChunk
from workshop_rag.models.state import RetrieverState
from workshop_rag.retrieval.query import QueryAnalysis

MAX_CHUNKS_PER_DOC = 3
MIN_LIMIT = 1
MAX_LIMIT = 25
DEFAULT_LIMIT = 10

INCOMPATIBLE_SCORE = -1.0
TITLE_PHRASE_BOOST = 12.0
TEXT_PHRASE_BOOST = 8.0
TITLE_TOKEN_BOOST = 3.0
TEXT_TOKEN_BOOST = 1.0
PROCEDURE_TYPE_BOOST = 9.0
PROCEDURE_STEPS_BOOST = 4.0
ACTION_TITLE_BOOST = 2.0
GENERIC_PENALTY = 1.0
TSB_BOOST = 0.5
DIAGNOSTIC_PENALTY = 0.5
EXPLICIT_ENGINE_BOOST = 1.0

ACTION_TITLE_PATTERN = re.compile(r"(remove|install|replace)")


def clamp_limit(limit: Optional[float]) -> int:
    """Clamp to [1, 25]. A missing or non-finite limit means the default."""
    if limit is None or not math.isfinite(limit):
        return DEFAULT_LIMIT
    return max(MIN_LIMIT, min(int(limit), MAX_LIMIT))


def is_engine_compatible(chunk: ProcedureChunk, selected_engine: Optional[str]) -> bool:
    """Chunks without an engine list apply to every engine."""
    if not selected_engine or not chunk.engines:
        return True
    return selected_engine in chunk.engines


def score_chunk(
    chunk: ProcedureChunk,
    analysis: QueryAnalysis,
    selected_engine: Optional[str] = None,
) -> float:
    if not is_engine_compatible(chunk, selected_engine):
        return INCOMPATIBLE_SCORE

    title = chunk.title.lower()
    text = chunk.text.lower()
    score = 0.0

    if analysis.query_lower:
        if analysis.query_lower in title:
            score += TITLE_PHRASE_BOOST
        if analysis.query_lower in text:
            score += TEXT_PHRASE_BOOST

    for token in analysis.tokens:
        if token in title:
            score += TITLE_TOKEN_BOOST
        elif token in text:
            score += TEXT_TOKEN_BOOST

    if analysis.procedure_intent:
        if chunk.content_type == "procedure":
            score += PROCEDURE_TYPE_BOOST
        if chunk.meta.chunk_type == "procedure_steps":
            score += PROCEDURE_STEPS_BOOST
        if ACTION_TITLE_PATTERN.search(title):
            score += ACTION_TITLE_BOOST
        if chunk.content_type == "generic":
            score -= GENERIC_PENALTY

    if chunk.content_type == "tsb":
        score += TSB_BOOST
    if chunk.content_type == "diagnostic":
        score -= DIAGNOSTIC_PENALTY

    if selected_engine and selected_engine in chunk.engines:
        score += EXPLICIT_ENGINE_BOOST
    return score


def rank_chunks(
    state: RetrieverState,
    analysis: QueryAnalysis,
    selected_engine: Optional[str] = None,
    limit: Optional[float] = DEFAULT_LIMIT,
) -> List[ScoredChunk]:
    """Score every chunk and keep the best, at most three per document.

    Equal scores keep index order (the sort is stable).
    """
    max_results = clamp_limit(limit)
    scored: List[Tuple[ProcedureChunk, float]] = []
    for chunk in state.chunks:
        score = score_chunk(chunk, analysis, selected_engine)
        if score <= 0:
            continue
        scored.append((chunk, score))
    scored.sort(key=lambda item: item[1], reverse=True)

    selected: List[ScoredChunk] = []
    per_doc: Dict[str, int] = {}
    for chunk, score in scored:
        count = per_doc.get(chunk.doc_id, 0)
        if count >= MAX_CHUNKS_PER_DOC:
            continue
        per_doc[chunk.doc_id] = count + 1
        selected.append(
            ScoredChunk.model_validate({**chunk.model_dump(by_alias=True), "score": round(score, 3)})
        )
        if len(selected) >= max_results:
            break
    return selected


def build_citation(chunk: ScoredChunk) -> Citation:
    return Citation(
        doc_id=chunk.doc_id,
        chunk_id=chunk.chunk_id,
        title=chunk.title,
        url=f"/doc/{chunk.doc_id}",
        score=chunk.score,
    )
