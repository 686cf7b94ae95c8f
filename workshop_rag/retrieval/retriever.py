"""Single-pass retrieval over one index snapshot."""

from __future__ import annotations

import logging
from typing import List, Optional

from workshop_rag.models.retrieval import RetrievalResult
from workshop_rag.models.state import RetrieverState
from workshop_rag.retrieval.chunk_ranker import DEFAULT_LIMIT, build_citation, rank_chunks
from workshop_rag.retrieval.evidence import collect_tools, collect_torque_specs
from workshop_rag.retrieval.grounding import resolve_groundings
from workshop_rag.retrieval.part_matcher import match_parts
from workshop_rag.retrieval.query import analyze_query

logger = logging.getLogger(__name__)

NO_CHUNKS_WARNING = "No high-confidence document chunks matched the query."
NO_PARTS_WARNING = "No matching parts identified from EPC index for this query."


def retrieve_context(
    state: RetrieverState,
    query: str,
    selected_engine: Optional[str] = None,
    limit: Optional[float] = DEFAULT_LIMIT,
) -> RetrievalResult:
    """Rank chunks, then join parts, diagram groundings, tools and torque specs to them.

    Runs synchronously to completion against the snapshot it was given.
    """
    analysis = analyze_query(query)
    top_chunks = rank_chunks(state, analysis, selected_engine, limit)

    doc_ids: List[str] = []
    for chunk in top_chunks:
        if chunk.doc_id not in doc_ids:
            doc_ids.append(chunk.doc_id)

    matched_parts = match_parts(state, analysis, set(doc_ids), selected_engine)

    warnings: List[str] = []
    if not top_chunks:
        warnings.append(NO_CHUNKS_WARNING)
    if not matched_parts:
        warnings.append(NO_PARTS_WARNING)

    result = RetrievalResult(
        query=query,
        selected_engine=selected_engine or None,
        query_tokens=analysis.tokens,
        part_nos_in_query=analysis.part_numbers,
        top_chunks=top_chunks,
        matched_parts=matched_parts,
        tools=collect_tools(state, doc_ids),
        torque_specs=collect_torque_specs(state, doc_ids),
        diagram_grounding=resolve_groundings(state, matched_parts),
        citations=[build_citation(chunk) for chunk in top_chunks],
        warnings=warnings,
    )
    logger.debug(
        "Query %r (engine=%s): %s chunks, %s parts, %s groundings",
        query,
        selected_engine,
        len(result.top_chunks),
        len(result.matched_parts),
        len(result.diagram_grounding),
    )
    return result
