"""Run a fixed set of workshop queries against the local indexes and log timings and top hits."""

from __future__ import annotations

import argparse
import logging
import time
from typing import List, Optional, Sequence

from pydantic import BaseModel

from workshop_rag.config import settings
from workshop_rag.models.state import RetrieverState
from workshop_rag.retrieval.index_loader import IndexPaths, load_retriever_state
from workshop_rag.retrieval.retriever import retrieve_context

logger = logging.getLogger(__name__)

DEFAULT_QUERIES = [
    "wheel alignment",
    "paint colour color code",
    "replace brake pads",
    "coolant antifreeze radiator",
    "torque hub nut",
    "clutch replacement",
    "front suspension camber",
    "electrical fuse box",
]


class QueryProfile(BaseModel):
    query: str
    elapsed_ms: float
    chunk_count: int
    citation_count: int
    part_count: int
    top_titles: List[str]
    warnings: List[str]


def profile_queries(
    state: RetrieverState,
    queries: Sequence[str],
    selected_engine: Optional[str] = None,
    limit: int = 5,
) -> List[QueryProfile]:
    profiles: List[QueryProfile] = []
    for query in queries:
        started = time.perf_counter()
        retrieval = retrieve_context(state, query, selected_engine, limit)
        elapsed_ms = (time.perf_counter() - started) * 1000
        profiles.append(
            QueryProfile(
                query=query,
                elapsed_ms=round(elapsed_ms, 2),
                chunk_count=len(retrieval.top_chunks),
                citation_count=len(retrieval.citations),
                part_count=len(retrieval.matched_parts),
                top_titles=[
                    f"[{chunk.score}] {(chunk.title or chunk.doc_id)[:55]}"
                    for chunk in retrieval.top_chunks[:3]
                ],
                warnings=retrieval.warnings,
            )
        )
    return profiles


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("queries", nargs="*", help="Queries to profile (defaults to a built-in set)")
    parser.add_argument("--engine", default=None, help="Restrict retrieval to one engine code")
    parser.add_argument("--limit", type=int, default=5)
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.log_level)
    state = load_retriever_state(IndexPaths.from_settings())
    for profile in profile_queries(state, args.queries or DEFAULT_QUERIES, args.engine, args.limit):
        logger.info(
            '"%s" (%.2f ms): %s chunks, %s citations, %s parts',
            profile.query,
            profile.elapsed_ms,
            profile.chunk_count,
            profile.citation_count,
            profile.part_count,
        )
        for rank, title in enumerate(profile.top_titles, start=1):
            logger.info("    %s. %s", rank, title)
        if profile.warnings:
            logger.info("  Warnings: %s", "; ".join(profile.warnings))


if __name__ == "__main__":
    main()
