"""Select catalogue parts for a query from procedure links and lexical matches."""

from __future__ import annotations

from typing import Iterable, List, Optional, Set

from workshop_rag.models.parts import PartRecord
from workshop_rag.models.retrieval import MatchedPart
from workshop_rag.models.state import RetrieverState
from workshop_rag.retrieval.query import QueryAnalysis
from workshop_rag.utils.tokenization import normalize_part_no, normalize_ref, normalize_whitespace

EXACT_PART_NO_BOOST = 25.0
TOKEN_BOOST = 2.0
MAX_LEXICAL_PARTS = 10
MAX_MATCHED_PARTS = 12


def diagram_route(group_id: Optional[str], diagram_id: Optional[str]) -> Optional[str]:
    """Parts-catalogue viewer route for a diagram, or None when either id is missing."""
    if not group_id or not diagram_id:
        return None
    return f"/epc/{group_id}/diagram/{diagram_id}"


def part_key(part: PartRecord) -> str:
    return part.part_no_normalized or normalize_part_no(part.part_no)


def part_identity(part: PartRecord) -> str:
    return f"{part_key(part)}|{part.diagram_id or ''}|{normalize_ref(part.ref) or ''}"


def is_usage_compatible(usage: Optional[str], selected_engine: Optional[str]) -> bool:
    """Usage is free text, so the engine code only has to appear somewhere in it.

    Parts with no usage text apply to every engine.
    """
    if not selected_engine:
        return True
    normalized_usage = normalize_whitespace(usage).upper()
    if not normalized_usage:
        return True
    return selected_engine.upper() in normalized_usage


def parts_from_links(state: RetrieverState, doc_ids: Set[str]) -> List[MatchedPart]:
    parts: List[MatchedPart] = []
    for link in state.part_links:
        if link.doc_id not in doc_ids:
            continue
        for match in link.epc_matches:
            parts.append(
                MatchedPart.model_validate(
                    {
                        **match.model_dump(by_alias=True),
                        "sourceDocId": link.doc_id,
                        "sourceDocTitle": link.doc_title,
                    }
                )
            )
    return parts


def searchable_text(part: PartRecord) -> str:
    fields = [
        part.description,
        part.group_name,
        part.sub_section_name,
        part.main_name,
        part.part_no,
        part.kat_no,
        part.usage,
    ]
    return " ".join(field for field in fields if field).lower()


def score_part(part: PartRecord, analysis: QueryAnalysis) -> float:
    score = 0.0
    if part.part_no_normalized and part.part_no_normalized in analysis.part_numbers:
        score += EXACT_PART_NO_BOOST
    haystack = searchable_text(part)
    for token in analysis.tokens:
        if token in haystack:
            score += TOKEN_BOOST
    return score


def lexical_parts(
    state: RetrieverState,
    analysis: QueryAnalysis,
    selected_engine: Optional[str] = None,
) -> List[MatchedPart]:
    scored = []
    for part in state.parts_index:
        if not is_usage_compatible(part.usage, selected_engine):
            continue
        score = score_part(part, analysis)
        if score > 0:
            scored.append((part, score))
    scored.sort(key=lambda item: item[1], reverse=True)
    return [
        MatchedPart.model_validate({**part.model_dump(by_alias=True), "score": score})
        for part, score in scored[:MAX_LEXICAL_PARTS]
    ]


def merge_parts(*sources: Iterable[MatchedPart]) -> List[MatchedPart]:
    """Concatenate sources in order, first occurrence of each identity wins."""
    seen: Set[str] = set()
    merged: List[MatchedPart] = []
    for source in sources:
        for part in source:
            identity = part_identity(part)
            if identity in seen:
                continue
            seen.add(identity)
            merged.append(
                part.model_copy(update={"diagram_url": diagram_route(part.group_id, part.diagram_id)})
            )
    return merged[:MAX_MATCHED_PARTS]


def match_parts(
    state: RetrieverState,
    analysis: QueryAnalysis,
    doc_ids: Set[str],
    selected_engine: Optional[str] = None,
) -> List[MatchedPart]:
    return merge_parts(
        parts_from_links(state, doc_ids),
        lexical_parts(state, analysis, selected_engine),
    )
