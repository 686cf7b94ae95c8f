"""Resolve matched parts to their best diagram hotspot."""

from __future__ import annotations

from typing import Iterable, List, Optional, Set

from workshop_rag.models.parts import DiagramGrounding, PartRecord
from workshop_rag.models.qa import LocatedGrounding
from workshop_rag.models.retrieval import GroundingEntry
from workshop_rag.models.state import RetrieverState
from workshop_rag.retrieval.part_matcher import diagram_route, part_key
from workshop_rag.utils.tokenization import normalize_part_no, normalize_ref

MAX_GROUNDINGS = 12
MAX_LOCATE_MATCHES = 100


def best_grounding(state: RetrieverState, part: PartRecord) -> Optional[DiagramGrounding]:
    """Pick the candidate with a confirmed hotspot first, then the highest confidence.

    Candidates with equal rank keep index order.
    """
    key = part_key(part)
    if not key:
        return None
    candidates = state.grounding_by_part_no.get(key, ())
    if not candidates:
        return None
    return sorted(candidates, key=lambda item: item.anchor_score, reverse=True)[0]


def to_entry(grounding: DiagramGrounding) -> GroundingEntry:
    """Flatten a grounding for the retrieval payload.

    ``diagram_url`` is None when the grounding lacks a group id or a diagram id.
    """
    return GroundingEntry(
        part_no=grounding.part_no,
        description=grounding.description,
        usage=grounding.usage,
        ref=grounding.ref,
        diagram_id=grounding.diagram.id,
        sheet_code=grounding.diagram.sheet_code,
        geometry_count=grounding.hotspot.geometry_count,
        hotspot_mode=grounding.hotspot.mode,
        hotspot_confidence=grounding.hotspot.best_confidence,
        group_id=grounding.group_id,
        group_name=grounding.group_name,
        diagram_url=diagram_route(grounding.group_id, grounding.diagram.id),
    )


def resolve_groundings(state: RetrieverState, parts: Iterable[PartRecord]) -> List[GroundingEntry]:
    """One diagram location per distinct part, in part order. Ungrounded parts are skipped."""
    entries: List[GroundingEntry] = []
    grounded: Set[str] = set()
    for part in parts:
        key = part_key(part)
        if key in grounded:
            continue
        grounding = best_grounding(state, part)
        if grounding is None:
            continue
        grounded.add(key)
        entries.append(to_entry(grounding))
        if len(entries) >= MAX_GROUNDINGS:
            break
    return entries


def locate_part(
    state: RetrieverState,
    part_no: Optional[str] = None,
    diagram_id: Optional[str] = None,
    ref: Optional[str] = None,
) -> List[LocatedGrounding]:
    """Filter every grounding by part number, diagram and reference label."""
    normalized_part_no = normalize_part_no(part_no)
    normalized_ref = normalize_ref(ref)
    matches: List[LocatedGrounding] = []
    for item in state.diagram_grounding:
        if normalized_part_no and item.part_no_normalized != normalized_part_no:
            continue
        if diagram_id and item.diagram.id != diagram_id:
            continue
        if normalized_ref and normalize_ref(item.ref) != normalized_ref:
            continue
        matches.append(
            LocatedGrounding.model_validate(
                {
                    **item.model_dump(by_alias=True),
                    "diagramRoute": diagram_route(item.group_id, item.diagram.id),
                }
            )
        )
        if len(matches) >= MAX_LOCATE_MATCHES:
            break
    return matches
