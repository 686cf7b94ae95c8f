"""Retrieval result models."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import Field

from .base import CamelModel
from .chunk import ProcedureChunk
from .parts import PartRecord
from .references import TorqueValue


class ScoredChunk(ProcedureChunk):
    """Chunk extended with its relevance score."""

    score: float


class Citation(CamelModel):
    """Reference back to the chunk backing part of an answer."""

    type: Literal["doc"] = "doc"
    doc_id: str
    chunk_id: str
    title: str
    url: str
    score: float


class MatchedPart(PartRecord):
    """Catalogue part selected for a query, with a recomputed diagram route."""

    diagram_url: Optional[str] = None
    source_doc_id: Optional[str] = None
    source_doc_title: Optional[str] = None
    score: Optional[float] = None


class GroundingEntry(CamelModel):
    """The single diagram location chosen for a matched part."""

    part_no: Optional[str] = None
    description: Optional[str] = None
    usage: Optional[str] = None
    ref: Optional[str] = None
    diagram_id: Optional[str] = None
    sheet_code: Optional[str] = None
    geometry_count: Optional[int] = None
    hotspot_mode: Optional[str] = None
    hotspot_confidence: Optional[float] = None
    group_id: Optional[str] = None
    group_name: Optional[str] = None
    diagram_url: Optional[str] = None


class ToolEntry(CamelModel):
    code: str
    name: Optional[str] = None
    description: Optional[str] = None


class RetrievalResult(CamelModel):
    """Everything retrieved for one query. Derived per request, never cached."""

    query: str
    selected_engine: Optional[str] = None
    query_tokens: List[str] = Field(default_factory=list)
    part_nos_in_query: List[str] = Field(default_factory=list)
    top_chunks: List[ScoredChunk] = Field(default_factory=list)
    matched_parts: List[MatchedPart] = Field(default_factory=list)
    tools: List[ToolEntry] = Field(default_factory=list)
    torque_specs: List[TorqueValue] = Field(default_factory=list)
    diagram_grounding: List[GroundingEntry] = Field(default_factory=list)
    citations: List[Citation] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
