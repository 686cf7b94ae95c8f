"""Immutable snapshot of every loaded index."""

from __future__ import annotations

from typing import Dict, Tuple

from pydantic import BaseModel, ConfigDict

from .base import CamelModel
from .chunk import Document, ProcedureChunk
from .parts import DiagramGrounding, PartProcedureLink, PartRecord
from .references import Tool, TorqueValue


class IndexCounts(CamelModel):
    chunks: int = 0
    documents: int = 0
    parts: int = 0
    links: int = 0
    diagram_grounding: int = 0


class RetrieverState(BaseModel):
    """One consistent view of the indexes.

    Built once by the index loader and never modified; a reload replaces the
    whole snapshot.
    """

    model_config = ConfigDict(frozen=True)

    chunks: Tuple[ProcedureChunk, ...] = ()
    documents: Tuple[Document, ...] = ()
    parts_index: Tuple[PartRecord, ...] = ()
    part_links: Tuple[PartProcedureLink, ...] = ()
    diagram_grounding: Tuple[DiagramGrounding, ...] = ()
    tools: Tuple[Tool, ...] = ()
    torque_values: Tuple[TorqueValue, ...] = ()

    chunks_by_doc_id: Dict[str, Tuple[ProcedureChunk, ...]] = {}
    parts_by_part_no: Dict[str, Tuple[PartRecord, ...]] = {}
    grounding_by_part_no: Dict[str, Tuple[DiagramGrounding, ...]] = {}
    tools_by_doc_id: Dict[str, Tuple[Tool, ...]] = {}
    torque_by_doc_id: Dict[str, Tuple[TorqueValue, ...]] = {}

    def counts(self) -> IndexCounts:
        return IndexCounts(
            chunks=len(self.chunks),
            documents=len(self.documents),
            parts=len(self.parts_index),
            links=len(self.part_links),
            diagram_grounding=len(self.diagram_grounding),
        )
