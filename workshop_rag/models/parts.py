"""Parts catalogue, part/procedure links and diagram grounding records."""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import Field, field_validator

from .base import IndexRecord


class PartRecord(IndexRecord):
    """One catalogue line. Several records may share a normalized part number."""

    part_no: Optional[str] = None
    part_no_normalized: Optional[str] = None
    kat_no: Optional[str] = None
    description: Optional[str] = None
    usage: Optional[str] = None
    qty: Optional[Any] = None
    diagram_id: Optional[str] = None
    group_id: Optional[str] = None
    group_name: Optional[str] = None
    sub_section_name: Optional[str] = None
    main_name: Optional[str] = None
    ref: Optional[str] = None
    ref_normalized: Optional[str] = None


class PartProcedureLink(IndexRecord):
    """Upstream association between a document and the catalogue parts it uses."""

    doc_id: str
    doc_title: Optional[str] = None
    epc_matches: List[PartRecord] = Field(default_factory=list)

    @field_validator("epc_matches", mode="before")
    @classmethod
    def _none_as_no_matches(cls, value):
        return [] if value is None else value


class DiagramRef(IndexRecord):
    id: Optional[str] = None
    sheet_code: Optional[str] = None


class HotspotInfo(IndexRecord):
    """Visual anchor quality for a part reference on a diagram."""

    has_hotspot: bool = False
    best_confidence: Optional[float] = None
    mode: Optional[str] = None
    geometry_count: Optional[int] = None


class DiagramGrounding(IndexRecord):
    """A candidate location of a part on an assembly diagram."""

    part_no: Optional[str] = None
    part_no_normalized: Optional[str] = None
    description: Optional[str] = None
    usage: Optional[str] = None
    qty: Optional[Any] = None
    ref: Optional[str] = None
    diagram: DiagramRef = Field(default_factory=DiagramRef)
    hotspot: HotspotInfo = Field(default_factory=HotspotInfo)
    group_id: Optional[str] = None
    group_name: Optional[str] = None

    @field_validator("diagram", "hotspot", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return {} if value is None else value

    @property
    def anchor_score(self) -> float:
        """Ranking key: a confirmed hotspot always outweighs any confidence value."""
        return (100.0 if self.hotspot.has_hotspot else 0.0) + (self.hotspot.best_confidence or 0.0)
