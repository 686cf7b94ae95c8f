"""Procedure chunk and document models read from the RAG indexes."""

from __future__ import annotations

from typing import List, Optional

from pydantic import Field, field_validator

from .base import IndexRecord


class ChunkMeta(IndexRecord):
    """Structural hints attached to a chunk by the index builder."""

    chunk_type: Optional[str] = None


class ProcedureChunk(IndexRecord):
    """A unit of procedure or document text, the atomic retrieval result."""

    chunk_id: str
    doc_id: str
    title: str = ""
    text: str = ""
    content_type: Optional[str] = None
    meta: ChunkMeta = Field(default_factory=ChunkMeta)
    engines: List[str] = Field(default_factory=list)

    @field_validator("title", "text", mode="before")
    @classmethod
    def _none_as_blank(cls, value):
        return "" if value is None else value

    @field_validator("meta", mode="before")
    @classmethod
    def _none_as_empty_meta(cls, value):
        return {} if value is None else value

    @field_validator("engines", mode="before")
    @classmethod
    def _none_as_no_engines(cls, value):
        return [] if value is None else value


class Document(IndexRecord):
    """Document-level metadata; chunks reference it by doc_id."""

    doc_id: str
    title: Optional[str] = None
