"""Request/response models for the public API."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import Field, model_validator

from .base import CamelModel
from .parts import DiagramGrounding
from .retrieval import RetrievalResult
from .state import IndexCounts


class RetrieveRequest(CamelModel):
    """Incoming retrieval payload. Emptiness is checked by the handler."""

    query: Optional[str] = None
    selected_engine: Optional[str] = None
    limit: Optional[float] = None


class LocatePartRequest(CamelModel):
    part_no: Optional[str] = None
    diagram_id: Optional[str] = None
    ref: Optional[str] = None


class LlmOptions(CamelModel):
    """Per-request provider selection sent by the chat panel."""

    provider: Optional[str] = None
    api_key: Optional[str] = None
    model: Optional[str] = None


class ChatRequest(CamelModel):
    query: Optional[str] = None
    selected_engine: Optional[str] = None
    provider: Optional[str] = None
    llm: Optional[LlmOptions] = None


class ChatAnswer(CamelModel):
    """Structured answer, produced by a provider or by the deterministic fallback."""

    answer: str = ""
    procedure_summary: str = ""
    required_parts: List[Dict[str, Any]] = Field(default_factory=list)
    required_tools: List[Dict[str, Any]] = Field(default_factory=list)
    torque_specs: List[Dict[str, Any]] = Field(default_factory=list)
    diagram_grounding: List[Dict[str, Any]] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    citations: List[Dict[str, Any]] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data):
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class ChatRetrievalSummary(CamelModel):
    selected_engine: Optional[str] = None
    top_chunk_count: int = 0
    matched_part_count: int = 0
    citation_count: int = 0


class ChatResponse(CamelModel):
    ok: bool = True
    provider_used: Optional[str] = None
    model_used: Optional[str] = None
    retrieval: ChatRetrievalSummary
    response: ChatAnswer


class RetrieveResponse(CamelModel):
    ok: bool = True
    retrieval: RetrievalResult


class HealthResponse(CamelModel):
    ok: bool = True
    loaded: bool
    counts: IndexCounts


class ReloadResponse(CamelModel):
    ok: bool = True
    counts: IndexCounts


class LocatedGrounding(DiagramGrounding):
    diagram_route: Optional[str] = None


class LocatePartQuery(CamelModel):
    part_no: Optional[str] = None
    diagram_id: Optional[str] = None
    ref: Optional[str] = None


class LocatePartResponse(CamelModel):
    ok: bool = True
    query: LocatePartQuery
    count: int
    matches: List[LocatedGrounding]
