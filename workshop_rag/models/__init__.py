"""Typed models shared across the application."""

from .chunk import ChunkMeta, Document, ProcedureChunk
from .parts import DiagramGrounding, DiagramRef, HotspotInfo, PartProcedureLink, PartRecord
from .qa import (
    ChatAnswer,
    ChatRequest,
    ChatResponse,
    ChatRetrievalSummary,
    HealthResponse,
    LlmOptions,
    LocatedGrounding,
    LocatePartQuery,
    LocatePartRequest,
    LocatePartResponse,
    ReloadResponse,
    RetrieveRequest,
    RetrieveResponse,
)
from .references import Tool, TorqueValue
from .retrieval import Citation, GroundingEntry, MatchedPart, RetrievalResult, ScoredChunk, ToolEntry
from .state import IndexCounts, RetrieverState

__all__ = [
    "ChatAnswer",
    "ChatRequest",
    "ChatResponse",
    "ChatRetrievalSummary",
    "ChunkMeta",
    "Citation",
    "DiagramGrounding",
    "DiagramRef",
    "Document",
    "GroundingEntry",
    "HealthResponse",
    "HotspotInfo",
    "IndexCounts",
    "LlmOptions",
    "LocatedGrounding",
    "LocatePartQuery",
    "LocatePartRequest",
    "LocatePartResponse",
    "MatchedPart",
    "PartProcedureLink",
    "PartRecord",
    "ProcedureChunk",
    "ReloadResponse",
    "RetrievalResult",
    "RetrieveRequest",
    "RetrieveResponse",
    "RetrieverState",
    "ScoredChunk",
    "Tool",
    "ToolEntry",
    "TorqueValue",
]
