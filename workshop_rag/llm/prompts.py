"""Prompt templates for the workshop chat stage."""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from workshop_rag.models.retrieval import RetrievalResult
from workshop_rag.utils.tokenization import clip_text

CONTEXT_CHUNKS = 8
CONTEXT_ITEMS = 8
CONTEXT_CITATIONS = 12
CONTEXT_CHUNK_CHARS = 900

SYSTEM_PROMPT = """You are a workshop assistant for Opel/Vauxhall TIS service documentation and EPC parts data.
Only use the retrieved context you are given.
Do not invent parts, tools, torque values or procedures that the context does not support.
If the evidence is weak, say so in warnings."""

SCHEMA_INSTRUCTIONS = """Return strict JSON with exactly these keys:
{
  "answer": string,
  "procedureSummary": string,
  "requiredParts": [{"partNo": string, "katNo": string, "description": string, "usage": string, "qty": string, "diagramId": string, "diagramUrl": string, "ref": string}],
  "requiredTools": [{"code": string, "name": string, "description": string}],
  "torqueSpecs": [{"component": string, "value": string, "unit": string, "sourcePage": string}],
  "diagramGrounding": [{"partNo": string, "description": string, "usage": string, "ref": string, "diagramId": string, "sheetCode": string, "geometryCount": number, "hotspotMode": string, "hotspotConfidence": number, "groupId": string, "groupName": string, "diagramUrl": string}],
  "warnings": [string],
  "citations": [{"type": string, "docId": string, "chunkId": string, "title": string, "url": string, "score": number}]
}"""


def build_compact_context(retrieval: RetrievalResult, selected_engine: Optional[str]) -> Dict[str, Any]:
    def dump(items, limit):
        return [item.model_dump(by_alias=True, mode="json") for item in items[:limit]]

    return {
        "selectedEngine": selected_engine or None,
        "topChunks": [
            {
                "chunkId": chunk.chunk_id,
                "docId": chunk.doc_id,
                "title": chunk.title,
                "text": clip_text(chunk.text, CONTEXT_CHUNK_CHARS),
                "score": chunk.score,
            }
            for chunk in retrieval.top_chunks[:CONTEXT_CHUNKS]
        ],
        "matchedParts": dump(retrieval.matched_parts, CONTEXT_ITEMS),
        "tools": dump(retrieval.tools, CONTEXT_ITEMS),
        "torqueSpecs": dump(retrieval.torque_specs, CONTEXT_ITEMS),
        "diagramGrounding": dump(retrieval.diagram_grounding, CONTEXT_ITEMS),
        "citations": dump(retrieval.citations, CONTEXT_CITATIONS),
        "warnings": list(retrieval.warnings),
    }


def build_user_prompt(query: str, retrieval: RetrievalResult, selected_engine: Optional[str]) -> str:
    context = json.dumps(build_compact_context(retrieval, selected_engine), indent=2)
    return f"""User query: {query.strip()}

Retrieved context JSON:
{context}

{SCHEMA_INSTRUCTIONS}
Use concise workshop language."""
