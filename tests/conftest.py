"""Shared pytest fixtures: a small workshop index written to a temp directory."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from workshop_rag.config import settings
from workshop_rag.models.state import RetrieverState
from workshop_rag.retrieval.index_loader import IndexPaths, load_retriever_state

CHUNKS = [
    {
        "chunkId": "brake-pads-0",
        "docId": "brake-pads",
        "title": "Brake Pads – Remove and Install",
        "text": "Remove the brake pads from the caliper. Install new brake pads and check the discs.",
        "contentType": "procedure",
        "meta": {"chunkType": "procedure_steps"},
        "engines": [],
    },
    {
        "chunkId": "brake-overview-0",
        "docId": "brake-overview",
        "title": "Brake System Description",
        "text": "The brake pads wear over time and should be inspected at every service.",
        "contentType": "generic",
        "engines": [],
    },
    {
        "chunkId": "brake-pads-1",
        "docId": "brake-pads",
        "title": "Brake Pads – Torque Specifications",
        "text": "Tighten the caliper bolts once the brake pads are seated.",
        "contentType": "procedure",
        "meta": None,
        "engines": None,
    },
    {
        "chunkId": "timing-z16-0",
        "docId": "timing-z16",
        "title": "Timing Belt – Replace",
        "text": "Replace the timing belt and tensioner on the Z16XEP engine.",
        "contentType": "procedure",
        "engines": ["Z16XEP"],
    },
    {
        "chunkId": "timing-z18-0",
        "docId": "timing-z18",
        "title": "Timing Belt – Replace",
        "text": "Replace the timing belt and tensioner on the Z18XER engine.",
        "contentType": "procedure",
        "engines": ["Z18XER"],
    },
    {
        "chunkId": "tsb-001-0",
        "docId": "tsb-001",
        "title": "TSB Brake Noise",
        "text": "Front brake pads may squeal at low speed; fit revised shims.",
        "contentType": "tsb",
    },
    {
        "chunkId": "diag-1-0",
        "docId": "diag-1",
        "title": "Brake Warning Lamp Diagnosis",
        "text": "Check the brake pads wear sensor circuit.",
        "contentType": "diagnostic",
    },
]

DOCUMENTS = [
    {"docId": "brake-pads", "title": "Brake Pads"},
    {"docId": "brake-overview", "title": "Brake System"},
    {"docId": "timing-z16", "title": "Timing Belt Z16XEP"},
]

PART_PAD_SET = {
    "partNo": "123456789",
    "partNoNormalized": "123456789",
    "katNo": "16 05 123",
    "description": "Brake pad set, front",
    "usage": "Z16XEP, Z18XER",
    "qty": 1,
    "diagramId": "D100",
    "groupId": "H",
    "groupName": "Brakes",
    "ref": "5",
}
PART_TIMING_BELT = {
    "partNo": "98765432",
    "partNoNormalized": "98765432",
    "description": "Timing belt",
    "usage": "Z18XER",
    "diagramId": "D200",
    "groupId": "E",
    "groupName": "Engine",
    "ref": "12",
}
PART_DISC = {
    "partNo": "55555555",
    "partNoNormalized": "55555555",
    "description": "Brake disc, front",
    "usage": "",
    "diagramId": "D100",
    "groupId": "H",
    "ref": "3",
}
PART_HOSE = {
    "partNo": "11111111",
    "description": "Brake hose",
    "diagramId": "D101",
    "groupId": "H",
    "ref": "7",
}

PARTS = [PART_PAD_SET, PART_TIMING_BELT, PART_DISC, PART_HOSE]

LINKS = [
    {"docId": "brake-pads", "docTitle": "Brake Pads", "epcMatches": [PART_PAD_SET]},
    {"docId": "timing-z16", "docTitle": "Timing Belt Z16XEP", "epcMatches": [PART_TIMING_BELT]},
]

GROUNDINGS = [
    {
        "partNo": "123456789",
        "partNoNormalized": "123456789",
        "description": "Brake pad set, front",
        "ref": "5",
        "diagram": {"id": "D100", "sheetCode": "H1"},
        "hotspot": {"hasHotspot": False, "bestConfidence": 0.99, "mode": "ocr", "geometryCount": 0},
        "groupId": "H",
        "groupName": "Brakes",
    },
    {
        "partNo": "123456789",
        "partNoNormalized": "123456789",
        "description": "Brake pad set, front",
        "ref": "5",
        "diagram": {"id": "D101", "sheetCode": "H2"},
        "hotspot": {"hasHotspot": True, "bestConfidence": 0.4, "mode": "vector", "geometryCount": 2},
        "groupId": "H",
        "groupName": "Brakes",
    },
    {
        "partNo": "55555555",
        "partNoNormalized": "55555555",
        "description": "Brake disc, front",
        "ref": "3",
        "diagram": {"id": "D100", "sheetCode": "H1"},
        "hotspot": {"hasHotspot": False, "bestConfidence": 0.5},
        "groupId": "H",
        "groupName": "Brakes",
    },
    {
        "partNo": "98765432",
        "partNoNormalized": "98765432",
        "description": "Timing belt",
        "ref": "12",
        "diagram": {"id": "D200", "sheetCode": "E4"},
        "hotspot": {"hasHotspot": True, "bestConfidence": 0.9, "mode": "vector", "geometryCount": 1},
        "groupId": "E",
        "groupName": "Engine",
    },
]

TOOLS = [
    {"code": "KM-123", "name": "Piston reset tool", "usedIn": ["brake-pads", "brake-overview"]},
    {"code": "KM-123", "name": "Piston reset tool (alt)", "usedIn": ["brake-pads"]},
    {"code": None, "name": "Unnamed", "usedIn": ["brake-pads"]},
    {"code": "KM-999", "name": "Camshaft locking tool", "usedIn": ["timing-z16"]},
]

TORQUE_VALUES = [
    {"component": "Caliper bolt", "value": 28, "unit": "Nm", "sourcePage": "brake-pads"},
    {"component": "Caliper bolt", "value": 28, "unit": "Nm", "sourcePage": "brake-pads"},
    {"component": "Tensioner bolt", "value": "20", "unit": "Nm", "sourcePage": "timing-z16"},
    {"component": "Orphan", "value": "5", "unit": "Nm"},
]


def write_index(path: Path, key: str, items) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({key: items}), encoding="utf-8")


@pytest.fixture()
def index_paths(tmp_path: Path) -> IndexPaths:
    rag_dir = tmp_path / "rag"
    references = tmp_path / "references"
    paths = IndexPaths(
        chunks=rag_dir / "procedure-chunks.json",
        documents=rag_dir / "doc-metadata.json",
        parts=rag_dir / "parts-index.json",
        links=rag_dir / "part-procedure-links.json",
        grounding=rag_dir / "diagram-grounding.json",
        tools=references / "tools.json",
        torque=references / "torque-values.json",
    )
    write_index(paths.chunks, "chunks", CHUNKS)
    write_index(paths.documents, "documents", DOCUMENTS)
    write_index(paths.parts, "items", PARTS)
    write_index(paths.links, "links", LINKS)
    write_index(paths.grounding, "groundings", GROUNDINGS)
    write_index(paths.tools, "tools", TOOLS)
    write_index(paths.torque, "values", TORQUE_VALUES)
    return paths


@pytest.fixture()
def state(index_paths: IndexPaths) -> RetrieverState:
    return load_retriever_state(index_paths)


@pytest.fixture(autouse=True)
def no_server_llm_keys(monkeypatch):
    monkeypatch.setattr(settings, "openai_api_key", None)
    monkeypatch.setattr(settings, "anthropic_api_key", None)
    monkeypatch.setattr(settings, "allow_server_llm_keys", False)
