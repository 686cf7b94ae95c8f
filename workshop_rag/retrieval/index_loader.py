"""Build the in-memory retriever snapshot from the JSON index files."""

from __future__ import annotations

import json
import logging
from collections import defaultdict
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from workshop_rag.config import Settings, settings
from workshop_rag.models.chunk import Document, ProcedureChunk
from workshop_rag.models.parts import DiagramGrounding, PartProcedureLink, PartRecord
from workshop_rag.models.references import Tool, TorqueValue
from workshop_rag.models.state import RetrieverState

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


class IndexPaths(BaseModel):
    """Locations of the seven index artifacts. Any of them may be missing."""

    chunks: Path
    documents: Path
    parts: Path
    links: Path
    grounding: Path
    tools: Path
    torque: Path

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> "IndexPaths":
        config = config or settings
        return cls(
            chunks=config.chunks_path,
            documents=config.documents_path,
            parts=config.parts_path,
            links=config.links_path,
            grounding=config.grounding_path,
            tools=config.tools_path,
            torque=config.torque_path,
        )


def read_collection(path: Path, key: str) -> List[Any]:
    """Return the list stored under ``key``; a missing or broken file yields []."""
    if not path.exists():
        logger.warning("Index file %s not found; serving without it", path)
        return []
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except (OSError, ValueError) as exc:
        logger.warning("Could not read index file %s: %s", path, exc)
        return []
    items = payload.get(key) if isinstance(payload, dict) else None
    if not isinstance(items, list):
        logger.warning("Index file %s has no '%s' list", path, key)
        return []
    return items


def parse_records(items: Iterable[Any], model: Type[RecordT], source: Path) -> Tuple[RecordT, ...]:
    records: List[RecordT] = []
    skipped = 0
    for item in items:
        try:
            records.append(model.model_validate(item))
        except ValidationError:
            skipped += 1
    if skipped:
        logger.warning("Skipped %s malformed %s records in %s", skipped, model.__name__, source)
    return tuple(records)


def group_by(
    records: Iterable[RecordT], key_fn: Callable[[RecordT], Iterable[str]]
) -> Dict[str, Tuple[RecordT, ...]]:
    grouped: Dict[str, List[RecordT]] = defaultdict(list)
    for record in records:
        for key in key_fn(record):
            if key:
                grouped[key].append(record)
    return {key: tuple(values) for key, values in grouped.items()}


def load_retriever_state(paths: IndexPaths | None = None) -> RetrieverState:
    """Read every index file and build a fresh snapshot. Safe to call repeatedly."""
    paths = paths or IndexPaths.from_settings()

    chunks = parse_records(read_collection(paths.chunks, "chunks"), ProcedureChunk, paths.chunks)
    documents = parse_records(read_collection(paths.documents, "documents"), Document, paths.documents)
    parts = parse_records(read_collection(paths.parts, "items"), PartRecord, paths.parts)
    links = parse_records(read_collection(paths.links, "links"), PartProcedureLink, paths.links)
    groundings = parse_records(
        read_collection(paths.grounding, "groundings"), DiagramGrounding, paths.grounding
    )
    tools = parse_records(read_collection(paths.tools, "tools"), Tool, paths.tools)
    torque_values = parse_records(read_collection(paths.torque, "values"), TorqueValue, paths.torque)

    state = RetrieverState(
        chunks=chunks,
        documents=documents,
        parts_index=parts,
        part_links=links,
        diagram_grounding=groundings,
        tools=tools,
        torque_values=torque_values,
        chunks_by_doc_id=group_by(chunks, lambda chunk: [chunk.doc_id]),
        parts_by_part_no=group_by(parts, lambda part: [part.part_no_normalized or ""]),
        grounding_by_part_no=group_by(groundings, lambda item: [item.part_no_normalized or ""]),
        tools_by_doc_id=group_by(tools, lambda tool: tool.used_in),
        torque_by_doc_id=group_by(torque_values, lambda entry: [entry.source_page or ""]),
    )
    logger.info(
        "Loaded %s chunks, %s documents, %s parts, %s links, %s groundings, %s tools, %s torque values",
        len(chunks),
        len(documents),
        len(parts),
        len(links),
        len(groundings),
        len(tools),
        len(torque_values),
    )
    return state
