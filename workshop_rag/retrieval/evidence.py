"""Utilities for collecting tool and torque evidence for the selected documents."""

from __future__ import annotations

from typing import Iterable, List, Set

from workshop_rag.models.references import TorqueValue
from workshop_rag.models.retrieval import ToolEntry
from workshop_rag.models.state import RetrieverState

MAX_TOOLS = 12
MAX_TORQUE_SPECS = 20


def collect_tools(state: RetrieverState, doc_ids: Iterable[str]) -> List[ToolEntry]:
    """Special tools used by the documents, first occurrence of each code wins."""
    seen: Set[str] = set()
    tools: List[ToolEntry] = []
    for doc_id in doc_ids:
        for tool in state.tools_by_doc_id.get(doc_id, ()):
            if not tool.code or tool.code in seen:
                continue
            seen.add(tool.code)
            tools.append(ToolEntry(code=tool.code, name=tool.name, description=tool.description))
    return tools[:MAX_TOOLS]


def collect_torque_specs(state: RetrieverState, doc_ids: Iterable[str]) -> List[TorqueValue]:
    """Torque values cited by the documents.

    Identical values from different pages are all kept; each carries its own source page.
    """
    specs: List[TorqueValue] = []
    for doc_id in doc_ids:
        specs.extend(state.torque_by_doc_id.get(doc_id, ()))
    return specs[:MAX_TORQUE_SPECS]
