"""Tests for index_loader.py and store.py: groupings, degraded files and snapshot swaps."""
from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from workshop_rag.errors import IndexNotReadyError
from workshop_rag.models.parts import PartRecord
from workshop_rag.retrieval.index_loader import load_retriever_state, read_collection
from workshop_rag.retrieval.store import IndexStore


class TestLoadRetrieverState:
    def test_counts(self, state):
        counts = state.counts()
        assert counts.chunks == 7
        assert counts.documents == 3
        assert counts.parts == 4
        assert counts.links == 2
        assert counts.diagram_grounding == 4

    def test_chunks_grouped_by_doc(self, state):
        assert [c.chunk_id for c in state.chunks_by_doc_id["brake-pads"]] == ["brake-pads-0", "brake-pads-1"]

    def test_parts_without_normalized_number_are_not_grouped(self, state):
        assert "11111111" not in state.parts_by_part_no
        assert set(state.parts_by_part_no) == {"123456789", "98765432", "55555555"}

    def test_groundings_grouped_by_part_no(self, state):
        assert len(state.grounding_by_part_no["123456789"]) == 2

    def test_tools_grouped_by_every_used_in_doc(self, state):
        assert [t.name for t in state.tools_by_doc_id["brake-overview"]] == ["Piston reset tool"]
        assert len(state.tools_by_doc_id["brake-pads"]) == 3

    def test_torque_without_source_page_is_not_grouped(self, state):
        assert len(state.torque_by_doc_id["brake-pads"]) == 2
        assert len(state.torque_values) == 4
        assert sum(len(v) for v in state.torque_by_doc_id.values()) == 3

    def test_null_fields_load_as_defaults(self, state):
        chunk = state.chunks_by_doc_id["brake-pads"][1]
        assert chunk.engines == []
        assert chunk.meta.chunk_type is None

    def test_loose_values_pass_through(self, state):
        torque = state.torque_by_doc_id["brake-pads"][0]
        assert torque.value == 28
        pad_set = state.parts_by_part_no["123456789"][0]
        assert pad_set.qty == 1
        assert pad_set.kat_no == "16 05 123"

    def test_numeric_ids_become_strings(self):
        part = PartRecord.model_validate({"partNo": 90512345, "diagramId": 100, "ref": 5})
        assert part.part_no == "90512345"
        assert part.diagram_id == "100"
        assert part.ref == "5"

    def test_unknown_keys_are_preserved(self):
        part = PartRecord.model_validate({"partNo": "1", "supplier": "ACME"})
        dumped = part.model_dump(by_alias=True)
        assert dumped["partNo"] == "1"
        assert dumped["supplier"] == "ACME"


class TestDegradedFiles:
    def test_missing_file_degrades_to_empty(self, index_paths):
        index_paths.parts.unlink()
        state = load_retriever_state(index_paths)
        assert state.counts().parts == 0
        assert state.counts().chunks == 7

    def test_corrupt_file_degrades_to_empty(self, index_paths):
        index_paths.grounding.write_text("{not json", encoding="utf-8")
        state = load_retriever_state(index_paths)
        assert state.counts().diagram_grounding == 0
        assert state.grounding_by_part_no == {}

    def test_wrong_shape_degrades_to_empty(self, index_paths):
        index_paths.links.write_text(json.dumps({"links": {"not": "a list"}}), encoding="utf-8")
        assert read_collection(index_paths.links, "links") == []
        index_paths.links.write_text(json.dumps([1, 2, 3]), encoding="utf-8")
        assert read_collection(index_paths.links, "links") == []

    def test_malformed_records_are_skipped(self, index_paths):
        index_paths.chunks.write_text(
            json.dumps({"chunks": [{"title": "no ids"}, {"chunkId": "ok-0", "docId": "ok"}]}),
            encoding="utf-8",
        )
        state = load_retriever_state(index_paths)
        assert [c.chunk_id for c in state.chunks] == ["ok-0"]


class TestIndexStore:
    def test_require_before_load_raises(self, index_paths):
        store = IndexStore(index_paths)
        assert not store.loaded
        with pytest.raises(IndexNotReadyError):
            store.require()

    def test_reload_is_idempotent(self, index_paths):
        store = IndexStore(index_paths)
        first = store.reload().counts()
        second = store.reload().counts()
        assert first == second

    def test_reload_swaps_without_touching_captured_snapshot(self, index_paths):
        store = IndexStore(index_paths)
        captured = store.reload()
        index_paths.chunks.write_text(json.dumps({"chunks": []}), encoding="utf-8")
        fresh = store.reload()
        assert store.require() is fresh
        assert captured.counts().chunks == 7
        assert fresh.counts().chunks == 0

    def test_snapshot_is_frozen(self, state):
        with pytest.raises(ValidationError):
            state.chunks = ()
