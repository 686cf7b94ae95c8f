"""Tests for the query profiling command."""
from __future__ import annotations

import logging

from workshop_rag.cli import profile_queries as cli
from workshop_rag.retrieval.index_loader import IndexPaths
from workshop_rag.retrieval.retriever import NO_PARTS_WARNING


def test_profiles_each_query(state):
    profiles = cli.profile_queries(state, ["replace brake pads", "headlamp wiring"], limit=2)
    assert [p.query for p in profiles] == ["replace brake pads", "headlamp wiring"]

    brake = profiles[0]
    assert brake.chunk_count == 2
    assert brake.citation_count == 2
    assert brake.part_count == 3
    assert brake.top_titles[0] == "[21.0] Brake Pads – Remove and Install"
    assert brake.elapsed_ms >= 0


def test_engine_is_forwarded(state):
    profile = cli.profile_queries(state, ["timing belt"], selected_engine="Z18XER")[0]
    assert profile.top_titles[0] == "[27.0] Timing Belt – Replace"
    assert profile.chunk_count == 2


def test_main_logs_results(index_paths, monkeypatch, caplog):
    monkeypatch.setattr(IndexPaths, "from_settings", classmethod(lambda cls: index_paths))
    with caplog.at_level(logging.INFO, logger=cli.__name__):
        cli.main(["replace brake pads", "--limit", "1"])
    assert '"replace brake pads"' in caplog.text
    assert "1. [21.0] Brake Pads – Remove and Install" in caplog.text


def test_warnings_are_reported(state):
    profile = cli.profile_queries(state, ["zzz"])[0]
    assert NO_PARTS_WARNING in profile.warnings
