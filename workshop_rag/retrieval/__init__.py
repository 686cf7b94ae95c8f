"""Retrieval stack utilities."""

from .index_loader import IndexPaths, load_retriever_state
from .retriever import retrieve_context
from .store import IndexStore

__all__ = ["IndexPaths", "IndexStore", "load_retriever_state", "retrieve_context"]
