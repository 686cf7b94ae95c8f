"""Owner of the current index snapshot."""

from __future__ import annotations

import logging
from typing import Optional

from workshop_rag.errors import IndexNotReadyError
from workshop_rag.models.state import RetrieverState
from workshop_rag.retrieval.index_loader import IndexPaths, load_retriever_state

logger = logging.getLogger(__name__)


class IndexStore:
    """Holds one immutable snapshot behind a single swappable reference.

    Readers call :meth:`require` once per request and keep that snapshot until
    the request finishes. :meth:`reload` builds the replacement completely
    before rebinding the reference, so a reader never sees a partial rebuild.
    """

    def __init__(self, paths: IndexPaths | None = None) -> None:
        self.paths = paths or IndexPaths.from_settings()
        self._state: Optional[RetrieverState] = None

    @property
    def loaded(self) -> bool:
        return self._state is not None

    def current(self) -> Optional[RetrieverState]:
        return self._state

    def require(self) -> RetrieverState:
        state = self._state
        if state is None:
            raise IndexNotReadyError()
        return state

    def reload(self) -> RetrieverState:
        state = load_retriever_state(self.paths)
        self._state = state
        logger.info("Index snapshot swapped: %s", state.counts().model_dump(by_alias=True))
        return state
