"""Exception types shared by the retrieval engine and the HTTP layer."""

from __future__ import annotations


class WorkshopRagError(Exception):
    """Base class for errors raised by workshop_rag."""


class InvalidRequestError(WorkshopRagError):
    """The caller sent a request that cannot be served as-is."""


class IndexNotReadyError(WorkshopRagError):
    """No index snapshot has been loaded yet."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or "RAG indexes are not loaded. Build the indexes, then restart the server "
            "or call /reload-indexes."
        )


class ProviderError(WorkshopRagError):
    """An external text-generation call failed or returned nothing usable."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider} request failed: {message}")
        self.provider = provider


class IndexLoadError(WorkshopRagError):
    """Rebuilding the index snapshot failed; the previous snapshot stays in service."""
