"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from workshop_rag.config import settings
from workshop_rag.errors import (
    IndexLoadError,
    IndexNotReadyError,
    InvalidRequestError,
    WorkshopRagError,
)
from workshop_rag.llm.answer_generator import AnswerGenerator
from workshop_rag.models.qa import (
    ChatRequest,
    ChatResponse,
    ChatRetrievalSummary,
    HealthResponse,
    LlmOptions,
    LocatePartQuery,
    LocatePartRequest,
    LocatePartResponse,
    ReloadResponse,
    RetrieveRequest,
    RetrieveResponse,
)
from workshop_rag.models.state import IndexCounts
from workshop_rag.retrieval.chunk_ranker import clamp_limit
from workshop_rag.retrieval.grounding import locate_part
from workshop_rag.retrieval.retriever import retrieve_context
from workshop_rag.retrieval.store import IndexStore
from workshop_rag.utils.tokenization import normalize_ref, normalize_whitespace

logger = logging.getLogger(__name__)

CHAT_RETRIEVAL_LIMIT = 12
ERROR_STATUS = {InvalidRequestError: 400, IndexNotReadyError: 503}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"ok": False, "error": message})


def create_app(
    store: Optional[IndexStore] = None,
    answer_generator: Optional[AnswerGenerator] = None,
    load_indexes: bool = True,
) -> FastAPI:
    """Build the API around one index store. Indexes load at startup unless disabled."""
    store = store or IndexStore()
    generator = answer_generator or AnswerGenerator()

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        if load_indexes and not store.loaded:
            try:
                store.reload()
            except Exception:
                logger.exception("Initial index load failed; serving 503 until reloaded")
        yield

    app = FastAPI(
        title="Workshop RAG",
        description="Retrieval and grounding API for workshop procedures and EPC parts",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.index_store = store
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(WorkshopRagError)
    async def workshop_error_handler(request: Request, exc: WorkshopRagError) -> JSONResponse:
        status_code = next(
            (code for kind, code in ERROR_STATUS.items() if isinstance(exc, kind)), 500
        )
        return _error(status_code, str(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.debug("Rejected request body on %s: %s", request.url.path, exc.errors())
        return _error(400, "Invalid JSON request body")

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s", request.url.path)
        return _error(500, str(exc))

    @app.get("/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        """Readiness probe with per-collection counts."""
        state = store.current()
        return HealthResponse(
            loaded=state is not None,
            counts=state.counts() if state is not None else IndexCounts(),
        )

    @app.post("/reload-indexes", response_model=ReloadResponse)
    def reload_indexes() -> ReloadResponse:
        try:
            state = store.reload()
        except Exception as exc:
            logger.exception("Index reload failed")
            raise IndexLoadError(str(exc)) from exc
        return ReloadResponse(counts=state.counts())

    @app.post("/retrieve", response_model=RetrieveResponse)
    def retrieve(payload: RetrieveRequest) -> RetrieveResponse:
        query = normalize_whitespace(payload.query)
        if not query:
            raise InvalidRequestError("query is required")
        state = store.require()
        retrieval = retrieve_context(
            state,
            query,
            selected_engine=normalize_whitespace(payload.selected_engine) or None,
            limit=clamp_limit(payload.limit),
        )
        return RetrieveResponse(retrieval=retrieval)

    @app.post("/locate-part", response_model=LocatePartResponse)
    def locate(payload: LocatePartRequest) -> LocatePartResponse:
        part_no = normalize_whitespace(payload.part_no)
        diagram_id = normalize_whitespace(payload.diagram_id)
        ref = normalize_ref(payload.ref) if payload.ref else None
        if not part_no and not diagram_id:
            raise InvalidRequestError("partNo or diagramId is required")
        state = store.require()
        matches = locate_part(state, part_no=part_no, diagram_id=diagram_id, ref=ref)
        return LocatePartResponse(
            query=LocatePartQuery(part_no=part_no or None, diagram_id=diagram_id or None, ref=ref),
            count=len(matches),
            matches=matches,
        )

    @app.post("/chat", response_model=ChatResponse)
    async def chat(payload: ChatRequest) -> ChatResponse:
        """Answer a workshop question from retrieved evidence."""
        query = normalize_whitespace(payload.query)
        if not query:
            raise InvalidRequestError("query is required")
        state = store.require()
        selected_engine = normalize_whitespace(payload.selected_engine) or None
        llm = payload.llm or LlmOptions()

        retrieval = retrieve_context(state, query, selected_engine, limit=CHAT_RETRIEVAL_LIMIT)
        outcome = await generator.generate(
            query,
            retrieval,
            selected_engine=selected_engine,
            provider=normalize_whitespace(llm.provider or payload.provider) or None,
            api_key=normalize_whitespace(llm.api_key) or None,
            model=normalize_whitespace(llm.model) or None,
        )
        return ChatResponse(
            provider_used=outcome.provider_used,
            model_used=outcome.model_used,
            retrieval=ChatRetrievalSummary(
                selected_engine=retrieval.selected_engine,
                top_chunk_count=len(retrieval.top_chunks),
                matched_part_count=len(retrieval.matched_parts),
                citation_count=len(retrieval.citations),
            ),
            response=outcome.answer,
        )

    return app


app = create_app()


def serve() -> None:
    logging.basicConfig(level=settings.log_level)
    logger.info("Serving indexes from %s and %s", settings.rag_dir, settings.data_dir)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    serve()
