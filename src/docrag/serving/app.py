"""FastAPI application exposing document sessions as a REST API."""

from __future__ import annotations

import base64
import binascii
import logging

from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from docrag import __version__
from docrag.config import settings
from docrag.errors import (
    DocRagError,
    DocumentTooLargeError,
    EmbeddingServiceError,
    EmptyDocumentError,
    GenerationServiceError,
    IngestionSupersededError,
    SessionBusyError,
    SessionNotFoundError,
    SessionNotReadyError,
    UnsupportedFileTypeError,
)
from docrag.ingestion.loader import load_text_document
from docrag.session.manager import SessionManager
from docrag.session.session import RagSession
from docrag.session.state import ChatMessage, SessionStatus

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: dict[type[DocRagError], int] = {
    SessionNotFoundError: 404,
    SessionBusyError: 409,
    SessionNotReadyError: 409,
    IngestionSupersededError: 409,
    DocumentTooLargeError: 413,
    UnsupportedFileTypeError: 415,
    EmptyDocumentError: 422,
    EmbeddingServiceError: 502,
    GenerationServiceError: 502,
}


# ── Request / Response schemas ────────────────────────────────────────
class SessionView(BaseModel):
    """Displayable state of one session."""

    session_id: str
    status: SessionStatus
    status_text: str
    document_name: str | None = None
    chunk_count: int = 0
    messages: list[ChatMessage] = []


class QueryRequest(BaseModel):
    """Question about the session's document."""

    question: str
    k: int | None = None


class QueryResponse(BaseModel):
    """Answer returned for a question."""

    message: ChatMessage
    sources: list[int] = []


class GenerateRequest(BaseModel):
    """One-shot prompt, optionally about an image.

    ``image_base64`` may be raw base64 (with ``mime_type`` set) or a full
    ``data:`` URL.
    """

    prompt: str
    image_base64: str | None = None
    mime_type: str | None = None


class GenerateResponse(BaseModel):
    text: str


def _view(session_id: str, session: RagSession) -> SessionView:
    return SessionView(
        session_id=session_id,
        status=session.status,
        status_text=session.status_text,
        document_name=session.document_name,
        chunk_count=session.chunk_count,
        messages=session.messages,
    )


def _decode_image(request: GenerateRequest) -> tuple[bytes, str]:
    data = request.image_base64 or ""
    mime_type = request.mime_type
    if data.startswith("data:"):
        header, _, data = data.partition(",")
        mime_type = header[len("data:") :].split(";", 1)[0] or mime_type
    if not mime_type:
        raise HTTPException(status_code=422, detail="mime_type is required for raw base64 images")
    try:
        return base64.b64decode(data, validate=True), mime_type
    except (binascii.Error, ValueError) as exc:
        raise HTTPException(status_code=422, detail="image_base64 is not valid base64") from exc


def get_manager(request: Request) -> SessionManager:
    return request.app.state.sessions


def create_app(manager: SessionManager | None = None) -> FastAPI:
    """Build the API around *manager* (a fresh :class:`SessionManager` by default)."""
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(
        title="docrag API",
        version=__version__,
        description="Chat with an uploaded text document via retrieval-augmented generation.",
    )
    app.state.sessions = manager if manager is not None else SessionManager()

    @app.exception_handler(DocRagError)
    async def _docrag_error(request: Request, exc: DocRagError) -> JSONResponse:
        status_code = ERROR_STATUS_CODES.get(type(exc), 500)
        logger.info("%s %s -> %d: %s", request.method, request.url.path, status_code, exc.message)
        return JSONResponse(status_code=status_code, content={"detail": exc.message})

    # ── Routes ────────────────────────────────────────────────────────
    @app.get("/health")
    async def health() -> dict[str, str]:
        """Liveness probe."""
        return {"status": "ok"}

    @app.post("/sessions", response_model=SessionView, status_code=201)
    async def create_session(manager: SessionManager = Depends(get_manager)) -> SessionView:
        session_id, session = manager.create()
        return _view(session_id, session)

    @app.get("/sessions/{session_id}", response_model=SessionView)
    async def get_session(session_id: str, manager: SessionManager = Depends(get_manager)) -> SessionView:
        return _view(session_id, manager.get(session_id))

    @app.delete("/sessions/{session_id}", status_code=204)
    async def delete_session(session_id: str, manager: SessionManager = Depends(get_manager)) -> None:
        manager.delete(session_id)

    @app.post("/sessions/{session_id}/document", response_model=SessionView)
    async def upload_document(
        session_id: str,
        file: UploadFile = File(...),
        manager: SessionManager = Depends(get_manager),
    ) -> SessionView:
        """Replace the session's document with the uploaded text file."""
        session = manager.get(session_id)
        data = await file.read()
        document = load_text_document(data, filename=file.filename, content_type=file.content_type)
        await session.ingest(document)
        return _view(session_id, session)

    @app.post("/sessions/{session_id}/query", response_model=QueryResponse)
    async def query(
        session_id: str,
        request: QueryRequest,
        manager: SessionManager = Depends(get_manager),
    ) -> QueryResponse:
        """Answer a question from the session's document."""
        session = manager.get(session_id)
        try:
            message = await session.ask(request.question, k=request.k)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        sources = [r.chunk.index for r in session.last_sources] if not message.is_error else []
        return QueryResponse(message=message, sources=sources)

    @app.post("/generate", response_model=GenerateResponse)
    async def generate(
        request: GenerateRequest,
        manager: SessionManager = Depends(get_manager),
    ) -> GenerateResponse:
        """Plain generation without document context."""
        client = manager.generation_client
        if request.image_base64:
            image_bytes, mime_type = _decode_image(request)
            try:
                text = await client.generate_with_image(request.prompt, image_bytes, mime_type)
            except ValueError as exc:
                raise HTTPException(status_code=422, detail=str(exc)) from exc
        else:
            text = await client.generate(request.prompt)
        return GenerateResponse(text=text)

    return app


app = create_app()
