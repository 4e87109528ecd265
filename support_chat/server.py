"""FastAPI server for the Support Chat backend.

Run with:
    uvicorn support_chat.server:app --reload --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from support_chat.api.routes import router
from support_chat.chat_service import create_chat_service
from support_chat.config import CORS_ORIGINS, DATABASE_URL, SERVER_HOST, SERVER_PORT
from support_chat.store.database import create_db_engine

# ── Logging ──────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan: initialise / tear-down shared resources ────────────────
@asynccontextmanager
async def lifespan(application: FastAPI):
    """Open the database, make sure the schema and FAQ seed exist, and
    store the resulting ``ChatService`` in app state for the handlers.
    """
    logger.info("Opening database %s", DATABASE_URL)
    engine = create_db_engine(DATABASE_URL)
    application.state.chat_service = create_chat_service(engine)
    logger.info("Chat service ready.")
    yield
    application.state.chat_service = None
    engine.dispose()


# ── FastAPI application ──────────────────────────────────────────────
app = FastAPI(
    title="Support Chat",
    description="Customer-support chat backed by a FAQ knowledge base and Claude.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request-ID middleware ────────────────────────────────────────────
@app.middleware("http")
async def add_request_id(request: Request, call_next) -> Response:
    """Attach a request ID (client-supplied or generated) for log correlation."""
    request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
    request.state.request_id = request_id
    logger.info("[%s] %s %s", request_id, request.method, request.url.path)
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# ── Malformed bodies are client errors: 400, not FastAPI's 422 ───────
@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        detail = "Invalid request"
    return JSONResponse(status_code=400, content={"error": detail})


app.include_router(router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "service": "Support Chat",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/health",
    }


if __name__ == "__main__":
    logger.info("Starting Support Chat API server on %s:%d", SERVER_HOST, SERVER_PORT)
    uvicorn.run(
        "support_chat.server:app",
        host=SERVER_HOST,
        port=SERVER_PORT,
        reload=True,
    )
