"""FastAPI route definitions for the support chat API."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from support_chat.api.schemas import (
    ErrorResponse,
    HealthResponse,
    HistoryMessage,
    HistoryResponse,
    MessageRequest,
    MessageResponse,
)
from support_chat.chat_service import ChatService
from support_chat.errors import ChatError

logger = logging.getLogger(__name__)

router = APIRouter()

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _get_service(request: Request) -> ChatService:
    """Retrieve the ``ChatService`` built during the FastAPI lifespan."""
    service = getattr(request.app.state, "chat_service", None)
    if service is None:
        raise HTTPException(
            status_code=503,
            detail="The service is still starting up. Please try again in a moment.",
        )
    return service


def _as_utc(value: datetime) -> datetime:
    """Stored timestamps are naive UTC; tag them so clients don't read local time."""
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def _chat_error_response(exc: ChatError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


def _internal_error_response(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "message": message},
    )


# ── Endpoints ────────────────────────────────────────────────────────


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse()


@router.post(
    "/chat/message",
    response_model=MessageResponse,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
)
async def post_message(body: MessageRequest, http_request: Request):
    """Store a customer message and return the agent's reply.

    Omit ``sessionId`` (or send an unknown one) to start a new conversation;
    the id to use next time is returned in the response.  Provider failures
    still return 200, with a canned reply and an ``error`` tag.
    """
    service = _get_service(http_request)
    request_id = getattr(http_request.state, "request_id", "?")

    try:
        # Store writes and the LLM call block; keep them off the event loop.
        result = await asyncio.to_thread(service.post_message, body.session_id, body.message)
    except ChatError as exc:
        logger.info("[%s] Rejected message: %s", request_id, exc)
        return _chat_error_response(exc)
    except Exception:
        logger.exception("[%s] Error processing chat message", request_id)
        return _internal_error_response("An unexpected error occurred. Please try again.")

    if result.error_kind is not None:
        logger.warning("[%s] Replied with fallback (%s)", request_id, result.error_kind.value)

    return MessageResponse(
        reply=result.reply,
        session_id=result.session_id,
        error=result.error_kind.value if result.error_kind else None,
    )


@router.get(
    "/chat/history",
    response_model=HistoryResponse,
    responses={**_ERROR_RESPONSES, 404: {"model": ErrorResponse}},
)
async def get_history(
    http_request: Request,
    session_id: str | None = Query(default=None, alias="sessionId"),
):
    """Return a conversation's messages, oldest first."""
    service = _get_service(http_request)
    request_id = getattr(http_request.state, "request_id", "?")

    try:
        messages = await asyncio.to_thread(service.get_history, session_id)
    except ChatError as exc:
        return _chat_error_response(exc)
    except Exception:
        logger.exception("[%s] Error fetching history", request_id)
        return _internal_error_response("Failed to fetch conversation history")

    return HistoryResponse(
        session_id=session_id,
        messages=[
            HistoryMessage(
                id=msg.id,
                sender=msg.sender,
                text=msg.text,
                timestamp=_as_utc(msg.created_at),
            )
            for msg in messages
        ],
    )
