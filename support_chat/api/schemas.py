"""Pydantic schemas for the FastAPI endpoints.

The browser client speaks camelCase (``sessionId``); fields are declared in
snake_case with aliases.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class MessageRequest(BaseModel):
    """Incoming chat message from the frontend.

    ``message`` is optional here so that a missing value is reported by the
    service layer with the same 400 error as an empty one.
    """

    model_config = ConfigDict(populate_by_name=True)

    message: str | None = Field(default=None, description="The customer's message")
    session_id: str | None = Field(
        default=None,
        alias="sessionId",
        description="Session identifier returned by a previous call; omit to start a new session",
    )


class MessageResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reply: str = Field(..., description="The agent's reply")
    session_id: str = Field(..., alias="sessionId")
    error: str | None = Field(
        default=None,
        description="Error kind when the reply is a canned apology",
    )


class HistoryMessage(BaseModel):
    id: str
    sender: str
    text: str
    timestamp: datetime


class HistoryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(..., alias="sessionId")
    messages: list[HistoryMessage]


class ErrorResponse(BaseModel):
    error: str
    message: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    service: str = "support-chat"
