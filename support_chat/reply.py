"""Reply generator: builds the grounded prompt and calls the LLM.

Provider failures are converted into a canned apology plus an
``ErrorKind`` here, so callers always get something to store and display.
Storage errors while reading history or the FAQ are not caught.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from support_chat.config import SUPPORT_EMAIL
from support_chat.errors import ErrorKind, ProviderError
from support_chat.prompts import build_prompt, render_history
from support_chat.services.knowledge import get_knowledge_context
from support_chat.services.llm import CompletionClient
from support_chat.store.models import Message
from support_chat.store.repository import ChatStore

logger = logging.getLogger(__name__)

MAX_PROMPT_MESSAGE_LENGTH = 2000
MAX_HISTORY_MESSAGES = 10
REPLY_TEMPERATURE = 0.7
TRUNCATION_MARKER = "..."


def fallback_reply(kind: ErrorKind, support_email: str = SUPPORT_EMAIL) -> str:
    """User-safe apology shown in place of a model reply."""
    if kind is ErrorKind.API_KEY_ERROR:
        return (
            "I'm having trouble accessing my system right now. "
            f"Please contact {support_email}."
        )
    if kind is ErrorKind.RATE_LIMIT_ERROR:
        return (
            "We're experiencing high traffic. "
            f"Please try again shortly or email {support_email}."
        )
    if kind is ErrorKind.TIMEOUT_ERROR:
        return (
            "I'm having connectivity issues. "
            f"Please try again or contact {support_email}."
        )
    return "Sorry, something went wrong. Please try again or reach out to our support team."


@dataclass(frozen=True)
class ReplyResult:
    reply: str
    error_kind: ErrorKind | None = None


def truncate_message(text: str, limit: int = MAX_PROMPT_MESSAGE_LENGTH) -> str:
    """Cap *text* at *limit* characters, marking the cut with ``...``."""
    if len(text) <= limit:
        return text
    return text[:limit] + TRUNCATION_MARKER


def recent_history(messages: list[Message], limit: int = MAX_HISTORY_MESSAGES) -> list[Message]:
    """The last *limit* messages, still in chronological order."""
    if limit <= 0:
        return []
    return messages[-limit:]


class ReplyGenerator:
    """Generates the agent's answer to one customer message."""

    def __init__(self, store: ChatStore, client: CompletionClient, *, temperature: float = REPLY_TEMPERATURE):
        self._store = store
        self._client = client
        self._temperature = temperature

    def build_prompt_for(self, conversation_id: str, user_message: str) -> str:
        """Render the prompt for *user_message* in the given conversation.

        The history window is read from the store, so it already contains
        the customer message if the caller persisted it first.
        """
        history = recent_history(self._store.list_messages(conversation_id))
        knowledge = get_knowledge_context(self._store)
        return build_prompt(
            knowledge=knowledge,
            history=render_history(history),
            message=truncate_message(user_message),
        )

    def generate_reply(self, conversation_id: str, user_message: str) -> ReplyResult:
        """Return the model's reply, or a canned apology tagged with its kind."""
        prompt = self.build_prompt_for(conversation_id, user_message)
        try:
            text = self._client.complete(prompt, self._temperature)
        except ProviderError as exc:
            logger.warning(
                "Reply generation failed for conversation %s: %s (%s)",
                conversation_id, exc.kind.value, exc,
            )
            return ReplyResult(reply=fallback_reply(exc.kind), error_kind=exc.kind)
        return ReplyResult(reply=text.strip())
