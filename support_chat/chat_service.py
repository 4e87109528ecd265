"""Session and message orchestration behind the HTTP routes and the CLI.

Concurrent posts for the same session are not serialised: two in-flight
requests may interleave their user/ai messages in the transcript.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.engine import Engine

from support_chat.errors import ConversationNotFoundError, ErrorKind, MessageValidationError
from support_chat.reply import ReplyGenerator
from support_chat.services.llm import CompletionClient
from support_chat.store.database import init_db
from support_chat.store.models import Conversation, Message, Sender
from support_chat.store.repository import ChatStore

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 5000


@dataclass(frozen=True)
class PostMessageResult:
    reply: str
    session_id: str
    error_kind: ErrorKind | None = None


def validate_message(message: object) -> str:
    """Return the stripped message or raise ``MessageValidationError``."""
    if not message or not isinstance(message, str):
        raise MessageValidationError("Message is required and must be a string")
    if not message.strip():
        raise MessageValidationError("Message cannot be empty")
    if len(message) > MAX_MESSAGE_LENGTH:
        raise MessageValidationError(
            f"Message is too long (max {MAX_MESSAGE_LENGTH} characters)"
        )
    return message.strip()


class ChatService:
    """Ties the store and the reply generator together."""

    def __init__(self, store: ChatStore, generator: ReplyGenerator):
        self.store = store
        self.generator = generator

    def resolve_conversation(self, session_id: str | None) -> Conversation:
        """Reuse the session's conversation, or open a new one.

        An unknown id is not an error: the client simply gets a new session.
        """
        if session_id:
            conversation = self.store.find_conversation(session_id)
            if conversation is not None:
                return conversation
            logger.info("Unknown session %s, starting a new conversation", session_id)
        conversation = self.store.create_conversation()
        logger.info("Started new conversation %s", conversation.id)
        return conversation

    def post_message(self, session_id: str | None, message: object) -> PostMessageResult:
        text = validate_message(message)
        conversation = self.resolve_conversation(session_id)

        self.store.create_message(conversation.id, Sender.USER, text)
        result = self.generator.generate_reply(conversation.id, text)
        self.store.create_message(conversation.id, Sender.AI, result.reply)

        return PostMessageResult(
            reply=result.reply,
            session_id=conversation.id,
            error_kind=result.error_kind,
        )

    def get_history(self, session_id: str | None) -> list[Message]:
        if not session_id or not session_id.strip():
            raise MessageValidationError("sessionId is required")
        if self.store.find_conversation(session_id) is None:
            raise ConversationNotFoundError(session_id)
        return self.store.list_messages(session_id)


def create_chat_service(engine: Engine, client: CompletionClient | None = None) -> ChatService:
    """Initialise the schema on *engine* and wire up a ``ChatService``.

    ``client`` defaults to the real provider-backed ``CompletionClient``.
    """
    store = ChatStore(init_db(engine))
    generator = ReplyGenerator(store, client or CompletionClient())
    return ChatService(store, generator)
