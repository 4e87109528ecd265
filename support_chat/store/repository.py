"""Data access for conversations, messages and FAQ entries.

``ChatStore`` wraps a SQLAlchemy session factory and opens one short
transaction per call.  Returned ORM objects are detached but fully loaded,
so callers can read their attributes freely.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, sessionmaker

from support_chat.store.models import Conversation, FAQEntry, Message, Sender, utcnow

logger = logging.getLogger(__name__)


class ChatStore:
    """Create/read operations over the chat tables."""

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    # ── Conversations ────────────────────────────────────────────────

    def create_conversation(self) -> Conversation:
        now = utcnow()
        conversation = Conversation(id=str(uuid.uuid4()), created_at=now, updated_at=now)
        with self._session_factory.begin() as session:
            session.add(conversation)
        logger.debug("Created conversation %s", conversation.id)
        return conversation

    def find_conversation(self, conversation_id: str) -> Conversation | None:
        with self._session_factory() as session:
            return session.get(Conversation, conversation_id)

    def touch_conversation(self, conversation_id: str) -> None:
        """Bump ``updated_at``; silently does nothing for an unknown id."""
        with self._session_factory.begin() as session:
            self._touch(session, conversation_id, utcnow())

    @staticmethod
    def _touch(session: Session, conversation_id: str, when) -> None:
        result = session.execute(
            update(Conversation)
            .where(Conversation.id == conversation_id)
            .values(updated_at=when)
        )
        if result.rowcount == 0:
            logger.warning("touch on missing conversation %s", conversation_id)

    # ── Messages ─────────────────────────────────────────────────────

    def create_message(self, conversation_id: str, sender: Sender | str, text: str) -> Message:
        """Append a message and bump the conversation in one transaction.

        Raises ``ValueError`` for an unknown sender.  Storage failures
        (including a dangling ``conversation_id``) propagate as SQLAlchemy
        errors.
        """
        sender = Sender(sender)
        with self._session_factory.begin() as session:
            now = self._next_timestamp(session, conversation_id)
            message = Message(
                id=str(uuid.uuid4()),
                conversation_id=conversation_id,
                sender=sender.value,
                text=text,
                created_at=now,
            )
            session.add(message)
            session.flush()
            self._touch(session, conversation_id, now)
        return message

    @staticmethod
    def _next_timestamp(session: Session, conversation_id: str) -> datetime:
        """Current time, nudged past the conversation's latest message.

        Keeps ``created_at`` strictly increasing within a conversation even
        when the clock is coarse, so it alone defines transcript order.
        """
        now = utcnow()
        latest = session.scalar(
            select(func.max(Message.created_at)).where(Message.conversation_id == conversation_id)
        )
        if latest is not None and now <= latest:
            now = latest + timedelta(microseconds=1)
        return now

    def list_messages(self, conversation_id: str) -> list[Message]:
        """All messages of a conversation, oldest first."""
        stmt = (
            select(Message)
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.created_at.asc())
        )
        with self._session_factory() as session:
            return list(session.scalars(stmt).all())

    # ── FAQ ──────────────────────────────────────────────────────────

    def list_faqs(self) -> list[FAQEntry]:
        with self._session_factory() as session:
            return list(session.scalars(select(FAQEntry)).all())
