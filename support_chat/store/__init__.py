"""Relational persistence for conversations, messages and FAQ entries."""

from support_chat.store.database import create_db_engine, init_db
from support_chat.store.models import Conversation, FAQEntry, Message, Sender
from support_chat.store.repository import ChatStore

__all__ = [
    "ChatStore",
    "Conversation",
    "FAQEntry",
    "Message",
    "Sender",
    "create_db_engine",
    "init_db",
]
