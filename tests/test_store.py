"""Tests for the SQLAlchemy-backed chat store."""

from __future__ import annotations

from datetime import datetime, timedelta
from unittest.mock import patch

import pytest
from sqlalchemy import func, inspect, select
from sqlalchemy.exc import IntegrityError

from support_chat.store.database import create_db_engine, init_db, seed_faqs
from support_chat.store.models import FAQEntry, Sender
from support_chat.store.repository import ChatStore
from support_chat.store.seed import FAQ_SEED


class TestInitDb:
    def test_creates_all_tables(self, engine):
        init_db(engine)
        tables = set(inspect(engine).get_table_names())
        assert {"conversations", "messages", "faq_knowledge"} <= tables

    def test_seeds_faq_once(self, engine):
        session_factory = init_db(engine)
        init_db(engine)  # second start-up must not duplicate rows
        with session_factory() as session:
            count = session.scalar(select(func.count()).select_from(FAQEntry))
        assert count == len(FAQ_SEED)

    def test_seed_skipped_when_table_has_rows(self, engine):
        session_factory = init_db(engine)
        with session_factory.begin() as session:
            assert seed_faqs(session) == 0

    def test_file_database_uses_wal_journal(self, tmp_path):
        file_engine = create_db_engine(f"sqlite:///{tmp_path}/chat.db")
        try:
            init_db(file_engine)
            with file_engine.connect() as conn:
                assert conn.exec_driver_sql("PRAGMA journal_mode").scalar() == "wal"
                assert conn.exec_driver_sql("PRAGMA foreign_keys").scalar() == 1
        finally:
            file_engine.dispose()

    def test_separate_memory_engines_are_isolated(self):
        first = create_db_engine("sqlite://")
        second = create_db_engine("sqlite://")
        try:
            store = ChatStore(init_db(first))
            conversation = store.create_conversation()
            other = ChatStore(init_db(second))
            assert other.find_conversation(conversation.id) is None
        finally:
            first.dispose()
            second.dispose()


class TestConversations:
    def test_create_returns_full_record(self, store):
        conversation = store.create_conversation()
        assert len(conversation.id) == 36
        assert isinstance(conversation.created_at, datetime)
        assert conversation.created_at == conversation.updated_at

    def test_ids_are_unique(self, store):
        ids = {store.create_conversation().id for _ in range(5)}
        assert len(ids) == 5

    def test_find_existing(self, store):
        created = store.create_conversation()
        found = store.find_conversation(created.id)
        assert found is not None
        assert found.id == created.id

    def test_find_unknown_returns_none(self, store):
        assert store.find_conversation("does-not-exist") is None

    def test_touch_bumps_updated_at(self, store):
        conversation = store.create_conversation()
        later = conversation.updated_at + timedelta(minutes=5)
        with patch("support_chat.store.repository.utcnow", return_value=later):
            store.touch_conversation(conversation.id)
        assert store.find_conversation(conversation.id).updated_at == later

    def test_touch_unknown_is_noop(self, store):
        store.touch_conversation("missing")  # must not raise
        assert store.find_conversation("missing") is None


class TestMessages:
    def test_create_message_returns_record(self, store):
        conversation = store.create_conversation()
        message = store.create_message(conversation.id, Sender.USER, "Where is my order?")
        assert message.conversation_id == conversation.id
        assert message.sender == "user"
        assert message.text == "Where is my order?"
        assert message.created_at is not None

    def test_create_message_accepts_plain_sender_string(self, store):
        conversation = store.create_conversation()
        message = store.create_message(conversation.id, "ai", "Let me check.")
        assert message.sender == "ai"

    def test_create_message_rejects_unknown_sender(self, store):
        conversation = store.create_conversation()
        with pytest.raises(ValueError):
            store.create_message(conversation.id, "bot", "hi")

    def test_create_message_touches_conversation(self, store):
        conversation = store.create_conversation()
        later = conversation.updated_at + timedelta(seconds=30)
        with patch("support_chat.store.repository.utcnow", return_value=later):
            store.create_message(conversation.id, Sender.USER, "hello")
        assert store.find_conversation(conversation.id).updated_at == later

    def test_message_requires_existing_conversation(self, store):
        with pytest.raises(IntegrityError):
            store.create_message("no-such-conversation", Sender.USER, "hello")

    def test_list_messages_in_creation_order(self, store):
        conversation = store.create_conversation()
        texts = [f"message {i}" for i in range(6)]
        for i, text in enumerate(texts):
            store.create_message(conversation.id, Sender.USER if i % 2 == 0 else Sender.AI, text)

        listed = store.list_messages(conversation.id)
        assert [m.text for m in listed] == texts
        assert [m.sender for m in listed] == ["user", "ai"] * 3

    def test_same_clock_reading_keeps_insert_order(self, store):
        conversation = store.create_conversation()
        frozen = conversation.created_at
        with patch("support_chat.store.repository.utcnow", return_value=frozen):
            for text in ("first", "second", "third"):
                store.create_message(conversation.id, Sender.USER, text)

        listed = store.list_messages(conversation.id)
        assert [m.text for m in listed] == ["first", "second", "third"]
        stamps = [m.created_at for m in listed]
        assert stamps == sorted(set(stamps))

    def test_list_messages_only_returns_own_conversation(self, store):
        first = store.create_conversation()
        second = store.create_conversation()
        store.create_message(first.id, Sender.USER, "first")
        store.create_message(second.id, Sender.USER, "second")
        assert [m.text for m in store.list_messages(first.id)] == ["first"]

    def test_list_messages_empty(self, store):
        conversation = store.create_conversation()
        assert store.list_messages(conversation.id) == []


class TestFaqs:
    def test_list_faqs_returns_seed(self, store):
        faqs = store.list_faqs()
        assert len(faqs) == len(FAQ_SEED)
        questions = {faq.question for faq in faqs}
        assert "What is your return policy?" in questions
        assert all(faq.category and faq.answer for faq in faqs)
