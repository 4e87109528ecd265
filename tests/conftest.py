"""Shared test fixtures for the Support Chat test suite."""

from __future__ import annotations

import os
from unittest.mock import MagicMock

import pytest


def pytest_configure(config):
    """Set test environment variables BEFORE collection starts.

    This runs before any imports, so config.py won't fail on module load
    and nothing ever touches a database file on disk.
    """
    os.environ.setdefault("ANTHROPIC_API_KEY", "test-anthropic-key-123")
    os.environ["DATABASE_URL"] = "sqlite://"
    os.environ["METRICS_ENABLED"] = "false"


@pytest.fixture
def engine():
    """A fresh in-memory database with schema and FAQ seed."""
    from support_chat.store.database import create_db_engine

    eng = create_db_engine("sqlite://")
    yield eng
    eng.dispose()


@pytest.fixture
def store(engine):
    from support_chat.store.database import init_db
    from support_chat.store.repository import ChatStore

    return ChatStore(init_db(engine))


@pytest.fixture
def completion_client():
    """Stand-in for the provider-backed ``CompletionClient``."""
    client = MagicMock()
    client.complete.return_value = "  Hello! How can I help you today?  "
    return client


@pytest.fixture
def chat_service(store, completion_client):
    from support_chat.chat_service import ChatService
    from support_chat.reply import ReplyGenerator

    return ChatService(store, ReplyGenerator(store, completion_client))
