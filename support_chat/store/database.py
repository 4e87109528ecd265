"""Engine construction, schema creation and one-time FAQ seeding.

The engine is created explicitly by whoever owns the process (the FastAPI
lifespan, the CLI, or a test fixture) and passed down; nothing in this
module holds a global connection.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import create_engine, event, func, select
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from support_chat.store.models import Base, FAQEntry
from support_chat.store.seed import FAQ_SEED

logger = logging.getLogger(__name__)


def _is_memory_url(url: str) -> bool:
    return make_url(url).database in (None, "", ":memory:")


def _set_sqlite_pragmas(dbapi_connection, connection_record) -> None:
    """Enable FK enforcement and WAL (readers don't block on the writer)."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()


def create_db_engine(url: str) -> Engine:
    """Build a SQLAlchemy engine for *url*.

    ``sqlite://`` / ``sqlite:///:memory:`` URLs share a single connection
    (``StaticPool``) so every session sees the same in-memory database.
    """
    kwargs: dict = {}
    is_sqlite = make_url(url).get_backend_name() == "sqlite"
    if is_sqlite:
        # Requests are served from a thread pool
        kwargs["connect_args"] = {"check_same_thread": False}
        if _is_memory_url(url):
            kwargs["poolclass"] = StaticPool

    engine = create_engine(url, **kwargs)
    if is_sqlite:
        event.listen(engine, "connect", _set_sqlite_pragmas)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    # Records are handed back to callers after the session closes
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def seed_faqs(session: Session) -> int:
    """Insert the reference FAQ rows unless the table already has data.

    Returns the number of rows inserted (0 when seeding was skipped).
    """
    existing = session.scalar(select(func.count()).select_from(FAQEntry))
    if existing:
        logger.debug("FAQ table already holds %d rows, skipping seed", existing)
        return 0

    for category, question, answer in FAQ_SEED:
        session.add(
            FAQEntry(
                id=str(uuid.uuid4()),
                category=category,
                question=question,
                answer=answer,
            )
        )
    logger.info("Seeded %d FAQ entries", len(FAQ_SEED))
    return len(FAQ_SEED)


def init_db(engine: Engine) -> sessionmaker[Session]:
    """Create missing tables, seed the FAQ once, and return a session factory.

    Safe to call on every start-up.
    """
    Base.metadata.create_all(bind=engine)
    session_factory = create_session_factory(engine)
    with session_factory.begin() as session:
        seed_faqs(session)
    return session_factory
