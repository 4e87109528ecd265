"""FAQ knowledge base accessor.

The FAQ table is small and static, so the whole thing is flattened into a
single text block and injected into every prompt.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from support_chat.store.models import FAQEntry
from support_chat.store.repository import ChatStore

logger = logging.getLogger(__name__)


def format_faq_entries(entries: Iterable[FAQEntry]) -> str:
    """Render FAQ rows as ``Q:``/``A:`` pairs separated by a blank line."""
    return "\n\n".join(f"Q: {faq.question}\nA: {faq.answer}" for faq in entries)


def get_knowledge_context(store: ChatStore) -> str:
    """Return the full knowledge base as one grounding block."""
    faqs = store.list_faqs()
    if not faqs:
        logger.warning("FAQ knowledge base is empty; replies will be ungrounded")
    return format_faq_entries(faqs)
