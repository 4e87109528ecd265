"""Prompt template for the support agent."""

from __future__ import annotations

from collections.abc import Iterable

from support_chat.store.models import Message, Sender

PROMPT_TEMPLATE = """You are a helpful and friendly customer support agent for an e-commerce store.

STORE KNOWLEDGE BASE:
{knowledge}

GUIDELINES:
- Be warm, professional, and empathetic
- Answer questions using the knowledge base when applicable
- If unsure, politely say so and offer a human agent
- Keep responses concise and helpful

{history_block}
Now respond to the customer's latest message:

Customer: {message}"""

_SPEAKER = {Sender.USER.value: "Customer", Sender.AI.value: "Agent"}


def render_history(messages: Iterable[Message]) -> str:
    """Render messages as ``Customer:``/``Agent:`` lines, in the given order."""
    return "\n".join(f"{_SPEAKER.get(msg.sender, 'Agent')}: {msg.text}" for msg in messages)


def build_prompt(knowledge: str, history: str, message: str) -> str:
    """Assemble the single prompt string sent to the model.

    The history section is omitted entirely for a fresh conversation.
    """
    history_block = f"CONVERSATION HISTORY:\n{history}\n" if history else ""
    return PROMPT_TEMPLATE.format(
        knowledge=knowledge,
        history_block=history_block,
        message=message,
    )
