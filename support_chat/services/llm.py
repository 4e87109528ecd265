"""Completion client: the single boundary to the LLM provider.

``CompletionClient.complete(prompt, temperature)`` sends one rendered prompt
to Claude through LangChain's ``ChatAnthropic`` and returns the generated
text.  Any failure is re-raised as ``ProviderError`` whose ``kind`` is
derived from the *type* of the provider exception, never from its message.
"""

from __future__ import annotations

import logging
import threading
import time

import anthropic
import httpx
from langchain_anthropic import ChatAnthropic
from langchain_core.messages import BaseMessage, HumanMessage

from support_chat.config import ANTHROPIC_API_KEY, LLM_MAX_TOKENS, MODEL_NAME
from support_chat.errors import ErrorKind, ProviderError
from support_chat.services.metrics import metrics

logger = logging.getLogger(__name__)

# Checked in order; APITimeoutError subclasses APIConnectionError.
_ERROR_KINDS: tuple[tuple[tuple[type[BaseException], ...], ErrorKind], ...] = (
    ((anthropic.AuthenticationError, anthropic.PermissionDeniedError), ErrorKind.API_KEY_ERROR),
    ((anthropic.RateLimitError,), ErrorKind.RATE_LIMIT_ERROR),
    (
        (
            anthropic.APIConnectionError,
            httpx.TimeoutException,
            httpx.ConnectError,
            TimeoutError,
            ConnectionError,
        ),
        ErrorKind.TIMEOUT_ERROR,
    ),
)


def classify_provider_error(exc: BaseException) -> ErrorKind:
    """Map a provider exception to an ``ErrorKind``."""
    for exc_types, kind in _ERROR_KINDS:
        if isinstance(exc, exc_types):
            return kind
    if isinstance(exc, anthropic.APIStatusError) and exc.status_code == 429:
        return ErrorKind.RATE_LIMIT_ERROR
    return ErrorKind.UNKNOWN_ERROR


def _message_text(message: BaseMessage) -> str:
    """Extract plain text from a chat model response.

    Anthropic responses may carry a list of content blocks instead of a
    plain string.
    """
    content = message.content
    if isinstance(content, str):
        return content
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


def _build_llm(temperature: float) -> ChatAnthropic:
    """Build the chat model used for support replies."""
    return ChatAnthropic(
        model=MODEL_NAME,
        api_key=ANTHROPIC_API_KEY,
        temperature=temperature,
        max_tokens=LLM_MAX_TOKENS,
    )


class CompletionClient:
    """Prompt-in, text-out wrapper around the chat model.

    One model instance is built per distinct temperature and reused.
    """

    def __init__(self) -> None:
        self._models: dict[float, ChatAnthropic] = {}
        # complete() runs on asyncio.to_thread workers
        self._lock = threading.Lock()

    def _model_for(self, temperature: float) -> ChatAnthropic:
        with self._lock:
            if temperature not in self._models:
                self._models[temperature] = _build_llm(temperature)
            return self._models[temperature]

    def complete(self, prompt: str, temperature: float) -> str:
        """Return the model's text for *prompt*.

        Raises ``ProviderError`` on any failure, including an empty answer.
        """
        t0 = time.perf_counter()
        try:
            response = self._model_for(temperature).invoke([HumanMessage(content=prompt)])
        except Exception as exc:
            elapsed = (time.perf_counter() - t0) * 1000
            kind = classify_provider_error(exc)
            metrics.record_call("anthropic", "generate_reply", elapsed, error_kind=kind.value)
            logger.error(
                "Completion call failed after %.0fms (%s: %s)",
                elapsed, type(exc).__name__, kind.value,
            )
            raise ProviderError(kind, f"{type(exc).__name__}: {exc}") from exc

        elapsed = (time.perf_counter() - t0) * 1000
        text = _message_text(response)
        if not text.strip():
            metrics.record_call(
                "anthropic", "generate_reply", elapsed,
                error_kind=ErrorKind.UNKNOWN_ERROR.value,
            )
            raise ProviderError(ErrorKind.UNKNOWN_ERROR, "Provider returned an empty completion")

        metrics.record_call("anthropic", "generate_reply", elapsed)
        logger.debug("Completion (%s) returned %d chars in %.0fms", MODEL_NAME, len(text), elapsed)
        return text
