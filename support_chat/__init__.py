"""Support Chat — a customer-support chat backend grounded on a FAQ knowledge base.

Architecture Overview
=====================

A browser UI posts customer messages to a small FastAPI service.  Each
message goes through three steps:

1. **Persist** — the message is stored under its conversation (a new
   conversation is opened when the client has no valid session id).
2. **Generate** — a single prompt is assembled from the FAQ knowledge base,
   the last few turns of the conversation and the new message, then sent to
   Claude via LangChain's ``ChatAnthropic``.
3. **Persist again** — the reply (or a canned apology if the provider
   failed) is stored as an ``ai`` message and returned to the client.

Key Design Decisions
--------------------
- **Storage**: SQLAlchemy ORM over SQLite (WAL journal).  The engine is
  built once in the FastAPI lifespan and handed to request handlers through
  ``app.state``; there is no module-level database global.
- **Provider failures never become HTTP errors**: the completion client maps
  typed ``anthropic`` exceptions to a small ``ErrorKind`` enum and the reply
  generator turns each kind into a user-safe apology.
- **Grounding**: the whole FAQ table is small, so it is injected into every
  prompt verbatim.
- **Dual Interface**: FastAPI server (production) + CLI chat loop
  (development/testing).

Package Structure
-----------------
- ``support_chat/config.py`` — Centralized configuration from environment variables
- ``support_chat/errors.py`` — Exception hierarchy
- ``support_chat/prompts.py`` — Prompt template and rendering helpers
- ``support_chat/reply.py`` — Reply generator (prompt assembly + LLM call)
- ``support_chat/chat_service.py`` — Session / message orchestration
- ``support_chat/server.py`` — FastAPI application
- ``support_chat/main.py`` — CLI chat interface
- ``support_chat/store/`` — SQLAlchemy models, engine setup, seed data, repository
- ``support_chat/services/`` — LLM client, FAQ knowledge accessor, metrics
- ``support_chat/api/`` — FastAPI routes and Pydantic schemas
"""
