"""CLI entry point for the Support Chat backend.

A terminal chat loop over the same ``ChatService`` the API uses, handy for
trying prompts against the real model and a local database.

Usage:
    python -m support_chat.main            # normal mode (quiet)
    python -m support_chat.main --debug    # debug mode (shows API calls)
"""

from __future__ import annotations

import argparse
import logging

from dotenv import load_dotenv

from support_chat.chat_service import create_chat_service
from support_chat.config import DATABASE_URL
from support_chat.errors import MessageValidationError
from support_chat.store.database import create_db_engine

logger = logging.getLogger(__name__)


def _configure_logging(debug: bool = False) -> None:
    """WARNING by default, DEBUG when --debug is passed."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    )

    if not debug:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)

    logging.getLogger("support_chat").setLevel(logging.DEBUG if debug else logging.INFO)


def _print_history(service, session_id: str | None) -> None:
    if session_id is None:
        print("\n>> No messages yet.\n")
        return
    print()
    for msg in service.get_history(session_id):
        who = "You" if msg.sender == "user" else "Agent"
        print(f"  [{msg.created_at:%H:%M:%S}] {who}: {msg.text}")
    print()


def main():
    """Run the interactive CLI chat loop."""
    parser = argparse.ArgumentParser(description="Support Chat CLI")
    parser.add_argument(
        "--debug", action="store_true",
        help="Show all log messages including HTTP requests",
    )
    parser.add_argument(
        "--database-url", default=DATABASE_URL,
        help="SQLAlchemy URL of the chat database (default: %(default)s)",
    )
    args = parser.parse_args()

    load_dotenv()
    _configure_logging(debug=args.debug)

    print("\n" + "=" * 60)
    print("  Support Chat - CLI")
    print("=" * 60)
    print("  Type your message and press Enter.")
    print("  Commands: 'quit' to exit, 'new' for a new session,")
    print("            'history' to show the transcript.")
    print("=" * 60 + "\n")

    engine = create_db_engine(args.database_url)
    service = create_chat_service(engine)
    session_id: str | None = None

    try:
        while True:
            try:
                user_input = input("You: ").strip()
            except (KeyboardInterrupt, EOFError):
                print("\n\nGoodbye!")
                break

            if not user_input:
                continue

            command = user_input.lower()
            if command in ("exit", "quit", "q"):
                print("\nGoodbye!")
                break
            if command == "new":
                session_id = None
                print("\n>> New session will start with your next message.\n")
                continue
            if command == "history":
                _print_history(service, session_id)
                continue

            try:
                result = service.post_message(session_id, user_input)
            except MessageValidationError as e:
                print(f"\n>> {e}\n")
                continue
            except KeyboardInterrupt:
                print("\n\nGoodbye!")
                break
            except Exception:
                logger.exception("Error processing message")
                print("\nAgent: Sorry, something went wrong. Please try again.\n")
                continue

            if session_id != result.session_id:
                session_id = result.session_id
                logger.info("Session: %s", session_id)
            print(f"\nAgent: {result.reply}\n")
    finally:
        engine.dispose()


if __name__ == "__main__":
    main()
