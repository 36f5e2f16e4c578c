"""Terminal chat.

Examples:
- python -m chatbridge
- python -m chatbridge --check
- python -m chatbridge --env
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import TYPE_CHECKING, TextIO

from chatbridge.chat import ChatSession, render_error
from chatbridge.config import optional_env_vars, required_env_vars
from chatbridge.errors import ChatBridgeError
from chatbridge.selector import ServiceSelector
from chatbridge.store import JsonSettingsStore

if TYPE_CHECKING:
    from collections.abc import Sequence

QUIT_COMMANDS = {"/quit", "/exit"}


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="chatbridge",
        description="Chat with Gemini through the Gemini API or Vertex AI.",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Validate the resolved configuration and exit.",
    )
    parser.add_argument(
        "--env",
        action="store_true",
        help="List the environment variables for the selected provider.",
    )
    parser.add_argument(
        "--settings",
        default=None,
        help="Path to the settings JSON file.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log requests.")
    return parser


def print_env(out: TextIO) -> None:
    """List the environment variables for the selected provider."""
    out.write("Required:\n")
    for name in required_env_vars():
        out.write(f"  {name}\n")
    out.write("Optional:\n")
    for name, desc in optional_env_vars().items():
        out.write(f"  {name}: {desc}\n")


async def check(selector: ServiceSelector, out: TextIO) -> int:
    """Validate the resolved configuration; return the exit status."""
    try:
        client = await selector.select_and_validate()
    except ChatBridgeError as e:
        out.write(f"{render_error(e)}\n")
        return 1
    out.write(f"{client.name} configuration OK\n")
    return 0


async def chat_loop(session: ChatSession, lines: TextIO, out: TextIO) -> int:
    """Read prompts from *lines* until EOF or a quit command."""
    while True:
        out.write("> ")
        out.flush()
        line = await asyncio.to_thread(lines.readline)
        if not line or line.strip() in QUIT_COMMANDS:
            return 0
        reply = await session.send(line)
        if reply is not None:
            out.write(f"{reply.content}\n")


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.env:
        print_env(sys.stdout)
        return 0

    selector = ServiceSelector(store=JsonSettingsStore(args.settings))
    if args.check:
        return asyncio.run(check(selector, sys.stdout))
    return asyncio.run(chat_loop(ChatSession(selector), sys.stdin, sys.stdout))


if __name__ == "__main__":
    raise SystemExit(main())
