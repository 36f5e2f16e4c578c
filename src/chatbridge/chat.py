"""Chat transcript on top of the provider clients.

Every prompt is sent on its own: the transcript is for display, and no prior
turn is forwarded to the provider.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING

from chatbridge.errors import ChatBridgeError, ServiceError

if TYPE_CHECKING:
    from chatbridge.selector import ServiceSelector

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChatMessage:
    """One line of the transcript."""

    content: str
    is_user: bool
    is_error: bool = False


def render_error(exc: ChatBridgeError) -> str:
    """Format an error the way the transcript shows it."""
    if isinstance(exc, ServiceError):
        return f"Error: {exc.describe()}"
    return f"Error: {exc.message}"


class ChatSession:
    """Append-only transcript that routes each prompt through a selector."""

    def __init__(self, selector: ServiceSelector) -> None:
        self._selector = selector
        self._messages: list[ChatMessage] = []

    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        return tuple(self._messages)

    async def send(self, text: str) -> ChatMessage | None:
        """Send *text* and append the reply (or the error) to the transcript.

        Blank input is ignored and returns None.
        """
        prompt = text.strip()
        if not prompt:
            return None

        self._messages.append(ChatMessage(content=prompt, is_user=True))
        try:
            client = self._selector.select()
            reply = ChatMessage(content=await client.generate(prompt), is_user=False)
        except ChatBridgeError as e:
            log.info("Chat request failed: %s", e)
            reply = ChatMessage(content=render_error(e), is_user=False, is_error=True)
        self._messages.append(reply)
        return reply
