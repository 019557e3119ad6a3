"""Chat collaborator interface.

The pipeline only ever posts a message, updates a message it posted, and
reads a thread. Any chat backend (Slack, the terminal, a test double)
implements these three calls.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from fixscout_core.formatting.builders import error_message

if TYPE_CHECKING:
    from fixscout_core.formatting.blocks import Message
    from fixscout_core.models import ThreadMessage

logger = logging.getLogger(__name__)


class ChatClient(ABC):
    @abstractmethod
    def post_message(self, content: Message) -> str | None:
        """Post a new message and return its id, or None if the backend has no ids."""

    @abstractmethod
    def update_message(self, message_id: str, content: Message) -> None:
        """Replace the content of a previously posted message."""

    @abstractmethod
    def read_thread(self, channel: str, root_id: str) -> list[ThreadMessage]:
        """Return the thread's messages, oldest first."""


def format_thread(messages: list[ThreadMessage]) -> str:
    """Render a thread as ``author: text`` paragraphs, oldest first."""
    ordered = sorted(messages, key=lambda m: m.ts)
    return "\n\n".join(f"{m.author}: {m.text.strip()}" for m in ordered if m.text.strip())


def read_thread_context(chat: ChatClient, channel: str, root_id: str, fallback: str) -> str:
    """Return the formatted thread, or ``fallback`` (the triggering text) if it cannot be read."""
    try:
        context = format_thread(chat.read_thread(channel, root_id))
    except Exception as e:
        logger.warning("Could not read thread %s in %s, using the triggering message: %s", root_id, channel, e)
        return fallback
    return context or fallback


@contextmanager
def failure_notice(chat: ChatClient) -> Iterator[None]:
    """Post one "Something went wrong" message if the block raises, then re-raise."""
    try:
        yield
    except Exception as e:
        summary = (str(e) or type(e).__name__).split("\n")[0].strip()
        logger.error("Analysis failed: %s", summary)
        chat.post_message(error_message(summary))
        raise
