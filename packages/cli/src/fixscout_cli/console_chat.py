"""Terminal stand-in for the chat collaborator.

Messages are rendered with rich instead of being posted anywhere. Progress
refreshes print only the newest step, so the terminal shows the trail as a
running log rather than redrawing the checklist.
"""

from __future__ import annotations

import itertools

from rich.console import Console
from rich.emoji import Emoji
from rich.markdown import Markdown
from rich.rule import Rule
from rich.text import Text

from fixscout_core.chat.base import ChatClient
from fixscout_core.formatting.blocks import Context, Divider, Message
from fixscout_core.models import ThreadMessage


class ConsoleChat(ChatClient):
    def __init__(self, console: Console | None = None):
        self.console = console or Console()
        self._ids = itertools.count(1)

    def post_message(self, content: Message) -> str | None:
        for block in content.blocks:
            if isinstance(block, Divider):
                self.console.print(Rule(style="dim"))
            elif isinstance(block, Context):
                self.console.print(Markdown(Emoji.replace(block.text)), style="dim")
            else:
                self.console.print(Markdown(Emoji.replace(block.text)))
        return str(next(self._ids))

    def update_message(self, message_id: str, content: Message) -> None:
        self.console.print(Text(f"  … {content.text}", style="dim"))

    def read_thread(self, channel: str, root_id: str) -> list[ThreadMessage]:
        return []
