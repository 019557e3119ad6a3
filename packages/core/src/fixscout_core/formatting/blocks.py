"""Channel-neutral message layout.

A message is a list of three block kinds (section text, context/footnote
text, divider) plus a plain-text fallback. Block text uses neutral
Markdown: ``**bold**``, ``[label](url)`` and backticks. Delivery adapters
translate it to their own markup.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Section:
    text: str


@dataclass(frozen=True)
class Context:
    text: str


@dataclass(frozen=True)
class Divider:
    pass


Block = Union[Section, Context, Divider]


@dataclass(frozen=True)
class Message:
    blocks: tuple[Block, ...]
    text: str

    def to_markdown(self) -> str:
        """Flatten the blocks to one Markdown string (for logs and plain-text channels)."""
        parts = []
        for block in self.blocks:
            if isinstance(block, Divider):
                parts.append("---")
            else:
                parts.append(block.text)
        return "\n\n".join(parts)
