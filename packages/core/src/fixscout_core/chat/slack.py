"""Slack Web API adapter for the chat collaborator.

Posts go to one channel (optionally inside one thread). Block text arrives
as neutral Markdown and is converted to Slack mrkdwn here, so nothing
upstream knows Slack's link or bold syntax.
"""

from __future__ import annotations

import logging
import re

import requests

from fixscout_core.chat.base import ChatClient
from fixscout_core.formatting.blocks import Context, Divider, Message, Section
from fixscout_core.models import ThreadMessage

logger = logging.getLogger(__name__)

SLACK_API_URL = "https://slack.com/api"

# Slack rejects section/context text longer than this.
_MAX_BLOCK_TEXT = 3_000
_REPLIES_PAGE_SIZE = 200

_LINK_RE = re.compile(r"\[([^\]]+)\]\((https?://[^)\s]+)\)")
_BOLD_RE = re.compile(r"\*\*(.+?)\*\*", re.DOTALL)


class SlackError(RuntimeError):
    """Slack answered a Web API call with ``ok: false``."""


def to_mrkdwn(text: str) -> str:
    """Convert neutral Markdown (``**bold**``, ``[label](url)``) to Slack mrkdwn."""
    text = _LINK_RE.sub(r"<\2|\1>", text)
    return _BOLD_RE.sub(r"*\1*", text)


def to_slack_blocks(content: Message) -> list[dict]:
    blocks = []
    for block in content.blocks:
        if isinstance(block, Divider):
            blocks.append({"type": "divider"})
            continue
        text = to_mrkdwn(block.text)[:_MAX_BLOCK_TEXT]
        if isinstance(block, Section):
            blocks.append({"type": "section", "text": {"type": "mrkdwn", "text": text}})
        elif isinstance(block, Context):
            blocks.append({"type": "context", "elements": [{"type": "mrkdwn", "text": text}]})
    return blocks


class SlackChat(ChatClient):
    def __init__(
        self,
        token: str,
        channel: str,
        thread_ts: str | None = None,
        session: requests.Session | None = None,
        timeout: float = 10.0,
    ):
        self.channel = channel
        self.thread_ts = thread_ts
        self._timeout = timeout
        self._session = session if session is not None else requests.Session()
        self._session.headers.update({"Authorization": f"Bearer {token}"})

    def post_message(self, content: Message) -> str | None:
        payload = {"channel": self.channel, "blocks": to_slack_blocks(content), "text": content.text}
        if self.thread_ts:
            payload["thread_ts"] = self.thread_ts
        return self._call("chat.postMessage", json=payload).get("ts")

    def update_message(self, message_id: str, content: Message) -> None:
        self._call(
            "chat.update",
            json={
                "channel": self.channel,
                "ts": message_id,
                "blocks": to_slack_blocks(content),
                "text": content.text,
            },
        )

    def read_thread(self, channel: str, root_id: str) -> list[ThreadMessage]:
        raw: list[dict] = []
        cursor = None
        while True:
            params = {"channel": channel, "ts": root_id, "limit": _REPLIES_PAGE_SIZE}
            if cursor:
                params["cursor"] = cursor
            data = self._call("conversations.replies", params=params)
            for msg in data.get("messages") or []:
                text = (msg.get("text") or "").strip()
                if text and msg.get("ts"):
                    raw.append(msg)
            cursor = (data.get("response_metadata") or {}).get("next_cursor")
            if not cursor:
                break

        names = self._user_names({m["user"] for m in raw if m.get("user")})
        messages = [
            ThreadMessage(
                author=names.get(m.get("user"), m.get("user")) if m.get("user") else "Unknown",
                text=m["text"].strip(),
                ts=m["ts"],
            )
            for m in raw
        ]
        return sorted(messages, key=lambda m: m.ts)

    def _user_names(self, user_ids: set[str]) -> dict[str, str]:
        names: dict[str, str] = {}
        for uid in sorted(user_ids):
            try:
                user = self._call("users.info", params={"user": uid}).get("user") or {}
            except (SlackError, requests.RequestException) as e:
                # A missing users:read scope only costs us display names.
                logger.debug("Could not look up Slack user %s: %s", uid, e)
                names[uid] = uid
                continue
            profile = user.get("profile") or {}
            names[uid] = user.get("real_name") or profile.get("real_name") or user.get("name") or uid
        return names

    def _call(self, method: str, json: dict | None = None, params: dict | None = None) -> dict:
        url = f"{SLACK_API_URL}/{method}"
        if json is not None:
            response = self._session.post(url, json=json, timeout=self._timeout)
        else:
            response = self._session.get(url, params=params, timeout=self._timeout)
        response.raise_for_status()
        data = response.json()
        if not data.get("ok"):
            raise SlackError(f"Slack {method} failed: {data.get('error', 'unknown_error')}")
        return data
