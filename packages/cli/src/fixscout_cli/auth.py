"""Credential lookup for the CLI.

The GitHub token is taken from the first source that has one: the
GITHUB_TOKEN environment variable, then the GitHub CLI session
(`gh auth token`). Without a token the release scan runs into the
unauthenticated rate limit almost immediately.

The Slack bot token only ever comes from SLACK_BOT_TOKEN.
"""

from __future__ import annotations

import logging
import os
import subprocess

logger = logging.getLogger(__name__)

_GH_TIMEOUT_SECONDS = 5


def _env_github_token() -> str | None:
    return os.environ.get("GITHUB_TOKEN") or None


def _gh_session_token() -> str | None:
    try:
        completed = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=_GH_TIMEOUT_SECONDS,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        logger.debug("No gh CLI session to borrow a token from: %r", e)
        return None
    if completed.returncode != 0:
        logger.debug("`gh auth token` exited with status %d", completed.returncode)
        return None
    return completed.stdout.strip() or None


_GITHUB_TOKEN_SOURCES = (_env_github_token, _gh_session_token)


def resolve_github_token() -> str | None:
    """Return a GitHub token, or None when no source has one. Never raises."""
    for source in _GITHUB_TOKEN_SOURCES:
        token = source()
        if token:
            logger.debug("GitHub token taken from %s", source.__name__.strip("_"))
            return token
    return None


def resolve_slack_token() -> str | None:
    token = os.environ.get("SLACK_BOT_TOKEN") or None
    if token and not token.startswith("xoxb-"):
        logger.warning("SLACK_BOT_TOKEN does not look like a bot token (expected an xoxb- prefix)")
    return token
