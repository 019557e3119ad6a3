from __future__ import annotations

import re

_PR_NUMBER_RE = re.compile(r"(?:#|/pull/)(\d+)")
_GITHUB_LINK_RE = re.compile(
    r"^https?://(?:www\.)?github\.com/(?P<owner>[\w.-]+)/(?P<name>[\w.-]+)/(?P<kind>issues|pull)/(?P<number>\d+)"
)
_REPO_SLUG_RE = re.compile(r"^[\w.-]+/[\w.-]+$")


def pr_link(repo: str, pr_number: int) -> str:
    return f"https://github.com/{repo}/pull/{pr_number}"


def extract_pr_number(text: str | None) -> int | None:
    """Return the first ``#<digits>`` (or ``/pull/<digits>``) reference in ``text``, or None."""
    if not text:
        return None
    match = _PR_NUMBER_RE.search(text)
    return int(match.group(1)) if match else None


def parse_github_link(url: str) -> tuple[str, str, int] | None:
    """Split a GitHub issue/PR URL into (repo, "issues" | "pull", number)."""
    match = _GITHUB_LINK_RE.match(url.strip())
    if not match:
        return None
    repo = f"{match.group('owner')}/{match.group('name')}"
    return repo, match.group("kind"), int(match.group("number"))


def is_repo_slug(value: str | None) -> bool:
    return bool(value) and bool(_REPO_SLUG_RE.match(value.strip()))


def mentions_pr(release_body: str | None, repo: str, pr_number: int) -> bool:
    """True if release notes reference the PR by ``#n`` or by its URL."""
    if not release_body:
        return False
    if re.search(rf"#{pr_number}(?!\d)", release_body):
        return True
    return f"github.com/{repo}/pull/{pr_number}" in release_body
