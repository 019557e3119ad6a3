"""Data models shared by the analysis stages.

All models are frozen: a run creates them, passes them forward, and never
mutates them. Lists that grow during a run (candidates, skipped links,
progress steps) are rebuilt as new tuples instead of appended in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

ConfidenceLevel = Literal["high", "medium", "low"]

ResultKind = Literal[
    "clarification",
    "high_confidence",
    "medium_confidence",
    "no_result",
    "too_old",
    "already_latest",
    "invalid_version",
    "fetch_failed",
]


@dataclass(frozen=True)
class Release:
    """One published release of a repository."""

    tag: str
    name: str | None = None
    url: str = ""
    body: str | None = None


@dataclass(frozen=True)
class PullRequestDetails:
    number: int
    title: str
    body: str = ""
    merged: bool = False


@dataclass(frozen=True)
class IssueResolution:
    """The pull request that closed a linked issue and the release that shipped it.

    ``repo`` is the repository the link points at; None means "same as the
    repository under analysis".
    """

    fixed_in_version: str
    pr_number: int
    repo: str | None = None


@dataclass(frozen=True)
class ExtractedRequest:
    sdk: str
    version: str
    problem: str
    links: tuple[str, ...] = ()


@dataclass(frozen=True)
class Candidate:
    """A (version, pull request) pair believed to fix the reported problem."""

    version: str
    pr_number: int
    pr_link: str
    confidence: Literal["high", "medium"]
    reason: str


@dataclass(frozen=True)
class SkippedLink:
    url: str
    reason: str

    def describe(self) -> str:
        return f"Could not check link {self.url}: {self.reason}"


@dataclass(frozen=True)
class ThreadMessage:
    author: str
    text: str
    ts: str = ""


@dataclass(frozen=True)
class AnalysisResult:
    """Terminal outcome of one analysis run."""

    kind: ResultKind
    message: str = ""
    candidates: tuple[Candidate, ...] = field(default_factory=tuple)

    @property
    def best(self) -> Candidate | None:
        """The representative candidate: the first one in scan order."""
        return self.candidates[0] if self.candidates else None

    @property
    def version(self) -> str | None:
        return self.best.version if self.best else None

    @property
    def pr_number(self) -> int | None:
        return self.best.pr_number if self.best else None


@dataclass(frozen=True)
class Clarification:
    """The report is missing something only the user can supply."""

    message: str
