"""Release-note scanner.

Releases are scanned oldest first, in fixed-size batches, one oracle call
per batch to pick out the relevant lines. Every line that points at a PR is
graded (see ``stages.confidence``). The scan is a fold over batches, and
each batch is a fold over its entries; both stop early once a verified
high-confidence fix has been found, so the first confirmed hit is also the
earliest fixed-in version.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Literal, Optional

from fixscout_core.config import AnalysisSettings
from fixscout_core.gh.links import extract_pr_number, pr_link
from fixscout_core.models import Candidate, Release
from fixscout_core.stages.confidence import assess_pull_request
from fixscout_core.stages.fold import fold_until
from fixscout_core.versions import parse_version

if TYPE_CHECKING:
    from fixscout_core.gh.client import GitHubClient
    from fixscout_core.providers.base import BaseOracle
    from fixscout_core.providers.schemas import RelevantEntry

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


@dataclass(frozen=True)
class ScanState:
    high: tuple[Candidate, ...] = ()
    medium: tuple[Candidate, ...] = ()
    evaluated: tuple[int, ...] = ()
    releases_done: int = 0


@dataclass(frozen=True)
class ScanOutcome:
    kind: Literal["high_confidence", "medium", "no_result"]
    candidates: tuple[Candidate, ...] = ()
    evaluated_prs: tuple[int, ...] = ()
    releases_scanned: int = 0


def batches(releases: tuple[Release, ...] | list[Release], size: int) -> Iterator[tuple[Release, ...]]:
    for start in range(0, len(releases), size):
        yield tuple(releases[start : start + size])


def release_notes_text(batch: tuple[Release, ...]) -> str:
    return "\n\n".join(f"## {r.tag}\n{r.body or ''}" for r in batch)


def scan_release_notes(
    oracle: BaseOracle,
    github: GitHubClient,
    releases: tuple[Release, ...] | list[Release],
    problem: str,
    repo: str,
    text: str,
    settings: Optional[AnalysisSettings] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> ScanOutcome:
    settings = settings or AnalysisSettings()
    total = len(releases)

    def high_found(state: ScanState) -> bool:
        return bool(state.high)

    def high_capped(state: ScanState) -> bool:
        return len(state.high) >= settings.max_high_candidates

    def scan_entry(batch: tuple[Release, ...], state: ScanState, entry: RelevantEntry) -> ScanState:
        pr_number = extract_pr_number(entry.pr_reference) or extract_pr_number(entry.line)
        if pr_number is None:
            logger.debug("No PR reference in relevant line %r", entry.line[:120])
            return state
        if pr_number in state.evaluated:
            logger.debug("PR #%d already evaluated", pr_number)
            return state
        state = replace(state, evaluated=state.evaluated + (pr_number,))

        pr = github.get_pull_request(repo, pr_number)
        if pr is None:
            return state

        assessment = assess_pull_request(oracle, pr, problem, text)
        if assessment.tier == "low":
            return state

        candidate = Candidate(
            version=_release_tag(batch, entry.release),
            pr_number=pr_number,
            pr_link=pr_link(repo, pr_number),
            confidence=assessment.tier,
            reason=assessment.reason,
        )
        if assessment.tier == "high":
            return replace(state, high=state.high + (candidate,))
        if len(state.medium) >= settings.max_medium_candidates:
            logger.debug("Medium candidate cap reached, dropping PR #%d", pr_number)
            return state
        return replace(state, medium=state.medium + (candidate,))

    def scan_batch(state: ScanState, batch: tuple[Release, ...]) -> ScanState:
        logger.info("Scanning releases %s to %s", batch[0].tag, batch[-1].tag)
        entries = oracle.filter_relevant_entries(release_notes_text(batch), problem, text)
        state = fold_until(lambda s, e: scan_entry(batch, s, e), entries, state, high_capped)
        state = replace(state, releases_done=state.releases_done + len(batch))
        if on_progress is not None:
            on_progress(state.releases_done, total)
        return state

    final = fold_until(scan_batch, batches(releases, settings.batch_size), ScanState(), high_found)

    if final.high:
        return ScanOutcome("high_confidence", final.high, final.evaluated, final.releases_done)
    if final.medium:
        return ScanOutcome("medium", final.medium, final.evaluated, final.releases_done)
    return ScanOutcome("no_result", (), final.evaluated, final.releases_done)


def _release_tag(batch: tuple[Release, ...], name: str) -> str:
    """Map the oracle's release label back to the batch's tag, when they denote the same version."""
    wanted = parse_version(name)
    for release in batch:
        if release.tag == name or (wanted is not None and parse_version(release.tag) == wanted):
            return release.tag
    return name
