from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from fixscout_core.gh.links import pr_link
from fixscout_core.models import Candidate, SkippedLink
from fixscout_core.stages.confidence import assess_pull_request
from fixscout_core.versions import version_after

if TYPE_CHECKING:
    from fixscout_core.gh.client import GitHubClient
    from fixscout_core.providers.base import BaseOracle

logger = logging.getLogger(__name__)

NO_RESOLUTION = "no merged pull request with a release was found"


class _Skip(Exception):
    """A link that could not be checked; the message is the recorded reason."""


@dataclass(frozen=True)
class LinkHit:
    """A link resolved to a verified fix; ``skipped`` holds the links checked before it that failed."""

    candidate: Candidate
    skipped: tuple[SkippedLink, ...] = ()


@dataclass(frozen=True)
class LinkFallthrough:
    """No link produced a confirmed fix; the scan should run."""

    skipped: tuple[SkippedLink, ...] = ()


def check_linked_issues(
    github: GitHubClient,
    oracle: BaseOracle,
    links: tuple[str, ...] | list[str],
    version: str,
    repo: str,
    problem: str,
    text: str,
) -> LinkHit | LinkFallthrough:
    """Try each referenced issue/PR in order; return the first verified high-confidence fix."""
    skipped: list[SkippedLink] = []
    for url in links:
        try:
            candidate = _check_link(github, oracle, url, version, repo, problem, text)
        except _Skip as skip:
            skipped.append(SkippedLink(url, str(skip)))
            continue
        except Exception as e:
            logger.warning("Could not check link %s: %s", url, e)
            skipped.append(SkippedLink(url, str(e) or type(e).__name__))
            continue
        if candidate is not None:
            return LinkHit(candidate, tuple(skipped))
    return LinkFallthrough(tuple(skipped))


def _check_link(
    github: GitHubClient,
    oracle: BaseOracle,
    url: str,
    version: str,
    repo: str,
    problem: str,
    text: str,
) -> Candidate | None:
    resolution = github.resolve_issue_link(url)
    if resolution is None:
        logger.warning("Could not check link %s: %s", url, NO_RESOLUTION)
        raise _Skip(NO_RESOLUTION)

    if not version_after(resolution.fixed_in_version, version):
        logger.debug(
            "Link %s was fixed in %s, not after the reported %s",
            url,
            resolution.fixed_in_version,
            version,
        )
        return None

    pr_repo = resolution.repo or repo
    pr = github.get_pull_request(pr_repo, resolution.pr_number)
    if pr is None:
        logger.warning("Could not check link %s: PR #%d not found", url, resolution.pr_number)
        raise _Skip(f"PR #{resolution.pr_number} not found in {pr_repo}")

    assessment = assess_pull_request(oracle, pr, problem, text)
    if assessment.tier != "high":
        logger.debug("Link %s resolved to PR #%d graded %s", url, pr.number, assessment.tier)
        return None

    return Candidate(
        version=resolution.fixed_in_version,
        pr_number=pr.number,
        pr_link=pr_link(pr_repo, pr.number),
        confidence="high",
        reason=assessment.reason,
    )
