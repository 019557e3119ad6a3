from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from fixscout_core.models import Release
from fixscout_core.versions import display_version, is_stable, parse_version, sort_key, stable_span, version_after

if TYPE_CHECKING:
    from fixscout_core.gh.client import GitHubClient

logger = logging.getLogger(__name__)

RangeProblemKind = Literal["already_latest", "too_old", "invalid_version", "fetch_failed"]

FETCH_FAILED_MESSAGE = "Unable to fetch releases. Deferring to SDK maintainers for investigation."
INVALID_VERSION_MESSAGE = "Could not find the reported version. Please verify the version is correct."
ALREADY_LATEST_MESSAGE = (
    "No releases found after the reported version. You may already be on the latest stable release."
)


@dataclass(frozen=True)
class ReleaseRange:
    """Stable releases strictly after the reported version, oldest first."""

    releases: tuple[Release, ...]

    @property
    def first(self) -> Release:
        return self.releases[0]

    @property
    def last(self) -> Release:
        return self.releases[-1]


@dataclass(frozen=True)
class RangeProblem:
    kind: RangeProblemKind
    message: str


def fetch_release_range(
    github: GitHubClient,
    repo: str,
    version: str,
    max_releases: int = 100,
) -> ReleaseRange | RangeProblem:
    if parse_version(version) is None:
        return RangeProblem("invalid_version", INVALID_VERSION_MESSAGE)

    try:
        all_releases = github.list_releases(repo)
    except Exception as e:
        logger.warning("Could not fetch releases for %s: %s", repo, e)
        return RangeProblem("fetch_failed", FETCH_FAILED_MESSAGE)

    newer = sorted(
        (r for r in all_releases if is_stable(r.tag) and version_after(r.tag, version)),
        key=lambda r: sort_key(r.tag),
    )
    logger.info("%d stable releases of %s after %s", len(newer), repo, version)

    if not newer:
        message = ALREADY_LATEST_MESSAGE
        span = stable_span([r.tag for r in all_releases])
        if span:
            oldest, newest = span
            message += (
                f" Known stable versions range from `{display_version(oldest)}` to `{display_version(newest)}`."
            )
        return RangeProblem("already_latest", message)

    if len(newer) > max_releases:
        return RangeProblem(
            "too_old",
            f"The reported version is too old: there are more than {max_releases} releases since then. "
            "Unable to look this up efficiently.",
        )

    return ReleaseRange(tuple(newer))
