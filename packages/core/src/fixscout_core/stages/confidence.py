"""Two-pass confidence grading of a single pull request.

A PR is only ever graded high after an independent verification question
agrees with the first score. A high score that fails verification is kept
as a medium candidate, carrying the verifier's reason.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from fixscout_core.models import ConfidenceLevel

if TYPE_CHECKING:
    from fixscout_core.models import PullRequestDetails
    from fixscout_core.providers.base import BaseOracle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Assessment:
    tier: ConfidenceLevel
    reason: str


def assess_pull_request(oracle: BaseOracle, pr: PullRequestDetails, problem: str, text: str) -> Assessment:
    score = oracle.score_confidence(pr.title, pr.body, problem, text)
    if score.level != "high":
        logger.debug("PR #%d scored %s: %s", pr.number, score.level, score.reason)
        return Assessment(score.level, score.reason)

    verdict = oracle.verify_match(pr.title, pr.body, problem, text)
    if verdict.confirmed:
        logger.info("PR #%d confirmed as a high-confidence fix", pr.number)
        return Assessment("high", score.reason)

    logger.info("PR #%d scored high but was not confirmed: %s", pr.number, verdict.reason)
    return Assessment("medium", verdict.reason)
