"""Map stage outputs onto the terminal ``AnalysisResult``."""

from __future__ import annotations

from fixscout_core.models import AnalysisResult, Candidate, Clarification
from fixscout_core.stages.release_range import RangeProblem
from fixscout_core.stages.scan import ScanOutcome


def from_clarification(clarification: Clarification) -> AnalysisResult:
    return AnalysisResult("clarification", clarification.message)


def from_linked_candidate(candidate: Candidate) -> AnalysisResult:
    return AnalysisResult("high_confidence", candidates=(candidate,))


def from_range_problem(problem: RangeProblem) -> AnalysisResult:
    return AnalysisResult(problem.kind, problem.message)


def from_scan(outcome: ScanOutcome) -> AnalysisResult:
    if outcome.kind == "high_confidence":
        return AnalysisResult("high_confidence", candidates=outcome.candidates)
    if outcome.kind == "medium":
        return AnalysisResult("medium_confidence", candidates=outcome.candidates)
    return AnalysisResult("no_result")
