"""Issue-resolution pipeline driver.

    extract → resolve repo → linked issues → release range → scan → render

Each stage is a function from ``RunState`` to ``RunState``. A stage that
reaches a terminal outcome sets ``RunState.result``; the driver folds the
stages left to right and stops at the first one that does. Progress steps
are appended as stages begin and the final message is posted once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Optional

from fixscout_core.chat.base import ChatClient
from fixscout_core.config import AnalysisSettings
from fixscout_core.formatting.builders import RunTrace, render_result
from fixscout_core.formatting.progress import ProgressReporter
from fixscout_core.gh.client import GitHubClient
from fixscout_core.lookups import maintainer_mention
from fixscout_core.models import AnalysisResult, Clarification, ExtractedRequest, Release
from fixscout_core.providers.anthropic import AnthropicOracle
from fixscout_core.providers.base import BaseOracle
from fixscout_core.providers.openai import OpenAIOracle
from fixscout_core.stages import aggregate
from fixscout_core.stages.extract import extract_request
from fixscout_core.stages.fold import fold_until
from fixscout_core.stages.linked import LinkFallthrough, check_linked_issues
from fixscout_core.stages.release_range import RangeProblem, fetch_release_range
from fixscout_core.stages.resolve import resolve_repository
from fixscout_core.stages.scan import scan_release_notes
from fixscout_core.versions import display_version

logger = logging.getLogger(__name__)


def get_oracle(config: dict) -> BaseOracle:
    model = config["model"]
    if model == "anthropic":
        return AnthropicOracle(api_key=config["anthropic_api_key"])
    if model == "openai":
        return OpenAIOracle(api_key=config["openai_api_key"])
    raise ValueError(f"Unknown model provider: {model!r}. Choose 'anthropic' or 'openai'.")


@dataclass(frozen=True)
class RunState:
    """Everything one run has learned so far."""

    text: str
    request: Optional[ExtractedRequest] = None
    repo: Optional[str] = None
    releases: tuple[Release, ...] = ()
    trace: RunTrace = field(default_factory=RunTrace)
    result: Optional[AnalysisResult] = None


def _finished(state: RunState) -> bool:
    return state.result is not None


class Analyzer:
    def __init__(
        self,
        oracle: BaseOracle,
        github: GitHubClient,
        chat: ChatClient,
        settings: Optional[AnalysisSettings] = None,
    ):
        self.oracle = oracle
        self.github = github
        self.chat = chat
        self.settings = settings or AnalysisSettings()

    def run(self, report_text: str, thread_context: Optional[str] = None) -> AnalysisResult:
        """Run the pipeline once and post the rendered result to the chat.

        ``thread_context`` is the whole conversation the report came from;
        when present it is what the stages read, since it includes the
        report itself.
        """
        text = thread_context.strip() if thread_context and thread_context.strip() else report_text
        reporter = ProgressReporter(self.chat)
        try:
            stages = (
                self._extract,
                self._resolve,
                self._check_links,
                self._fetch_range,
                self._scan,
            )
            state = fold_until(lambda s, stage: stage(s, reporter), stages, RunState(text=text), _finished)
            reporter.finish()
        finally:
            reporter.close()

        result = state.result
        logger.info("Analysis finished: %s", result.kind)

        mention = maintainer_mention(state.repo, self.settings.maintainers) if state.repo else None
        message = render_result(result, state.trace, mention, self.settings.displayed_medium_candidates)
        self.chat.post_message(message)
        if not result.message:
            result = replace(result, message=message.text)
        return result

    # ------------------------------------------------------------------ #
    # Stages                                                               #
    # ------------------------------------------------------------------ #

    def _extract(self, state: RunState, reporter: ProgressReporter) -> RunState:
        request = extract_request(self.oracle, state.text)
        if isinstance(request, Clarification):
            reporter.advance(request.message)
            return replace(state, result=aggregate.from_clarification(request))
        return replace(state, request=request, trace=replace(state.trace, version=request.version))

    def _resolve(self, state: RunState, reporter: ProgressReporter) -> RunState:
        repo = resolve_repository(self.oracle, state.request.sdk, state.text, self.settings.sdk_repositories)
        if isinstance(repo, Clarification):
            reporter.advance(repo.message)
            return replace(state, result=aggregate.from_clarification(repo))
        return replace(state, repo=repo, trace=replace(state.trace, repo=repo))

    def _check_links(self, state: RunState, reporter: ProgressReporter) -> RunState:
        request = state.request
        if not request.links:
            return state

        reporter.advance("Checking linked issues…")
        outcome = check_linked_issues(
            self.github,
            self.oracle,
            request.links,
            request.version,
            state.repo,
            request.problem,
            state.text,
        )
        skipped = tuple(s.describe() for s in outcome.skipped)
        trace = replace(state.trace, skipped_steps=state.trace.skipped_steps + skipped)
        if isinstance(outcome, LinkFallthrough):
            return replace(state, trace=trace)

        candidate = outcome.candidate
        trace = replace(
            trace,
            first_release=candidate.version,
            last_release=candidate.version,
            release_count=1,
            evaluated_prs=(candidate.pr_number,),
        )
        return replace(state, trace=trace, result=aggregate.from_linked_candidate(candidate))

    def _fetch_range(self, state: RunState, reporter: ProgressReporter) -> RunState:
        version = state.request.version
        reporter.advance(f"Resolving releases for {state.repo} after {display_version(version)}…")
        fetched = fetch_release_range(self.github, state.repo, version, self.settings.max_releases)
        if isinstance(fetched, RangeProblem):
            logger.info("Release range for %s after %s: %s", state.repo, version, fetched.kind)
            trace = state.trace
            if fetched.kind in ("too_old", "already_latest"):
                trace = replace(trace, release_count=0)
            return replace(state, trace=trace, result=aggregate.from_range_problem(fetched))

        trace = replace(
            state.trace,
            first_release=fetched.first.tag,
            last_release=fetched.last.tag,
            release_count=len(fetched.releases),
        )
        return replace(state, releases=fetched.releases, trace=trace)

    def _scan(self, state: RunState, reporter: ProgressReporter) -> RunState:
        releases = state.releases
        reporter.advance(
            f"Scanning releases `{display_version(releases[0].tag)}`–`{display_version(releases[-1].tag)}` "
            f"(`{len(releases)}` releases)…"
        )

        def on_progress(done: int, total: int) -> None:
            reporter.advance(f"Scanned `{done}` of `{total}` releases…")

        request = state.request
        outcome = scan_release_notes(
            self.oracle,
            self.github,
            releases,
            request.problem,
            state.repo,
            state.text,
            self.settings,
            on_progress,
        )
        result = aggregate.from_scan(outcome)

        trace = replace(state.trace, evaluated_prs=outcome.evaluated_prs, release_count=outcome.releases_scanned)
        if result.kind == "high_confidence":
            trace = replace(trace, last_release=result.candidates[-1].version)
        return replace(state, trace=trace, result=result)


def run_analysis(
    report_text: str,
    thread_context: Optional[str] = None,
    *,
    oracle: BaseOracle,
    github: GitHubClient,
    chat: ChatClient,
    settings: Optional[AnalysisSettings] = None,
) -> AnalysisResult:
    """Analyze one report, posting progress and the final answer to ``chat``."""
    return Analyzer(oracle, github, chat, settings).run(report_text, thread_context)
