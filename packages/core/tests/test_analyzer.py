"""End-to-end tests for the pipeline driver with deterministic collaborators."""

from unittest.mock import MagicMock

import pytest

from fixscout_core.analyzer import Analyzer, run_analysis
from fixscout_core.chat.base import ChatClient
from fixscout_core.config import AnalysisSettings
from fixscout_core.formatting.progress import FINAL_LABEL
from fixscout_core.models import IssueResolution, PullRequestDetails, Release
from fixscout_core.providers.base import BaseOracle, OracleError
from fixscout_core.providers.schemas import (
    ConfidenceAnswer,
    ExtractionAnswer,
    RelevantEntry,
    VerificationAnswer,
)

REPORT = "sentry-cocoa 1.0.0: app crashes when the network drops"


class _FakeOracle(BaseOracle):
    """Deterministic oracle: every question is answered from constructor arguments."""

    def __init__(self, extraction, entries=(), grades=None, rejected=(), repository=None):
        self.extraction = extraction
        self.entries = list(entries)
        self.grades = grades or {}
        self.rejected = set(rejected)
        self.repository = repository
        self.filter_calls = 0

    def _call_api(self, system_prompt, user_prompt):
        raise AssertionError("the fake oracle never calls an API")

    def extract_request(self, text):
        return self.extraction

    def resolve_repository(self, text):
        return self.repository

    def filter_relevant_entries(self, release_notes, problem, text):
        self.filter_calls += 1
        return [e for e in self.entries if f"## {e.release}\n" in release_notes]

    def score_confidence(self, pr_title, pr_body, problem, text):
        number = int(pr_title.split("-")[1])
        return ConfidenceAnswer(level=self.grades.get(number, "low"), reason=f"score {number}")

    def verify_match(self, pr_title, pr_body, problem, text):
        number = int(pr_title.split("-")[1])
        return VerificationAnswer(confirmed=number not in self.rejected, reason=f"verify {number}")


class _FakeChat(ChatClient):
    def __init__(self):
        self.posted = []
        self.updates = []

    def post_message(self, content):
        self.posted.append(content)
        return f"ts-{len(self.posted)}"

    def update_message(self, message_id, content):
        self.updates.append(content.text)

    def read_thread(self, channel, root_id):
        return []


def _github(tags=(), resolutions=None):
    github = MagicMock()
    github.list_releases.return_value = [Release(tag=t, body=f"notes for {t}") for t in tags]
    github.get_pull_request.side_effect = lambda repo, n: PullRequestDetails(n, f"pr-{n}", merged=True)
    github.resolve_issue_link.side_effect = lambda url: (resolutions or {}).get(url)
    return github


def _extraction(version="1.0.0", links=(), sdk="sentry-cocoa"):
    return ExtractionAnswer(sdk=sdk, version=version, problem="crash when the network drops", links=list(links))


def _final(chat):
    """The last posted message is the result; the first is the progress trail."""
    return chat.posted[-1]


class TestScenarios:
    def test_a_single_verified_fix(self):
        oracle = _FakeOracle(
            _extraction(),
            entries=[RelevantEntry(release="1.1.0", line="- Fix crash on network loss (#10)", pr_reference="#10")],
            grades={10: "high"},
        )
        chat = _FakeChat()

        result = run_analysis(REPORT, oracle=oracle, github=_github(["1.0.0", "1.1.0"]), chat=chat)

        assert result.kind == "high_confidence"
        assert result.version == "1.1.0"
        assert result.pr_number == 10
        assert "Fixed in 1.1.0" in result.message
        assert "Fixed in 1.1.0" in _final(chat).to_markdown()

    def test_b_linked_fix_not_after_reported_version_falls_through(self):
        link = "https://github.com/getsentry/sentry-cocoa/issues/1"
        github = _github(["1.0.0", "1.1.0"], {link: IssueResolution("1.0.0", 5)})
        oracle = _FakeOracle(_extraction(links=[link]))
        chat = _FakeChat()

        result = run_analysis(REPORT, oracle=oracle, github=github, chat=chat)

        github.list_releases.assert_called_with("getsentry/sentry-cocoa")
        assert oracle.filter_calls == 1
        assert result.kind == "no_result"
        assert "Skipped steps" not in _final(chat).to_markdown()
        assert "Checking linked issues…" in chat.updates

    def test_c_already_latest_reports_stable_span(self):
        oracle = _FakeOracle(_extraction(version="2.19.2"))
        chat = _FakeChat()

        result = run_analysis(
            REPORT, oracle=oracle, github=_github(["1.0.0", "2.0.0", "2.19.2", "3.0.0-beta.1"]), chat=chat
        )

        assert result.kind == "already_latest"
        assert "`1.0.0`" in result.message
        assert "`2.19.2`" in result.message

    def test_d_invalid_version(self):
        github = _github(["1.0.0"])
        result = run_analysis(REPORT, oracle=_FakeOracle(_extraction(version="banana")), github=github, chat=_FakeChat())
        assert result.kind == "invalid_version"
        github.list_releases.assert_not_called()


class TestPipeline:
    def test_missing_version_asks_for_clarification(self):
        github = _github()
        chat = _FakeChat()

        result = run_analysis(REPORT, oracle=_FakeOracle(_extraction(version=None)), github=github, chat=chat)

        assert result.kind == "clarification"
        assert "version" in result.message
        github.list_releases.assert_not_called()
        assert result.message in chat.updates

    def test_unknown_sdk_asks_for_repository(self):
        oracle = _FakeOracle(_extraction(sdk="mystery-sdk"), repository=None)
        result = run_analysis(REPORT, oracle=oracle, github=_github(), chat=_FakeChat())
        assert result.kind == "clarification"
        assert "mystery-sdk" in result.message

    def test_linked_issue_short_circuits_scan(self):
        link = "https://github.com/getsentry/sentry-cocoa/pull/42"
        github = _github(["1.1.0"], {link: IssueResolution("v1.2.0", 42, repo="getsentry/sentry-cocoa")})
        oracle = _FakeOracle(_extraction(links=[link]), grades={42: "high"})

        result = run_analysis(REPORT, oracle=oracle, github=github, chat=_FakeChat())

        assert result.kind == "high_confidence"
        assert result.version == "v1.2.0"
        assert result.pr_number == 42
        github.list_releases.assert_not_called()
        assert oracle.filter_calls == 0

    def test_skipped_link_reported_in_footer(self):
        link = "https://github.com/getsentry/sentry-cocoa/issues/3"
        github = _github(["1.1.0"])
        github.resolve_issue_link.side_effect = RuntimeError("secondary rate limit")
        chat = _FakeChat()

        run_analysis(REPORT, oracle=_FakeOracle(_extraction(links=[link])), github=github, chat=chat)

        footer = _final(chat).to_markdown()
        assert f"Skipped steps: Could not check link {link}: secondary rate limit" in footer

    def test_skipped_link_kept_when_a_later_link_confirms(self):
        broken = "https://github.com/getsentry/sentry-cocoa/issues/3"
        fixed = "https://github.com/getsentry/sentry-cocoa/pull/42"

        def resolve(url):
            if url == broken:
                raise RuntimeError("secondary rate limit")
            return IssueResolution("1.2.0", 42)

        github = _github(["1.1.0"])
        github.resolve_issue_link.side_effect = resolve
        chat = _FakeChat()

        result = run_analysis(
            REPORT, oracle=_FakeOracle(_extraction(links=[broken, fixed]), grades={42: "high"}), github=github, chat=chat
        )

        assert result.kind == "high_confidence"
        footer = _final(chat).to_markdown()
        assert f"Skipped steps: Could not check link {broken}: secondary rate limit" in footer

    def test_low_scored_prs_listed_in_footer(self):
        entries = [
            RelevantEntry(release="1.1.0", line="- Retry on timeout (#1)", pr_reference="#1"),
            RelevantEntry(release="1.2.0", line="- Socket cleanup (#2)", pr_reference="#2"),
        ]
        chat = _FakeChat()

        result = run_analysis(
            REPORT, oracle=_FakeOracle(_extraction(), entries=entries), github=_github(["1.1.0", "1.2.0"]), chat=chat
        )

        assert result.kind == "no_result"
        footer = _final(chat).to_markdown()
        assert "Checked releases `1.1.0`–`1.2.0`" in footer
        assert (
            "Relevant PRs evaluated: [PR #1](https://github.com/getsentry/sentry-cocoa/pull/1), "
            "[PR #2](https://github.com/getsentry/sentry-cocoa/pull/2)"
        ) in footer

    def test_medium_result_shows_three_and_mentions_maintainers(self):
        entries = [
            RelevantEntry(release=f"1.{i}.0", line=f"- Network fix (#{i})", pr_reference=f"#{i}") for i in range(1, 5)
        ]
        oracle = _FakeOracle(_extraction(), entries=entries, grades={i: "medium" for i in range(1, 5)})
        chat = _FakeChat()
        tags = [f"1.{i}.0" for i in range(0, 8)]

        result = run_analysis(REPORT, oracle=oracle, github=_github(tags), chat=chat)

        assert result.kind == "medium_confidence"
        assert len(result.candidates) == 4
        rendered = _final(chat).to_markdown()
        assert "3. **1.3.0**" in rendered
        assert "4. **1.4.0**" not in rendered
        assert "@apple-sdk-maintainers" in rendered
        for n in range(1, 5):
            assert f"[PR #{n}](https://github.com/getsentry/sentry-cocoa/pull/{n})" in rendered

    def test_progress_trail_ends_with_done(self):
        chat = _FakeChat()
        oracle = _FakeOracle(_extraction(), entries=[], grades={})

        run_analysis(REPORT, oracle=oracle, github=_github(["1.1.0", "1.2.0"]), chat=chat)

        assert chat.updates[0].startswith("Resolving releases for getsentry/sentry-cocoa after 1.0.0")
        assert chat.updates[1].startswith("Scanning releases `1.1.0`–`1.2.0`")
        assert chat.updates[2] == "Scanned `2` of `2` releases…"
        assert chat.updates[-1] == FINAL_LABEL
        assert len(chat.posted) == 2

    def test_thread_context_is_what_the_stages_read(self):
        oracle = _FakeOracle(_extraction(version=None))
        oracle.extract_request = MagicMock(return_value=_extraction(version=None))

        Analyzer(oracle, _github(), _FakeChat()).run("@bot check this", thread_context="Ada: crash on 1.0.0")

        oracle.extract_request.assert_called_once_with("Ada: crash on 1.0.0")

    def test_unexpected_oracle_failure_propagates(self):
        oracle = _FakeOracle(_extraction())
        oracle.filter_relevant_entries = MagicMock(side_effect=OracleError("down"))
        chat = _FakeChat()

        with pytest.raises(OracleError):
            run_analysis(REPORT, oracle=oracle, github=_github(["1.1.0"]), chat=chat)
        assert len(chat.posted) == 1

    def test_custom_settings_are_used(self):
        oracle = _FakeOracle(_extraction())
        settings = AnalysisSettings(max_releases=1)

        result = run_analysis(REPORT, oracle=oracle, github=_github(["1.1.0", "1.2.0"]), chat=_FakeChat(), settings=settings)

        assert result.kind == "too_old"
