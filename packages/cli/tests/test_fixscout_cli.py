"""Tests for the CLI entry point."""

import subprocess
from unittest.mock import MagicMock

from click.testing import CliRunner

from fixscout_cli.auth import resolve_github_token, resolve_slack_token
from fixscout_cli.cli import main
from fixscout_cli.console_chat import ConsoleChat
from fixscout_core.formatting.blocks import Context, Divider, Message, Section
from fixscout_core.models import AnalysisResult, Release
from fixscout_core.stages.release_range import RangeProblem, ReleaseRange


def _make_config(model="anthropic", anthropic_key="ant", openai_key=None, slack_token=None):
    return {
        "model": model,
        "batch_size": 5,
        "max_releases": 100,
        "max_high_candidates": 3,
        "max_medium_candidates": 5,
        "displayed_medium_candidates": 3,
        "sdk_repositories": {},
        "maintainers": {},
        "github_token": "tok",
        "anthropic_api_key": anthropic_key,
        "openai_api_key": openai_key,
        "slack_bot_token": slack_token,
    }


def _patch_common(mocker, config=None, token="tok"):
    cfg = config or _make_config()
    mocker.patch("fixscout_core.config.load_config", return_value=cfg)
    mocker.patch("fixscout_cli.auth.resolve_github_token", return_value=token)
    mocker.patch("fixscout_core.analyzer.get_oracle", return_value=MagicMock())
    mocker.patch("fixscout_core.gh.client.GitHubClient", return_value=MagicMock())
    run = mocker.patch(
        "fixscout_core.analyzer.run_analysis",
        return_value=AnalysisResult("no_result", "No fix identified."),
    )
    return cfg, run


class TestAnalyzeValidation:
    def test_missing_github_token(self, mocker):
        _patch_common(mocker, token=None)
        result = CliRunner().invoke(main, ["analyze", "crash on 1.0.0"])
        assert result.exit_code != 0
        assert "GITHUB_TOKEN" in result.output

    def test_missing_anthropic_key(self, mocker):
        _patch_common(mocker, config=_make_config(anthropic_key=None))
        result = CliRunner().invoke(main, ["analyze", "crash on 1.0.0"])
        assert result.exit_code != 0
        assert "ANTHROPIC_API_KEY" in result.output

    def test_missing_openai_key(self, mocker):
        _patch_common(mocker, config=_make_config(model="openai"))
        result = CliRunner().invoke(main, ["analyze", "crash on 1.0.0"])
        assert result.exit_code != 0
        assert "OPENAI_API_KEY" in result.output

    def test_missing_report(self, mocker):
        _patch_common(mocker)
        result = CliRunner().invoke(main, ["analyze"])
        assert result.exit_code != 0
        assert "--file" in result.output

    def test_thread_requires_channel(self, mocker):
        _patch_common(mocker)
        result = CliRunner().invoke(main, ["analyze", "crash", "--thread", "1.0"])
        assert result.exit_code != 0
        assert "--channel" in result.output

    def test_channel_requires_slack_token(self, mocker, monkeypatch):
        monkeypatch.delenv("SLACK_BOT_TOKEN", raising=False)
        _patch_common(mocker)
        result = CliRunner().invoke(main, ["analyze", "crash", "--channel", "C1"])
        assert result.exit_code != 0
        assert "SLACK_BOT_TOKEN" in result.output


class TestAnalyzeRun:
    def test_runs_pipeline_in_terminal(self, mocker):
        _, run = _patch_common(mocker)

        result = CliRunner().invoke(main, ["analyze", "sentry-cocoa 1.0.0 crashes"])

        assert result.exit_code == 0, result.output
        run.assert_called_once()
        assert run.call_args.args == ("sentry-cocoa 1.0.0 crashes", None)
        assert isinstance(run.call_args.kwargs["chat"], ConsoleChat)

    def test_reads_report_from_file(self, mocker, tmp_path):
        _, run = _patch_common(mocker)
        report = tmp_path / "report.txt"
        report.write_text("android 7.0.0 ANR\n")

        result = CliRunner().invoke(main, ["analyze", "--file", str(report)])

        assert result.exit_code == 0, result.output
        assert run.call_args.args[0] == "android 7.0.0 ANR"

    def test_model_override_passed_to_config(self, mocker):
        _patch_common(mocker, config=_make_config(model="openai", openai_key="oa"))
        load = mocker.patch("fixscout_core.config.load_config", return_value=_make_config(model="openai", openai_key="oa"))

        CliRunner().invoke(main, ["analyze", "crash", "--model", "openai"])

        assert load.call_args.kwargs["cli_overrides"] == {"model": "openai"}

    def test_group_config_option_is_used(self, mocker, tmp_path):
        _patch_common(mocker)
        load = mocker.patch("fixscout_core.config.load_config", return_value=_make_config())
        path = str(tmp_path / "team.yml")

        result = CliRunner().invoke(main, ["--config", path, "analyze", "crash"])

        assert result.exit_code == 0, result.output
        assert load.call_args.args[0] == path

    def test_analyze_has_no_config_option_of_its_own(self, mocker):
        _patch_common(mocker)
        result = CliRunner().invoke(main, ["analyze", "crash", "--config", "x.yml"])
        assert result.exit_code != 0
        assert "No such option" in result.output

    def test_posts_to_slack_thread_with_context(self, mocker, monkeypatch):
        monkeypatch.setenv("SLACK_BOT_TOKEN", "xoxb-1")
        _, run = _patch_common(mocker)
        slack = mocker.patch("fixscout_core.chat.slack.SlackChat")
        mocker.patch("fixscout_core.chat.base.read_thread_context", return_value="Ada: crash on 1.0.0")

        result = CliRunner().invoke(main, ["analyze", "check this", "--channel", "C1", "--thread", "1.0"])

        assert result.exit_code == 0, result.output
        slack.assert_called_once_with("xoxb-1", "C1", thread_ts="1.0")
        assert run.call_args.args == ("check this", "Ada: crash on 1.0.0")
        assert "Posted no result result to C1" in result.output

    def test_failure_posts_notice_and_exits_nonzero(self, mocker):
        _, run = _patch_common(mocker)
        run.side_effect = RuntimeError("oracle down")
        notice = mocker.patch.object(ConsoleChat, "post_message")

        result = CliRunner().invoke(main, ["analyze", "crash"])

        assert result.exit_code != 0
        assert "Something went wrong" in notice.call_args.args[0].text


class TestReleasesCommand:
    def test_lists_releases(self, mocker):
        mocker.patch("fixscout_core.config.load_config", return_value=_make_config())
        mocker.patch("fixscout_cli.auth.resolve_github_token", return_value="tok")
        mocker.patch("fixscout_core.gh.client.GitHubClient", return_value=MagicMock())
        mocker.patch(
            "fixscout_core.stages.release_range.fetch_release_range",
            return_value=ReleaseRange((Release("v1.1.0", name="1.1.0"), Release("v1.2.0"))),
        )

        result = CliRunner().invoke(main, ["releases", "--repo", "o/r", "--since", "1.0.0"])

        assert result.exit_code == 0, result.output
        assert "1.1.0" in result.output
        assert "1.2.0" in result.output

    def test_prints_range_problem(self, mocker):
        mocker.patch("fixscout_core.config.load_config", return_value=_make_config())
        mocker.patch("fixscout_cli.auth.resolve_github_token", return_value=None)
        mocker.patch("fixscout_core.gh.client.GitHubClient", return_value=MagicMock())
        mocker.patch(
            "fixscout_core.stages.release_range.fetch_release_range",
            return_value=RangeProblem("invalid_version", "Could not find the reported version."),
        )

        result = CliRunner().invoke(main, ["releases", "--repo", "o/r", "--since", "banana"])

        assert result.exit_code == 0
        assert "invalid version" in result.output


class TestConsoleChat:
    def test_renders_blocks_and_returns_ids(self):
        console = MagicMock()
        chat = ConsoleChat(console)
        message = Message((Section("**Fixed**"), Context("footer"), Divider()), "Fixed")

        assert chat.post_message(message) == "1"
        assert chat.post_message(message) == "2"
        assert console.print.call_count == 6

    def test_update_prints_latest_step(self):
        console = MagicMock()
        ConsoleChat(console).update_message("1", Message((), "Scanning…"))
        assert "Scanning…" in str(console.print.call_args.args[0])


class TestAuth:
    def test_env_token_wins(self, monkeypatch):
        monkeypatch.setenv("GITHUB_TOKEN", "env-tok")
        assert resolve_github_token() == "env-tok"

    def test_gh_cli_fallback(self, monkeypatch, mocker):
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        mocker.patch(
            "fixscout_cli.auth.subprocess.run",
            return_value=subprocess.CompletedProcess(args=[], returncode=0, stdout="gh-tok\n", stderr=""),
        )
        assert resolve_github_token() == "gh-tok"

    def test_no_gh_cli(self, monkeypatch, mocker):
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        mocker.patch("fixscout_cli.auth.subprocess.run", side_effect=FileNotFoundError)
        assert resolve_github_token() is None

    def test_slack_token(self, monkeypatch):
        monkeypatch.setenv("SLACK_BOT_TOKEN", "xoxb-2")
        assert resolve_slack_token() == "xoxb-2"

    def test_gh_cli_failure_means_no_token(self, monkeypatch, mocker):
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        mocker.patch(
            "fixscout_cli.auth.subprocess.run",
            return_value=subprocess.CompletedProcess(args=[], returncode=1, stdout="", stderr="not logged in"),
        )
        assert resolve_github_token() is None

    def test_non_bot_slack_token_is_flagged(self, monkeypatch, caplog):
        monkeypatch.setenv("SLACK_BOT_TOKEN", "xoxp-user")
        with caplog.at_level("WARNING", logger="fixscout_cli.auth"):
            assert resolve_slack_token() == "xoxp-user"
        assert "xoxb-" in caplog.text
