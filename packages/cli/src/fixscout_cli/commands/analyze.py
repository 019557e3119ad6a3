"""analyze command — run the issue-resolution pipeline on one report."""

from __future__ import annotations

import click
from rich.console import Console

console = Console()


def _report_text(text: str | None, file_path: str | None) -> str:
    if text == "-":
        return click.get_text_stream("stdin").read()
    if text:
        return text
    if file_path:
        with open(file_path, encoding="utf-8") as f:
            return f.read()
    raise click.UsageError("Provide the report as TEXT, '-' for stdin, or --file PATH.")


@click.command("analyze")
@click.argument("text", required=False)
@click.option(
    "--file",
    "file_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Read the report from a file.",
)
@click.option("--channel", default=None, help="Slack channel id to post progress and the result to.")
@click.option(
    "--thread",
    "thread_ts",
    default=None,
    help="Slack thread timestamp. The whole thread is read as context and replies go into it.",
)
@click.option(
    "--model",
    type=click.Choice(["anthropic", "openai"]),
    default=None,
    help="AI model provider. Overrides config file.",
)
@click.pass_context
def analyze_cmd(
    ctx,
    text: str | None,
    file_path: str | None,
    channel: str | None,
    thread_ts: str | None,
    model: str | None,
):
    """Find the release that fixed the problem described in TEXT.

    Without --channel the progress trail and the answer are printed here.
    With --channel they are posted to Slack.

    \b
    Required environment variables:
      GITHUB_TOKEN         GitHub token (or use gh CLI)
      ANTHROPIC_API_KEY    Required when using --model anthropic
      OPENAI_API_KEY       Required when using --model openai
      SLACK_BOT_TOKEN      Required with --channel
    """
    from fixscout_cli.auth import resolve_github_token, resolve_slack_token
    from fixscout_cli.console_chat import ConsoleChat
    from fixscout_core.analyzer import get_oracle, run_analysis
    from fixscout_core.chat.base import failure_notice, read_thread_context
    from fixscout_core.chat.slack import SlackChat
    from fixscout_core.config import build_settings, load_config
    from fixscout_core.gh.client import GitHubClient

    if thread_ts and not channel:
        raise click.UsageError("--thread requires --channel.")
    report = _report_text(text, file_path).strip()
    if not report:
        raise click.UsageError("The report is empty.")

    path = (ctx.obj or {}).get("config_path", ".fixscout.yml")
    config = load_config(path, cli_overrides={"model": model})

    token = resolve_github_token()
    if not token:
        raise click.UsageError(
            "No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.\n"
            "Create a token at https://github.com/settings/tokens"
        )
    config["github_token"] = token

    if config["model"] == "anthropic" and not config.get("anthropic_api_key"):
        raise click.UsageError("ANTHROPIC_API_KEY environment variable is not set.")
    if config["model"] == "openai" and not config.get("openai_api_key"):
        raise click.UsageError("OPENAI_API_KEY environment variable is not set.")

    try:
        settings = build_settings(config)
        oracle = get_oracle(config)
    except ValueError as e:
        raise click.UsageError(str(e))

    if channel:
        slack_token = resolve_slack_token()
        if not slack_token:
            raise click.UsageError("SLACK_BOT_TOKEN environment variable is not set.")
        chat = SlackChat(slack_token, channel, thread_ts=thread_ts)
    else:
        chat = ConsoleChat(console)

    thread_context = read_thread_context(chat, channel, thread_ts, report) if thread_ts else None

    with failure_notice(chat):
        result = run_analysis(
            report,
            thread_context,
            oracle=oracle,
            github=GitHubClient(token),
            chat=chat,
            settings=settings,
        )

    if channel:
        console.print(f"[green]Posted {result.kind.replace('_', ' ')} result to {channel}.[/green]")
