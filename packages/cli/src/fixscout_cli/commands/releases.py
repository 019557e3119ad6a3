"""releases command — show the release range a scan would read."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

console = Console()


@click.command("releases")
@click.option("--repo", required=True, help="GitHub repository in owner/name format.")
@click.option("--since", "version", required=True, help="Reported SDK version; only newer stable releases are listed.")
@click.pass_context
def releases_cmd(ctx, repo: str, version: str):
    """List stable releases of REPO after VERSION, oldest first.

    Prints the same degenerate-case message the analysis would give when the
    range is empty, too large, or cannot be fetched.
    """
    from fixscout_cli.auth import resolve_github_token
    from fixscout_core.config import build_settings, load_config
    from fixscout_core.gh.client import GitHubClient
    from fixscout_core.stages.release_range import RangeProblem, fetch_release_range
    from fixscout_core.versions import display_version

    config = load_config((ctx.obj or {}).get("config_path", ".fixscout.yml"))
    settings = build_settings(config)

    fetched = fetch_release_range(GitHubClient(resolve_github_token()), repo, version, settings.max_releases)
    if isinstance(fetched, RangeProblem):
        console.print(f"[yellow]{fetched.kind.replace('_', ' ')}:[/yellow] {fetched.message}")
        return

    table = Table(title=f"{len(fetched.releases)} stable releases of {repo} after {display_version(version)}")
    table.add_column("Version", style="bold")
    table.add_column("Name")
    table.add_column("URL", style="dim")
    for release in fetched.releases:
        table.add_row(display_version(release.tag), release.name or "", release.url)
    console.print(table)
