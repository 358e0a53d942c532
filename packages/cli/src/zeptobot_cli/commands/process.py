"""process command — evaluate open PRs and merge the ready ones."""

from __future__ import annotations

import click
from rich.console import Console

from zeptobot_core.config import BotConfig
from zeptobot_core.dispatcher import process_pull_requests
from zeptobot_core.errors import FetchAborted
from zeptobot_core.gh.client import GitHubClient
from zeptobot_core.gh.pull_request import get_pull_requests
from zeptobot_core.models import RunCounters
from zeptobot_cli.auth import build_bot_config

console = Console()


def run_process(bot: BotConfig, dry_run: bool = False) -> RunCounters:
    """List the open PRs of bot.repo and run one dispatch pass over them."""
    client = GitHubClient(bot)
    try:
        try:
            prs = get_pull_requests(client, state="open")
        except FetchAborted as e:
            raise click.ClickException(f"Could not list open PRs of {bot.repo}: {e}") from e
        return process_pull_requests(prs, client, dry_run=dry_run)
    finally:
        client.close()


def print_counters(counters: RunCounters) -> None:
    console.print(
        f"[bold]{counters.merges_succeeded}[/bold] out of [bold]{counters.merges_attempted}[/bold] "
        "PRs merged successfully"
    )
    console.print(
        f"[bold]{counters.closes_succeeded}[/bold] out of [bold]{counters.closes_attempted}[/bold] "
        "PRs closed successfully"
    )


@click.command("process")
@click.option("--repo", default=None, help="GitHub repository in owner/name format. Overrides config file.")
@click.option("--dry-run", is_flag=True, help="Evaluate and count, but do not merge anything.")
@click.pass_context
def process_cmd(ctx, repo: str | None, dry_run: bool):
    """Merge every open PR that passes all gates.

    \b
    A PR is merged when it was opened by attobot, has no human comments,
    passes both required CI contexts, carries no labels, and (for new
    package registrations) is at least three days old.

    \b
    Environment variables:
      GITHUB_USERNAME      Account used as User-Agent
      GITHUB_TOKEN         GitHub personal access token (or use gh CLI)
    """
    config = ctx.obj["config"]
    bot = build_bot_config(config, repo)
    dry_run = dry_run or bool(config.get("dry_run"))

    if dry_run:
        console.print("[yellow]Dry run: no PR will be merged.[/yellow]")

    counters = run_process(bot, dry_run=dry_run)
    print_counters(counters)
