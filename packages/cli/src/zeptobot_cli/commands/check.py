"""check command — show the gate outcome of every open PR without merging."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from zeptobot_core.errors import FetchAborted, UnexpectedTitleShape
from zeptobot_core.evaluator import evaluate
from zeptobot_core.gh.client import GitHubClient
from zeptobot_core.gh.pull_request import get_pull_requests
from zeptobot_cli.auth import build_bot_config

console = Console()

_OUTCOME_STYLE = {
    "mergeable": "green",
    "skipped_too_young": "yellow",
    "skipped_tests_incomplete": "yellow",
}


@click.command("check")
@click.option("--repo", default=None, help="GitHub repository in owner/name format. Overrides config file.")
@click.option("--all", "show_all", is_flag=True, help="Include PRs not opened by the bot.")
@click.pass_context
def check_cmd(ctx, repo: str | None, show_all: bool):
    """Evaluate open PRs and print why each one would or would not be merged."""
    bot = build_bot_config(ctx.obj["config"], repo)

    client = GitHubClient(bot)
    try:
        _print_outcomes(bot.repo, client, show_all)
    finally:
        client.close()


def _print_outcomes(repo: str, client: GitHubClient, show_all: bool) -> None:
    try:
        prs = get_pull_requests(client, state="open")
    except FetchAborted as e:
        raise click.ClickException(f"Could not list open PRs of {repo}: {e}") from e
    if not prs:
        console.print("[yellow]No open pull requests found.[/yellow]")
        return

    table = Table(title=f"Open PRs — {repo}", show_header=True, header_style="bold cyan")
    table.add_column("PR", style="bold", width=7)
    table.add_column("Title", max_width=50)
    table.add_column("Outcome", width=26)
    table.add_column("Note")

    for pr in prs:
        try:
            evaluation = evaluate(pr, client)
        except UnexpectedTitleShape as e:
            table.add_row(f"#{pr.number}", pr.title, "[red]error[/red]", str(e))
            continue
        outcome = evaluation.outcome.value
        if outcome == "skipped_not_bot_authored" and not show_all:
            continue
        style = _OUTCOME_STYLE.get(outcome, "white")
        note = f"fetch failed: {evaluation.fetch_error}" if evaluation.blocked_by_fetch else ""
        table.add_row(f"#{pr.number}", pr.title, f"[{style}]{outcome}[/{style}]", note)

    console.print(table)
