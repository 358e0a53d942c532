"""event command — handle one GitHub status webhook delivery.

Meant to be called by the webhook listener with the delivery body on stdin:

    zeptobot event --kind status - < payload.json
"""

from __future__ import annotations

import contextlib
import json
from dataclasses import replace

import click
from rich.console import Console

from zeptobot_core.webhook import StatusEvent, handle_status_event, job_log, next_job_log_path
from zeptobot_cli.auth import build_bot_config
from zeptobot_cli.commands.process import print_counters, run_process

console = Console(stderr=True)


@click.command("event")
@click.option("--kind", default="status", show_default=True, help="Webhook event type (X-GitHub-Event header).")
@click.option("--repo", default=None, help="Repository the bot serves. Overrides config file.")
@click.option("--dry-run", is_flag=True, help="Evaluate and count, but do not merge anything.")
@click.argument("payload", type=click.File("r"))
@click.pass_context
def event_cmd(ctx, kind: str, repo: str | None, dry_run: bool, payload):
    """Process a webhook PAYLOAD (a file, or - for stdin).

    Exits with status 1 when the delivery is rejected (wrong event type or
    wrong repository), mirroring the HTTP 500 the listener should answer with.
    """
    config = ctx.obj["config"]
    bot = build_bot_config(config, repo)
    dry_run = dry_run or bool(config.get("dry_run"))

    try:
        body = json.load(payload)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"Payload is not valid JSON: {e}", param_hint="PAYLOAD") from e

    event = StatusEvent(kind=kind, payload=body)

    def run_batch(target: str):
        print_counters(run_process(replace(bot, repo=target), dry_run=dry_run))

    log_dir = config.get("log_dir")
    with contextlib.ExitStack() as stack:
        if log_dir:
            path = next_job_log_path(log_dir)
            stack.enter_context(job_log(path))
            console.print(f"Logging to {path}")
        status = handle_status_event(event, bot.repo, run_batch)

    if status >= 300:
        ctx.exit(1)
