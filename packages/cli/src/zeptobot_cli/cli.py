"""CLI entry point for zeptobot.

Commands:
  process  — evaluate open PRs and merge the ready ones
  check    — show the gate outcome of every open PR without merging
  event    — handle one GitHub status webhook delivery
"""

from __future__ import annotations

import importlib.metadata
import logging

import click

from zeptobot_cli.commands.check import check_cmd
from zeptobot_cli.commands.event import event_cmd
from zeptobot_cli.commands.process import process_cmd

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@click.group()
@click.version_option(
    version=importlib.metadata.version("zeptobot"),
    prog_name="zeptobot",
)
@click.option(
    "--config",
    "config_path",
    default=".zeptobot.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="ZEPTOBOT_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log every gate decision and page request.")
@click.option("--no-input", is_flag=True, help="Never prompt for credentials.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool, no_input: bool):
    """Merge package-registration pull requests once they are ready."""
    from zeptobot_core.config import load_config

    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=_LOG_FORMAT)

    ctx.ensure_object(dict)
    config = load_config(config_path)
    config["interactive"] = not no_input
    ctx.obj["config"] = config


main.add_command(process_cmd)
main.add_command(check_cmd)
main.add_command(event_cmd)
