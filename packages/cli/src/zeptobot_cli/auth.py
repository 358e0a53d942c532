"""GitHub credential resolution.

A value already present in the config file wins. Otherwise the token comes
from GITHUB_TOKEN, then from the GitHub CLI session (`gh auth token`), then
from a prompt when the session is interactive. The username comes from
GITHUB_USERNAME or a prompt; it doubles as the User-Agent of every request.
"""

from __future__ import annotations

import logging
import os
import subprocess

import click

logger = logging.getLogger(__name__)


def _gh_cli_token() -> str | None:
    try:
        completed = subprocess.run(
            ["gh", "auth", "token"], capture_output=True, text=True, timeout=5, check=True
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("No token from the gh CLI: %s", e)
        return None
    return completed.stdout.strip() or None


def resolve_credentials(config: dict, interactive: bool = True) -> dict:
    """Fill github_username and github_token in ``config``, prompting if allowed.

    Returns the same dict. Missing values are left as None when not interactive.
    """
    username = config.get("github_username") or os.environ.get("GITHUB_USERNAME")
    if not username and interactive:
        username = click.prompt("Please enter a GitHub username")
    config["github_username"] = username or None

    token = config.get("github_token") or os.environ.get("GITHUB_TOKEN") or _gh_cli_token()
    if not token and interactive:
        token = click.prompt("Please enter a GitHub token", hide_input=True)
    config["github_token"] = token or None

    return config


def build_bot_config(config: dict, repo: str | None = None):
    """Resolve credentials and freeze them into a BotConfig, or raise a UsageError."""
    from zeptobot_core.config import BotConfig
    from zeptobot_core.errors import ConfigurationError

    resolve_credentials(config, interactive=config.get("interactive", True))
    if repo:
        config["repo"] = repo
    try:
        return BotConfig.from_config(config)
    except ConfigurationError as e:
        raise click.UsageError(str(e)) from e
