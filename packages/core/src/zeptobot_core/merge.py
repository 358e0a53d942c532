"""Squash-merge execution."""

from __future__ import annotations

import logging
import re

import requests

from zeptobot_core.errors import MergeRejected, MissingVersionToken
from zeptobot_core.gh.client import GitHubClient
from zeptobot_core.models import PullRequest

logger = logging.getLogger(__name__)

COMMIT_MESSAGE = "Merged automatically by Zeptobot"

_VERSION_TOKEN_RE = re.compile(r"\(([^()]*)\)")


def version_token(body: str) -> str:
    """Return the first parenthesized substring of a PR body."""
    match = _VERSION_TOKEN_RE.search(body or "")
    if match is None:
        raise MissingVersionToken(f"No parenthesized version token in PR body: {body!r}")
    return match.group(1)


def commit_title(pr: PullRequest) -> str:
    return f"{pr.title} [{version_token(pr.body)}] (#{pr.number})"


def merge_url(client: GitHubClient, pr: PullRequest) -> str:
    return client.repo_url("pulls", pr.number, "merge", repo=pr.base_repo)


def merge_pull_request(
    client: GitHubClient,
    pr: PullRequest,
    title: str | None = None,
    message: str = COMMIT_MESSAGE,
) -> requests.Response:
    """Squash-merge ``pr`` and return the raw response.

    Success is signalled by a status code below 300; see check_merge_response.
    """
    payload = {
        "commit_title": title if title is not None else commit_title(pr),
        "commit_message": message,
        "merge_method": "squash",
    }
    logger.debug("Merging PR #%d with title %r", pr.number, payload["commit_title"])
    return client.request("PUT", merge_url(client, pr), json=payload)


def check_merge_response(pr: PullRequest, response: requests.Response) -> None:
    """Raise MergeRejected unless the merge endpoint reported success."""
    if response.status_code >= 300:
        raise MergeRejected(pr.number, response.status_code, response.text)
