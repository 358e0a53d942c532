from __future__ import annotations

from zeptobot_core.errors import FetchAborted
from zeptobot_core.gh.client import GitHubClient
from zeptobot_core.gh.paging import PageResult, fetch_all_pages
from zeptobot_core.models import PullRequest


def get_pull_requests(client: GitHubClient, state: str = "open") -> list[PullRequest]:
    """Return snapshots of the configured repository's pull requests in the given state.

    The list endpoint already carries every field a snapshot needs, so this
    costs one request per page and nothing per PR.
    """
    url = client.repo_url("pulls")
    result = fetch_all_pages(client, url, state=state)
    if not result.complete:
        raise FetchAborted(url, result.error or "listing incomplete")
    return [PullRequest.from_api(entry) for entry in result.entries]


def get_statuses(client: GitHubClient, pr: PullRequest) -> PageResult:
    return fetch_all_pages(client, pr.link("statuses"))


def get_comments(client: GitHubClient, pr: PullRequest) -> PageResult:
    return fetch_all_pages(client, pr.link("comments"))


def get_labels(client: GitHubClient, pr: PullRequest) -> PageResult:
    return fetch_all_pages(client, pr.link("issue").rstrip("/") + "/labels")
