"""Shared fixtures: PR snapshots, fake HTTP responses and a stub client."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from zeptobot_core.config import BotConfig
from zeptobot_core.gh.client import GitHubClient
from zeptobot_core.models import PullRequest

NOW = datetime(2018, 6, 15, 12, 0, tzinfo=timezone.utc)
API = "https://api.github.com/repos/JuliaLang/METADATA.jl"


@pytest.fixture
def bot_config():
    return BotConfig(username="zeptobot", token="tok", repo="JuliaLang/METADATA.jl")


@pytest.fixture
def make_pr():
    def _make_pr(
        number=1,
        title="Tag Foo.jl v1.2.3",
        body="Release of Foo.jl (v1.2.3)\ncc: @someone",
        author="attobot",
        age=timedelta(days=1),
    ):
        return PullRequest(
            number=number,
            title=title,
            body=body,
            author=author,
            created_at=NOW - age,
            base_repo="JuliaLang/METADATA.jl",
            links={
                "statuses": f"{API}/statuses/abc{number}",
                "comments": f"{API}/issues/{number}/comments",
                "issue": f"{API}/issues/{number}",
            },
        )

    return _make_pr


@pytest.fixture
def make_response():
    def _make_response(status_code=200, json_body=None, link=None, text=""):
        response = MagicMock()
        response.status_code = status_code
        response.headers = {"Link": link} if link else {}
        response.json.return_value = [] if json_body is None else json_body
        response.text = text
        return response

    return _make_response


@pytest.fixture
def client(bot_config):
    """A GitHubClient whose request() is a MagicMock; URL building stays real."""
    stub = MagicMock(spec=GitHubClient)
    stub.config = bot_config
    stub.repo_url.side_effect = lambda *parts, repo=None: GitHubClient.repo_url(stub, *parts, repo=repo)
    return stub


@pytest.fixture
def clock():
    return lambda: NOW
