"""Authenticated HTTP access to the GitHub REST API.

Every outbound call goes through GitHubClient.request(), which owns the
retry ceiling for transport failures. HTTP error statuses are returned to
the caller untouched: whether a 404 or a 405 is fatal depends on the
endpoint, so classification happens one layer up.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

import requests

from zeptobot_core.config import BotConfig
from zeptobot_core.errors import FetchAborted

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 10
_BACKOFF_SECONDS = 1.0
_TIMEOUT_SECONDS = 30
_ACCEPT = "application/vnd.github.v3+json"

# Failures worth another attempt. Anything else (bad URL, invalid header) is a bug.
_TRANSIENT_ERRORS = (requests.ConnectionError, requests.Timeout)


class GitHubClient:
    def __init__(
        self,
        config: BotConfig,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
        max_attempts: int = MAX_ATTEMPTS,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.config = config
        self.max_attempts = max_attempts
        self._sleep = sleep
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "User-Agent": config.username,
                "Authorization": f"Bearer {config.token}",
                "Accept": _ACCEPT,
            }
        )

    def repo_url(self, *parts: object, repo: str | None = None) -> str:
        """Return an API URL below /repos/<owner>/<name>/, defaulting to the configured repository."""
        base = f"{self.config.api_url}/repos/{repo or self.config.repo}"
        suffix = "/".join(str(p).strip("/") for p in parts)
        return f"{base}/{suffix}" if suffix else base

    def request(
        self,
        method: str,
        url: str,
        params: dict | None = None,
        json: dict | None = None,
    ) -> requests.Response:
        """Issue one request, retrying transport failures up to max_attempts times.

        Raises FetchAborted when every attempt failed at the transport level.
        """
        last_error: Exception | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                return self._session.request(
                    method,
                    url,
                    params=params or None,
                    json=json,
                    timeout=_TIMEOUT_SECONDS,
                )
            except _TRANSIENT_ERRORS as e:
                last_error = e
                logger.warning(
                    "%s %s failed (attempt %d/%d): %s", method, url, attempt, self.max_attempts, e
                )
                if attempt < self.max_attempts:
                    self._sleep(_BACKOFF_SECONDS * attempt)

        raise FetchAborted(url, f"{type(last_error).__name__}: {last_error}")

    def close(self) -> None:
        self._session.close()
