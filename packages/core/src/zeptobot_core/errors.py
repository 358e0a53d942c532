"""Exception hierarchy for the merge engine.

Fetch problems and rule failures are kept apart: a gatherer that cannot reach
an endpoint reports it through ``PageResult.error`` (or ``FetchAborted`` for a
single request), never as a plain "not mergeable" answer.
"""

from __future__ import annotations


class ZeptobotError(Exception):
    """Base class for all zeptobot errors."""


class ConfigurationError(ZeptobotError):
    """Raised when required credentials or settings are missing."""


class FetchAborted(ZeptobotError):
    """A request could not be completed.

    Raised by the HTTP client once transport retries are exhausted. The paged
    fetcher converts it into an incomplete ``PageResult`` instead of raising.
    """

    def __init__(self, url: str, reason: str):
        super().__init__(f"Request to {url} aborted: {reason}")
        self.url = url
        self.reason = reason


class MalformedPaginationHeader(ZeptobotError, ValueError):
    """A Link header segment is missing its URL or its rel attribute."""


class UnexpectedTitleShape(ZeptobotError):
    """A PR reached the title gate with a title that is neither a release tag nor a registration."""

    def __init__(self, number: int, title: str):
        super().__init__(f"PR #{number} has an unrecognized title: {title!r}")
        self.number = number
        self.title = title


class MissingVersionToken(ZeptobotError, ValueError):
    """The PR body contains no parenthesized version token."""


class MergeRejected(ZeptobotError):
    """The merge endpoint answered with a status code >= 300."""

    def __init__(self, number: int, status_code: int, body: str = ""):
        super().__init__(f"Merging PR #{number} failed with HTTP {status_code}: {body}")
        self.number = number
        self.status_code = status_code
        self.body = body
