"""Data models shared by the evaluation pipeline and the dispatch loop."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Union


@dataclass(frozen=True)
class PullRequest:
    """Snapshot of an open pull request, taken once per dispatch pass."""

    number: int
    title: str
    body: str
    author: str
    created_at: datetime
    base_repo: str
    links: tuple[tuple[str, str], ...] = ()

    def __post_init__(self):
        # Stored as sorted pairs so the snapshot stays hashable and read-only.
        if isinstance(self.links, Mapping):
            object.__setattr__(self, "links", tuple(sorted(self.links.items())))

    @classmethod
    def from_api(cls, data: dict) -> "PullRequest":
        """Build a snapshot from a GitHub REST pull request payload."""
        return cls(
            number=data["number"],
            title=data.get("title") or "",
            body=data.get("body") or "",
            author=(data.get("user") or {}).get("login", ""),
            created_at=_parse_timestamp(data["created_at"]),
            base_repo=data["base"]["repo"]["full_name"],
            links={name: link["href"] for name, link in (data.get("_links") or {}).items()},
        )

    def link(self, name: str) -> str:
        for rel, url in self.links:
            if rel == name:
                return url
        raise KeyError(f"PR #{self.number} has no {name!r} link")


def _parse_timestamp(value: str) -> datetime:
    # GitHub timestamps end in "Z", which fromisoformat only accepts from 3.11 on.
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


# ---------------------------------------------------------------------------
# Title classification
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReleaseTag:
    package: str
    version: str


@dataclass(frozen=True)
class Registration:
    package: str
    version: str


@dataclass(frozen=True)
class Unrecognized:
    title: str


TitleKind = Union[ReleaseTag, Registration, Unrecognized]

_TAG_RE = re.compile(r"Tag (?P<package>\S+?)\.jl v(?P<version>\d[\d.]*)")
_REGISTER_RE = re.compile(r"Register new package (?P<package>\S+?)\.jl v(?P<version>\d[\d.]*)")


def classify_title(title: str) -> TitleKind:
    """Classify an attobot PR title.

    >>> classify_title("Tag Foo.jl v1.2.3")
    ReleaseTag(package='Foo', version='1.2.3')
    """
    match = _TAG_RE.search(title)
    if match:
        return ReleaseTag(match["package"], match["version"].rstrip("."))
    match = _REGISTER_RE.search(title)
    if match:
        return Registration(match["package"], match["version"].rstrip("."))
    return Unrecognized(title)


# ---------------------------------------------------------------------------
# Evaluation results
# ---------------------------------------------------------------------------


class EvaluationOutcome(str, Enum):
    MERGEABLE = "mergeable"
    SKIPPED_NOT_BOT_AUTHORED = "skipped_not_bot_authored"
    SKIPPED_HAS_COMMENTS = "skipped_has_comments"
    SKIPPED_TESTS_INCOMPLETE = "skipped_tests_incomplete"
    SKIPPED_HAS_LABELS = "skipped_has_labels"
    SKIPPED_TOO_YOUNG = "skipped_too_young"
    CLOSEABLE = "closeable"
    NO_ACTION = "no_action"


class CloseVerdict(str, Enum):
    # Closing PRs is not supported yet; every PR resolves to NOT_APPLICABLE.
    NOT_APPLICABLE = "not_applicable"
    CLOSEABLE = "closeable"


@dataclass(frozen=True)
class Evaluation:
    """Outcome of running the gate pipeline on one PR.

    ``fetch_error`` is set when the blocking gate could not read its data,
    as opposed to reading it and finding the PR unfit.
    """

    outcome: EvaluationOutcome
    title_kind: TitleKind | None = None
    fetch_error: str | None = None

    @property
    def mergeable(self) -> bool:
        return self.outcome is EvaluationOutcome.MERGEABLE

    @property
    def blocked_by_fetch(self) -> bool:
        return self.fetch_error is not None


@dataclass
class RunCounters:
    """Action counters for one batch run."""

    merges_attempted: int = 0
    merges_succeeded: int = 0
    closes_attempted: int = 0
    closes_succeeded: int = 0
