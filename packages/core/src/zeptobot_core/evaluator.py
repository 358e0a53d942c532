"""Mergeability gate pipeline.

Gates run cheapest first and stop at the first failure, so a PR that fails
the author check never costs a single API request:

    author → comments → CI statuses → labels → title / age

Each fetching gate distinguishes "the data says no" from "the data could not
be read"; both block the merge, but only the latter sets Evaluation.fetch_error.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from zeptobot_core.errors import UnexpectedTitleShape
from zeptobot_core.gh.client import GitHubClient
from zeptobot_core.gh.pull_request import get_comments, get_labels, get_statuses
from zeptobot_core.models import (
    CloseVerdict,
    Evaluation,
    EvaluationOutcome,
    PullRequest,
    Registration,
    ReleaseTag,
    Unrecognized,
    classify_title,
)

logger = logging.getLogger(__name__)

TRUSTED_BOT = "attobot"
REQUIRED_CONTEXTS = frozenset({"JuliaCIBot", "continuous-integration/travis-ci/pr"})
REGISTRATION_OK_AGE = timedelta(days=3)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _comments_clear(comments: list) -> bool:
    # Fetch order is trusted: the last comment read is taken to be the newest.
    # A trailing attobot comment means the PR was updated after any discussion.
    return not comments or comments[-1]["user"]["login"] == TRUSTED_BOT


def _successful_contexts(statuses: list) -> set[str]:
    return {s["context"] for s in statuses if s.get("state") == "success"}


def evaluate(pr: PullRequest, client: GitHubClient, clock: Clock = utc_now) -> Evaluation:
    """Run every gate against ``pr`` and return the first blocking outcome, or MERGEABLE.

    Raises UnexpectedTitleShape when a PR passes the first four gates with a
    title that is neither a release tag nor a new registration.
    """
    if pr.author != TRUSTED_BOT:
        logger.info("Skipping: PR #%d not by %s", pr.number, TRUSTED_BOT)
        return Evaluation(EvaluationOutcome.SKIPPED_NOT_BOT_AUTHORED)

    logger.info("Checking for comments")
    comments = get_comments(client, pr)
    if not comments.complete:
        logger.warning("Skipping: could not read comments of PR #%d (%s)", pr.number, comments.error)
        return Evaluation(EvaluationOutcome.SKIPPED_HAS_COMMENTS, fetch_error=comments.error)
    if not _comments_clear(comments.entries):
        logger.info("Skipping: PR #%d contains comments", pr.number)
        return Evaluation(EvaluationOutcome.SKIPPED_HAS_COMMENTS)

    logger.info("Checking test status")
    statuses = get_statuses(client, pr)
    if not statuses.complete:
        logger.warning("Skipping: could not read statuses of PR #%d (%s)", pr.number, statuses.error)
        return Evaluation(EvaluationOutcome.SKIPPED_TESTS_INCOMPLETE, fetch_error=statuses.error)
    missing = REQUIRED_CONTEXTS - _successful_contexts(statuses.entries)
    if missing:
        logger.info("Skipping: tests failed or still in progress (%s)", ", ".join(sorted(missing)))
        return Evaluation(EvaluationOutcome.SKIPPED_TESTS_INCOMPLETE)

    logger.info("Checking issue labels")
    labels = get_labels(client, pr)
    if not labels.complete:
        logger.warning("Skipping: could not read labels of PR #%d (%s)", pr.number, labels.error)
        return Evaluation(EvaluationOutcome.SKIPPED_HAS_LABELS, fetch_error=labels.error)
    if labels.entries:
        logger.info("Skipping: PR #%d has labels attached", pr.number)
        return Evaluation(EvaluationOutcome.SKIPPED_HAS_LABELS)

    kind = classify_title(pr.title)
    if isinstance(kind, ReleaseTag):
        logger.info("PR tags release %s v%s", kind.package, kind.version)
        return Evaluation(EvaluationOutcome.MERGEABLE, title_kind=kind)
    if isinstance(kind, Registration):
        logger.info("PR registers new package %s v%s", kind.package, kind.version)
        age = clock() - pr.created_at
        if age >= REGISTRATION_OK_AGE:
            return Evaluation(EvaluationOutcome.MERGEABLE, title_kind=kind)
        logger.info("Skipping: PR is younger than %s", REGISTRATION_OK_AGE)
        return Evaluation(EvaluationOutcome.SKIPPED_TOO_YOUNG, title_kind=kind)
    if isinstance(kind, Unrecognized):
        raise UnexpectedTitleShape(pr.number, pr.title)
    raise TypeError(f"Unhandled title kind: {kind!r}")


def close_verdict(pr: PullRequest, evaluation: Evaluation) -> CloseVerdict:
    """Decide whether a non-mergeable PR should be closed.

    No PR is closeable yet.
    """
    return CloseVerdict.NOT_APPLICABLE
