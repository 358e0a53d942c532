"""Batch processing of open pull requests.

PRs are handled strictly one after another. The only rate limiting is the
MergeThrottle pause after each mergeable PR; no two requests are ever in flight.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from zeptobot_core.errors import FetchAborted, MergeRejected
from zeptobot_core.evaluator import Clock, close_verdict, evaluate, utc_now
from zeptobot_core.gh.client import GitHubClient
from zeptobot_core.merge import check_merge_response, merge_pull_request
from zeptobot_core.models import CloseVerdict, Evaluation, EvaluationOutcome, PullRequest, RunCounters
from zeptobot_core.ratelimit import MergeThrottle

logger = logging.getLogger(__name__)

CloseCheck = Callable[[PullRequest, Evaluation], CloseVerdict]


def _try_merge(client: GitHubClient, pr: PullRequest) -> bool:
    try:
        response = merge_pull_request(client, pr)
        check_merge_response(pr, response)
    except (MergeRejected, FetchAborted) as e:
        logger.error("Merging failed: %s", e)
        return False
    logger.info("Merge successful!")
    return True


def process_pull_requests(
    prs: Iterable[PullRequest],
    client: GitHubClient,
    dry_run: bool = False,
    throttle: MergeThrottle | None = None,
    clock: Clock = utc_now,
    close_check: CloseCheck = close_verdict,
) -> RunCounters:
    """Evaluate every PR in order and merge the mergeable ones.

    In dry-run mode decisions are made and counted but nothing is merged.
    Returns the counters for this run.
    """
    throttle = throttle or MergeThrottle()
    counters = RunCounters()

    if dry_run:
        logger.warning("Running in dry-run mode. No actions taken.")

    logger.info("Traverse the PRs to determine actions")
    for pr in prs:
        logger.info('Processing "%s"', pr.title)
        evaluation = evaluate(pr, client, clock=clock)

        if evaluation.outcome is EvaluationOutcome.MERGEABLE:
            logger.info("PR #%d can be merged", pr.number)
            counters.merges_attempted += 1
            if not dry_run and _try_merge(client, pr):
                counters.merges_succeeded += 1
            throttle.pause()

        elif close_check(pr, evaluation) is CloseVerdict.CLOSEABLE:
            logger.info("PR #%d can be closed", pr.number)
            counters.closes_attempted += 1
            # No close endpoint is wired up; the attempt is counted only.
            logger.warning("Closing PRs is not supported, leaving PR #%d open", pr.number)

        else:
            logger.debug("No action for PR #%d (%s)", pr.number, evaluation.outcome.value)

    logger.info("PR processing complete")
    logger.info("%d out of %d PRs merged successfully", counters.merges_succeeded, counters.merges_attempted)
    logger.info("%d out of %d PRs closed successfully", counters.closes_succeeded, counters.closes_attempted)
    return counters
