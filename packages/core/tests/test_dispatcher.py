"""Tests for the batch dispatch loop."""

import pytest

from zeptobot_core.dispatcher import process_pull_requests
from zeptobot_core.errors import FetchAborted, UnexpectedTitleShape
from zeptobot_core.gh.paging import PageResult
from zeptobot_core.models import CloseVerdict, Evaluation, EvaluationOutcome
from zeptobot_core.ratelimit import MergeThrottle

MERGEABLE = Evaluation(EvaluationOutcome.MERGEABLE)
LABELLED = Evaluation(EvaluationOutcome.SKIPPED_HAS_LABELS)


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def throttle(sleeps):
    return MergeThrottle(sleep=sleeps.append)


def _outcomes(mocker, by_number):
    return mocker.patch(
        "zeptobot_core.dispatcher.evaluate",
        side_effect=lambda pr, client, clock: by_number[pr.number],
    )


class TestProcessPullRequests:
    def test_two_of_three_merged(self, mocker, make_pr, client, make_response, throttle, sleeps):
        _outcomes(mocker, {1: MERGEABLE, 2: LABELLED, 3: MERGEABLE})
        client.request.return_value = make_response(status_code=200)
        prs = [make_pr(number=n) for n in (1, 2, 3)]

        counters = process_pull_requests(prs, client, throttle=throttle)

        assert counters.merges_attempted == 2
        assert counters.merges_succeeded == 2
        assert counters.closes_attempted == 0
        assert sleeps == [10.0, 10.0]
        assert throttle.pauses == 2
        merged = [c.args[1].rsplit("/", 2)[-2] for c in client.request.call_args_list]
        assert merged == ["1", "3"]

    def test_dry_run_counts_but_never_merges(self, mocker, make_pr, client, throttle):
        _outcomes(mocker, {1: MERGEABLE, 2: MERGEABLE})

        prs = [make_pr(number=1), make_pr(number=2)]

        counters = process_pull_requests(prs, client, dry_run=True, throttle=throttle)

        assert counters.merges_attempted == 2
        assert counters.merges_succeeded == 0
        client.request.assert_not_called()
        assert throttle.pauses == 2

    def test_rejected_merge_counted_as_failed_attempt(self, mocker, make_pr, client, make_response, throttle):
        _outcomes(mocker, {1: MERGEABLE, 2: MERGEABLE})
        client.request.side_effect = [
            make_response(status_code=405, text="not mergeable"),
            make_response(status_code=200),
        ]

        counters = process_pull_requests([make_pr(number=1), make_pr(number=2)], client, throttle=throttle)

        assert counters.merges_attempted == 2
        assert counters.merges_succeeded == 1

    def test_rejection_is_logged(self, mocker, make_pr, client, make_response, throttle, caplog):
        _outcomes(mocker, {1: MERGEABLE})
        client.request.return_value = make_response(status_code=409, text="Head branch was modified")

        with caplog.at_level("ERROR"):
            process_pull_requests([make_pr(number=1)], client, throttle=throttle)

        assert "Head branch was modified" in caplog.text

    def test_transport_failure_during_merge_does_not_stop_batch(self, mocker, make_pr, client, make_response, throttle):
        _outcomes(mocker, {1: MERGEABLE, 2: MERGEABLE})
        client.request.side_effect = [FetchAborted("url", "down"), make_response(status_code=200)]

        counters = process_pull_requests([make_pr(number=1), make_pr(number=2)], client, throttle=throttle)

        assert (counters.merges_attempted, counters.merges_succeeded) == (2, 1)

    def test_non_mergeable_prs_are_no_ops(self, mocker, make_pr, client, throttle):
        _outcomes(mocker, {1: LABELLED, 2: Evaluation(EvaluationOutcome.SKIPPED_NOT_BOT_AUTHORED)})

        counters = process_pull_requests([make_pr(number=1), make_pr(number=2)], client, throttle=throttle)

        assert counters.merges_attempted == 0
        assert throttle.pauses == 0
        client.request.assert_not_called()

    def test_prs_evaluated_once_in_input_order(self, mocker, make_pr, client, throttle):
        evaluate = _outcomes(mocker, {5: LABELLED, 2: LABELLED, 9: LABELLED})

        process_pull_requests([make_pr(number=n) for n in (5, 2, 9)], client, throttle=throttle)

        assert [c.args[0].number for c in evaluate.call_args_list] == [5, 2, 9]

    def test_closeable_prs_counted_but_not_closed(self, mocker, make_pr, client, throttle):
        _outcomes(mocker, {1: LABELLED, 2: MERGEABLE})
        close_check = mocker.Mock(return_value=CloseVerdict.CLOSEABLE)
        client.request.return_value = mocker.Mock(status_code=200)

        counters = process_pull_requests(
            [make_pr(number=1), make_pr(number=2)], client, throttle=throttle, close_check=close_check
        )

        assert counters.closes_attempted == 1
        assert counters.closes_succeeded == 0
        # A mergeable PR is never also considered for closing.
        close_check.assert_called_once()
        assert close_check.call_args.args[0].number == 1
        assert client.request.call_count == 1

    def test_unexpected_title_shape_propagates(self, mocker, make_pr, client, throttle):
        mocker.patch("zeptobot_core.dispatcher.evaluate", side_effect=UnexpectedTitleShape(1, "Hello"))
        with pytest.raises(UnexpectedTitleShape):
            process_pull_requests([make_pr(number=1)], client, throttle=throttle)

    def test_empty_batch(self, client, throttle):
        counters = process_pull_requests([], client, throttle=throttle)
        assert counters.merges_attempted == 0
        assert throttle.pauses == 0


class TestEndToEnd:
    """Real gate pipeline over stubbed HTTP responses."""

    def test_batch_over_stubbed_api(self, make_pr, client, make_response, throttle, clock):
        passing = [
            {"context": "JuliaCIBot", "state": "success"},
            {"context": "continuous-integration/travis-ci/pr", "state": "success"},
        ]
        responses = {
            # PR 1: release tag, all clear
            "issues/1/comments": make_response(json_body=[]),
            "statuses/abc1": make_response(json_body=passing),
            "issues/1/labels": make_response(json_body=[]),
            # PR 2: labelled
            "issues/2/comments": make_response(json_body=[]),
            "statuses/abc2": make_response(json_body=passing),
            "issues/2/labels": make_response(json_body=[{"name": "on hold"}]),
        }

        def fake_request(method, url, params=None, json=None):
            if method == "PUT":
                return make_response(status_code=200)
            return next(r for suffix, r in responses.items() if url.endswith(suffix))

        client.request.side_effect = fake_request
        prs = [make_pr(number=1), make_pr(number=2), make_pr(number=3, author="human")]

        counters = process_pull_requests(prs, client, throttle=throttle, clock=clock)

        assert (counters.merges_attempted, counters.merges_succeeded) == (1, 1)
        puts = [c for c in client.request.call_args_list if c.args[0] == "PUT"]
        assert len(puts) == 1
        assert puts[0].args[1].endswith("/pulls/1/merge")
        assert throttle.pauses == 1

    def test_unreachable_statuses_leave_pr_unmerged(self, make_pr, client, make_response, throttle, clock, caplog):
        def fake_request(method, url, params=None, json=None):
            if url.endswith("/comments"):
                return make_response(json_body=[])
            return make_response(status_code=503)

        client.request.side_effect = fake_request

        with caplog.at_level("WARNING"):
            counters = process_pull_requests([make_pr(number=1)], client, throttle=throttle, clock=clock)

        assert counters.merges_attempted == 0
        assert "could not read statuses" in caplog.text


def test_page_result_feeds_evaluator(mocker, make_pr, client, throttle):
    mocker.patch("zeptobot_core.evaluator.get_comments", return_value=PageResult())
    mocker.patch("zeptobot_core.evaluator.get_statuses", return_value=PageResult(complete=False, error="boom"))
    labels = mocker.patch("zeptobot_core.evaluator.get_labels")

    counters = process_pull_requests([make_pr()], client, throttle=throttle)

    assert counters.merges_attempted == 0
    labels.assert_not_called()
