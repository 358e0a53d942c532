"""Zeptobot core — evaluate and merge package-registration pull requests."""

from zeptobot_core.config import BotConfig, load_config
from zeptobot_core.dispatcher import process_pull_requests
from zeptobot_core.evaluator import evaluate
from zeptobot_core.models import Evaluation, EvaluationOutcome, PullRequest, RunCounters

__all__ = [
    "BotConfig",
    "Evaluation",
    "EvaluationOutcome",
    "PullRequest",
    "RunCounters",
    "evaluate",
    "load_config",
    "process_pull_requests",
]
