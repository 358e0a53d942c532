"""Handling of GitHub "status" webhook deliveries.

The HTTP listener itself lives outside this package; it parses a delivery
into a StatusEvent, calls handle_status_event() and answers with the returned
status code. Each delivery is one job, logged to its own file under
<log_dir>/<YYYYMMDD>/jobNNNN.log.
"""

from __future__ import annotations

import logging
import re
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Callable, Iterator

logger = logging.getLogger(__name__)

STATUS_EVENT = "status"

_JOB_RE = re.compile(r"job(\d{4})")
_JOB_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_job_lock = threading.Lock()


@dataclass(frozen=True)
class StatusEvent:
    kind: str
    payload: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "StatusEvent":
        return cls(kind=data.get("kind", ""), payload=data.get("payload") or {})


def handle_status_event(event: StatusEvent, repo: str, run_batch: Callable[[str], object]) -> int:
    """Run ``run_batch(repo)`` when a successful status arrives for ``repo``.

    Returns the HTTP status code the listener should answer with: 500 for
    deliveries of the wrong kind or from another repository, 200 otherwise.
    """
    logger.info("Received an event from GitHub. Processing!")
    if event.kind != STATUS_EVENT:
        logger.error("Event is not a status update: %r", event.kind)
        return 500

    name = event.payload.get("name")
    if name != repo:
        logger.error("Received an event from the wrong repo: %r", name)
        return 500

    state = event.payload.get("state")
    if state == "success":
        logger.info("Event status: success. Trying to merge PRs...")
        run_batch(repo)
    else:
        logger.info("Event status: %s. Nothing to do", state)
    return 200


def _latest_job_number(day_dir: Path) -> int:
    numbers = [int(m.group(1)) for p in day_dir.iterdir() if (m := _JOB_RE.match(p.name))]
    return max(numbers, default=0)


def next_job_log_path(log_dir: str | Path, today: date | None = None) -> Path:
    """Create and return the log file for the next job of the day.

    Job numbers restart at 1 every calendar day. The file is created
    exclusively, so two writers never share a job number.
    """
    today = today or date.today()
    day_dir = Path(log_dir) / today.strftime("%Y%m%d")
    with _job_lock:
        day_dir.mkdir(parents=True, exist_ok=True)
        number = _latest_job_number(day_dir) + 1
        while True:
            path = day_dir / f"job{number:04d}.log"
            try:
                path.touch(exist_ok=False)
            except FileExistsError:
                number += 1
                continue
            return path


@contextmanager
def job_log(path: str | Path, level: int = logging.INFO) -> Iterator[logging.Handler]:
    """Send root logger records to ``path`` for the duration of the block."""
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_JOB_FORMAT))
    root = logging.getLogger()
    previous_level = root.level
    root.addHandler(handler)
    if root.level == logging.NOTSET or root.level > level:
        root.setLevel(level)
    try:
        yield handler
    finally:
        root.removeHandler(handler)
        root.setLevel(previous_level)
        handler.close()
