from __future__ import annotations

import logging
import time
from typing import Callable

logger = logging.getLogger(__name__)

MERGE_DELAY_SECONDS = 10.0


class MergeThrottle:
    """Fixed pause after every merge decision, keeping bursts under GitHub's secondary rate limits."""

    def __init__(self, delay: float = MERGE_DELAY_SECONDS, sleep: Callable[[float], None] = time.sleep):
        if delay < 0:
            raise ValueError("delay must not be negative")
        self.delay = delay
        self._sleep = sleep
        self.pauses = 0

    def pause(self) -> None:
        logger.debug("Waiting %.1fs before the next action", self.delay)
        self._sleep(self.delay)
        self.pauses += 1
