# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Bounded retry-with-deadline for asynchronous device state changes."""

import logging
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)


def await_condition(
    predicate: Callable[[], bool],
    poll_interval_s: float,
    deadline_s: float,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> bool:
    """Evaluate ``predicate`` until it holds or ``deadline_s`` has passed.

    The predicate is evaluated immediately, then once per ``poll_interval_s``.
    It is always evaluated at least once, even with a zero deadline.

    Args:
        predicate: Condition to wait for; may perform bus exchanges
        poll_interval_s: Pause between evaluations
        deadline_s: Total time budget
        sleep: Sleep function (injectable for tests)
        clock: Monotonic clock (injectable for tests)

    Returns:
        True if the predicate held before the deadline, False otherwise.
    """
    deadline = clock() + deadline_s
    attempt = 0
    while True:
        attempt += 1
        if predicate():
            logger.debug(f"Condition met after {attempt} attempt(s)")
            return True
        if clock() + poll_interval_s > deadline:
            logger.debug(f"Condition not met within {deadline_s} s ({attempt} attempt(s))")
            return False
        sleep(poll_interval_s)
