"""Deadline-bounded poll loop used to wait for asynchronous API work."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

import httpx

from .config import ErrorPolicy, PollPolicy
from .errors import GridscaleError, PollCancelledError, PollTimeoutError

logger = logging.getLogger(__name__)

TOLERABLE_ERRORS: tuple[type[Exception], ...] = (GridscaleError, httpx.HTTPError)


class Poller:
    """Repeat a check every ``interval`` seconds until it passes or time runs out.

    The deadline starts when ``wait`` is entered. Each iteration checks the
    deadline, sleeps one interval and then runs the check, so the first
    check happens one interval after entry. ``clock`` and ``sleep`` can be
    replaced to drive the loop with virtual time.
    """

    def __init__(
        self,
        policy: PollPolicy,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        self.policy = policy
        self._clock = clock
        self._sleep = sleep

    def wait(
        self,
        check: Callable[[], bool],
        target: str,
        *,
        cancel: threading.Event | None = None,
        message: str | None = None,
    ) -> int:
        """Block until ``check`` returns True; return the number of attempts."""
        deadline = self._clock() + self.policy.timeout
        attempts = 0

        while True:
            if self._clock() >= deadline:
                logger.debug("Gave up on %s after %d attempt(s)", target, attempts)
                raise PollTimeoutError(target, message)

            self._pause(target, cancel)
            attempts += 1

            try:
                done = check()
            except TOLERABLE_ERRORS as exc:
                if self.policy.on_error is ErrorPolicy.FATAL:
                    raise
                logger.debug("Poll %d for %s failed: %s", attempts, target, exc)
                continue

            if done:
                return attempts

    def _pause(self, target: str, cancel: threading.Event | None) -> None:
        interval = self.policy.interval
        if cancel is None:
            (self._sleep or time.sleep)(interval)
            return

        if cancel.is_set():
            raise PollCancelledError(target)
        if self._sleep is None:
            cancelled = cancel.wait(interval)
        else:
            self._sleep(interval)
            cancelled = cancel.is_set()
        if cancelled:
            raise PollCancelledError(target)
