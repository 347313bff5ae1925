"""Bounded, cancellable wait loop for asynchronous server operations."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from alex_cli.common.errors import PollCancelledError, PollTimeoutError
from alex_cli.common.logging import EventLog


def poll_until_inactive(
    fetch: Callable[[], dict],
    *,
    interval: float,
    timeout: float | None,
    cancel: threading.Event,
    log: EventLog,
    what: str = "operation",
) -> dict:
    """Call *fetch* until its payload reports ``active`` as falsy.

    The first call happens immediately, then one call per *interval*
    seconds.  Waiting happens on *cancel*, so setting it ends the loop
    with :class:`PollCancelledError`.  Running past *timeout* seconds
    raises :class:`PollTimeoutError`.  Returns the last payload.
    """
    start = time.monotonic()
    polls = 0
    while True:
        data = fetch()
        polls += 1
        elapsed = time.monotonic() - start
        active = bool(data.get("active")) if isinstance(data, dict) else False
        log.debug("poll", what=what, poll=polls, active=active, elapsed_seconds=round(elapsed, 1))
        if not active:
            log.info("poll_done", what=what, polls=polls, elapsed_seconds=round(elapsed, 1))
            return data

        if timeout is not None and elapsed >= timeout:
            raise PollTimeoutError(f"Gave up waiting for the {what} after {timeout:.0f}s.")
        if cancel.wait(timeout=interval):
            raise PollCancelledError(f"Waiting for the {what} was cancelled.")
