#!/usr/bin/env python3
"""Poll-until-match waits.

A fixed sleep is flaky under CI load, so waits instead re-read live UI state at
a short interval until a predicate holds or the timeout runs out. A timed-out
wait hands back the last thing it saw. "Never appeared" and "appeared but never
matched" need different fixes.
"""

import os
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .debug_state import DebugState, parse_debug_state

DEFAULT_INTERVAL = 0.1


@dataclass
class WaitResult:
    matched: bool
    value: Any = None
    last_observed: Any = None
    attempts: int = 0
    elapsed: float = 0.0

    @property
    def ever_observed(self) -> bool:
        return self.last_observed is not None

    def __bool__(self) -> bool:
        return self.matched


def wait_until(
    probe: Callable[[], Any],
    predicate: Callable[[Any], bool],
    timeout: float,
    interval: float = DEFAULT_INTERVAL,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> WaitResult:
    """Call probe() until predicate(value) is true or timeout seconds pass.

    probe() returning None means "nothing to look at yet"; None is never passed
    to the predicate and never replaces an earlier observation. The probe runs
    at least once, even with a zero timeout.
    """
    start = clock()
    deadline = start + max(timeout, 0.0)
    last_observed = None
    attempts = 0

    while True:
        attempts += 1
        value = probe()
        if value is not None:
            last_observed = value
            if predicate(value):
                return WaitResult(True, value, value, attempts, clock() - start)

        now = clock()
        if now >= deadline:
            return WaitResult(False, None, last_observed, attempts, now - start)
        sleep(min(interval, deadline - now))


def wait_for_debug_state(
    read_raw: Callable[[], Optional[str]],
    predicate: Optional[Callable[[DebugState], bool]] = None,
    timeout: float = 3.0,
    interval: float = DEFAULT_INTERVAL,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> WaitResult:
    """Wait for a baseline-loaded debug state that satisfies predicate.

    read_raw returns the current accessibility value of the state summary (or
    None when the element is not on screen). It is re-read and re-parsed on every
    poll.
    """

    def matches(state: DebugState) -> bool:
        if state.is_provisional:
            return False
        return predicate(state) if predicate else True

    return wait_until(
        lambda: parse_debug_state(read_raw()),
        matches,
        timeout,
        interval=interval,
        clock=clock,
        sleep=sleep,
    )


@dataclass(frozen=True)
class Timeouts:
    """Adaptive timeouts: longer on CI, scaled by UITEST_TIMEOUT_SCALE."""

    standard: float = 10.0
    short: float = 3.0

    @classmethod
    def from_env(cls, environ=None, scale: Optional[float] = None) -> "Timeouts":
        env = os.environ if environ is None else environ
        on_ci = "CI" in env
        standard, short = (15.0, 5.0) if on_ci else (10.0, 3.0)

        if scale is None:
            try:
                scale = float(env.get("UITEST_TIMEOUT_SCALE", ""))
            except ValueError:
                scale = None
        if scale is not None and scale > 0:
            standard *= scale
            short *= scale
        return cls(standard=standard, short=short)
