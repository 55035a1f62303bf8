"""Tick sources for the playback, break, and dictation state machines.

WHY: The state machines must not own a clock. They receive a Scheduler
and ask it for periodic (every) or one-shot (after) callbacks, getting
back a TickHandle they must cancel on every exit path. The core stays
single-threaded and runs on virtual time under test.

HOW: Two implementations share the same interface:
  AsyncioScheduler: real time on an asyncio event loop (call_at with
                     absolute deadlines, so the cadence does not drift)
  ManualScheduler:  a virtual clock advanced explicitly by the caller;
                     used by tests and by anything that replays time

RULES:
- TickHandle.cancel() is idempotent and safe from inside the callback
- A callback fully runs before the next timer fires (no re-entrancy)
- Intervals and delays must be positive
- Timers due at the same instant fire in creation order
"""

from __future__ import annotations

import asyncio
import itertools
from typing import Callable, List, Optional, Protocol

Callback = Callable[[], None]

# Tolerance for float deadlines on the virtual clock (0.3 * 10 != 3.0).
_EPSILON = 1e-9


class TickHandle:
    """Cancellation handle for a scheduled timer."""

    def __init__(self, cancel: Callback) -> None:
        self._cancel = cancel
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._cancel()


class Scheduler(Protocol):
    """Real-time periodic scheduler primitive consumed by the core."""

    def every(self, interval: float, callback: Callback) -> TickHandle:
        """Call callback every interval seconds until the handle is cancelled."""

    def after(self, delay: float, callback: Callback) -> TickHandle:
        """Call callback once, delay seconds from now, unless cancelled first."""


def _check_positive(name: str, value: float) -> None:
    if value <= 0:
        raise ValueError("{} must be positive, got {}".format(name, value))


# ---------------------------------------------------------------------------
# Asyncio (real time)
# ---------------------------------------------------------------------------


class _LoopTimer:
    """One repeating or one-shot timer on an asyncio loop."""

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        interval: float,
        callback: Callback,
        repeat: bool,
    ) -> None:
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._repeat = repeat
        self._deadline = loop.time() + interval
        self._handle: Optional[asyncio.TimerHandle] = loop.call_at(self._deadline, self._fire)

    def _fire(self) -> None:
        if self._repeat:
            self._deadline += self._interval
            self._handle = self._loop.call_at(self._deadline, self._fire)
        else:
            self._handle = None
        self._callback()

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop.

    The loop defaults to the running loop at scheduling time, so an
    instance can be created outside a coroutine and used inside one.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        return self._loop if self._loop is not None else asyncio.get_running_loop()

    def every(self, interval: float, callback: Callback) -> TickHandle:
        _check_positive("interval", interval)
        timer = _LoopTimer(self._get_loop(), interval, callback, repeat=True)
        return TickHandle(timer.cancel)

    def after(self, delay: float, callback: Callback) -> TickHandle:
        _check_positive("delay", delay)
        timer = _LoopTimer(self._get_loop(), delay, callback, repeat=False)
        return TickHandle(timer.cancel)


# ---------------------------------------------------------------------------
# Manual (virtual time)
# ---------------------------------------------------------------------------


class _ManualTimer:
    def __init__(self, due: float, interval: float, callback: Callback, repeat: bool, seq: int) -> None:
        self.due = due
        self.interval = interval
        self.callback = callback
        self.repeat = repeat
        self.seq = seq


class ManualScheduler:
    """Scheduler driven by an explicit virtual clock.

    WHY: Tick-driven behavior (300 one-second break ticks, word-advance
    ticks at 0.3 s) must be testable instantly and deterministically.

    HOW: Timers are kept with absolute due times on a virtual clock that
    starts at 0. advance(seconds) fires every timer that comes due in
    that window in time order; step() jumps straight to the next due
    timer and fires it.

    RULES:
    - now only moves forward, and only through advance() or step()
    - A repeating timer's next due time is fixed before its callback runs,
      so cancelling from inside the callback removes it cleanly
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._timers: List[_ManualTimer] = []
        self._seq = itertools.count()

    @property
    def pending(self) -> int:
        """Number of live timers."""
        return len(self._timers)

    def every(self, interval: float, callback: Callback) -> TickHandle:
        _check_positive("interval", interval)
        return self._add(interval, callback, repeat=True)

    def after(self, delay: float, callback: Callback) -> TickHandle:
        _check_positive("delay", delay)
        return self._add(delay, callback, repeat=False)

    def _add(self, interval: float, callback: Callback, repeat: bool) -> TickHandle:
        timer = _ManualTimer(self.now + interval, interval, callback, repeat, next(self._seq))
        self._timers.append(timer)
        return TickHandle(lambda: self._remove(timer))

    def _remove(self, timer: _ManualTimer) -> None:
        if timer in self._timers:
            self._timers.remove(timer)

    def _next_timer(self, limit: Optional[float] = None) -> Optional[_ManualTimer]:
        candidates = [
            t for t in self._timers
            if limit is None or t.due <= limit + _EPSILON
        ]
        if not candidates:
            return None
        return min(candidates, key=lambda t: (t.due, t.seq))

    def _fire(self, timer: _ManualTimer) -> None:
        self.now = max(self.now, timer.due)
        if timer.repeat:
            timer.due += timer.interval
        else:
            self._remove(timer)
        timer.callback()

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing every timer that comes due."""
        if seconds < 0:
            raise ValueError("Cannot move the clock backwards ({})".format(seconds))
        target = self.now + seconds
        while True:
            timer = self._next_timer(limit=target)
            if timer is None:
                break
            self._fire(timer)
        self.now = max(self.now, target)

    def step(self) -> bool:
        """Fire the next due timer. Returns False when nothing is scheduled."""
        timer = self._next_timer()
        if timer is None:
            return False
        self._fire(timer)
        return True
