"""Break-reminder countdown state machine.

WHY: Long reading sessions tire dyslexic readers quickly. After a set
amount of reading the app prompts for a short break and, if accepted,
counts it down. The prompt/countdown flow has a handful of states and
must never leave a one-second tick running after the break ends.

HOW: BreakTimer moves between three phases:

    IDLE --trigger--> PROMPTING --take_break--> ACTIVE
    PROMPTING --skip--> IDLE
    ACTIVE --(countdown hits zero | end_early)--> IDLE

While ACTIVE a one-second tick from the injected Scheduler decrements
remaining_seconds. BreakReminderClock issues the "threshold reached"
trigger every N minutes of reading.

RULES:
- remaining_seconds = break_duration_minutes * 60 on entering ACTIVE
- Reaching zero → IDLE, on_finished fires, remaining_seconds resets
- end_early from ACTIVE → IDLE immediately, tick cancelled, no on_finished
- end_early while IDLE is a silent no-op; other out-of-phase commands are
  logged as invalid transitions and ignored (commands return False)
- Every exit from ACTIVE cancels the tick handle
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from reading_aid.config import DEFAULT_BREAK_DURATION_MINUTES
from reading_aid.core.effects import Haptics, ImpactStyle, NotificationKind, NullHaptics
from reading_aid.core.scheduler import Scheduler, TickHandle

logger = logging.getLogger(__name__)

TICK_SECONDS = 1.0


class BreakPhase(str, enum.Enum):
    IDLE = "idle"
    PROMPTING = "prompting"
    ACTIVE = "active"


@dataclass(frozen=True)
class BreakTimerState:
    """Snapshot of the timer; remaining_seconds only matters while ACTIVE."""

    phase: BreakPhase
    remaining_seconds: int


def format_countdown(seconds: int) -> str:
    """Render a countdown as m:ss (e.g. 300 → "5:00", 65 → "1:05")."""
    minutes, secs = divmod(max(0, seconds), 60)
    return "{}:{:02d}".format(minutes, secs)


class BreakTimer:
    """Prompt-then-countdown break timer.

    Args:
        scheduler: Source of the one-second tick.
        break_duration_minutes: Length of each break; must be positive.
        haptics: Haptic sink; defaults to NullHaptics.
        on_prompt: Called when the timer starts prompting for a break.
        on_tick: Called with remaining_seconds after each tick.
        on_finished: Called when a break runs down to zero.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        break_duration_minutes: int = DEFAULT_BREAK_DURATION_MINUTES,
        haptics: Optional[Haptics] = None,
        on_prompt: Optional[Callable[[], None]] = None,
        on_tick: Optional[Callable[[int], None]] = None,
        on_finished: Optional[Callable[[], None]] = None,
    ) -> None:
        _check_duration(break_duration_minutes)
        self._scheduler = scheduler
        self._haptics = haptics if haptics is not None else NullHaptics()
        self.on_prompt = on_prompt
        self.on_tick = on_tick
        self.on_finished = on_finished

        self._duration_minutes = break_duration_minutes
        self._phase = BreakPhase.IDLE
        self._remaining = self.break_duration_seconds
        self._handle: Optional[TickHandle] = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def phase(self) -> BreakPhase:
        return self._phase

    @property
    def remaining_seconds(self) -> int:
        return self._remaining

    @property
    def break_duration_seconds(self) -> int:
        return self._duration_minutes * 60

    @property
    def state(self) -> BreakTimerState:
        return BreakTimerState(phase=self._phase, remaining_seconds=self._remaining)

    def set_break_duration(self, minutes: int) -> None:
        """Change the break length; a break already running keeps its countdown."""
        _check_duration(minutes)
        self._duration_minutes = minutes
        if self._phase is not BreakPhase.ACTIVE:
            self._remaining = self.break_duration_seconds

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def trigger(self) -> bool:
        """Reading threshold reached: ask the user to take a break."""
        if not self._expect(BreakPhase.IDLE, "trigger"):
            return False
        self._phase = BreakPhase.PROMPTING
        logger.info("Prompting for a %d-minute break", self._duration_minutes)
        self._haptics.notify(NotificationKind.WARNING)
        if self.on_prompt is not None:
            self.on_prompt()
        return True

    def take_break(self) -> bool:
        if not self._expect(BreakPhase.PROMPTING, "take_break"):
            return False
        self._phase = BreakPhase.ACTIVE
        self._remaining = self.break_duration_seconds
        self._handle = self._scheduler.every(TICK_SECONDS, self._tick)
        logger.info("Break started (%ds)", self._remaining)
        self._haptics.impact(ImpactStyle.MEDIUM)
        return True

    def skip(self) -> bool:
        if not self._expect(BreakPhase.PROMPTING, "skip"):
            return False
        self._to_idle()
        logger.info("Break skipped")
        self._haptics.impact(ImpactStyle.LIGHT)
        return True

    def end_early(self) -> bool:
        """Stop a running break now. Idempotent: a no-op while idle."""
        if self._phase is BreakPhase.IDLE:
            return False
        if not self._expect(BreakPhase.ACTIVE, "end_early"):
            return False
        logger.info("Break ended early with %ds left", self._remaining)
        self._to_idle()
        self._haptics.impact(ImpactStyle.LIGHT)
        return True

    def close(self) -> None:
        """Tear down: cancel any tick and return to IDLE without signalling."""
        self._to_idle()

    def __enter__(self) -> "BreakTimer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _expect(self, phase: BreakPhase, command: str) -> bool:
        if self._phase is phase:
            return True
        logger.warning(
            "Invalid transition: %s() while %s; ignored", command, self._phase.value
        )
        return False

    def _to_idle(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._phase = BreakPhase.IDLE
        self._remaining = self.break_duration_seconds

    def _tick(self) -> None:
        if self._phase is not BreakPhase.ACTIVE:
            return
        self._remaining -= 1
        if self._remaining > 0:
            if self.on_tick is not None:
                self.on_tick(self._remaining)
            return

        if self.on_tick is not None:
            self.on_tick(0)
            # The handler may have ended the break itself.
            if self._phase is not BreakPhase.ACTIVE:
                return
        self._to_idle()
        logger.info("Break finished")
        self._haptics.notify(NotificationKind.SUCCESS)
        if self.on_finished is not None:
            self.on_finished()


def _check_duration(minutes: int) -> None:
    if minutes <= 0:
        raise ValueError("break duration must be positive, got {}".format(minutes))


class BreakReminderClock:
    """Triggers a BreakTimer after every interval of reading time.

    WHY: The settings screen offers automatic break reminders every
    5/10/15/20/30 minutes. The clock issues BreakTimer.trigger() on that
    cadence while enabled; a trigger that lands while a prompt or break
    is already showing is simply dropped.

    HOW: A repeating timer with period interval_minutes * 60 on the same
    Scheduler as the BreakTimer. start()/stop() are idempotent.
    """

    def __init__(self, scheduler: Scheduler, timer: BreakTimer, interval_minutes: int) -> None:
        if interval_minutes <= 0:
            raise ValueError("interval must be positive, got {}".format(interval_minutes))
        self._scheduler = scheduler
        self._timer = timer
        self._interval_minutes = interval_minutes
        self._handle: Optional[TickHandle] = None

    @property
    def running(self) -> bool:
        return self._handle is not None

    def start(self) -> None:
        if self._handle is not None:
            return
        self._handle = self._scheduler.every(self._interval_minutes * 60, self._fire)
        logger.debug("Break reminders every %d minutes", self._interval_minutes)

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        if self._timer.phase is BreakPhase.IDLE:
            self._timer.trigger()
        else:
            logger.debug("Reminder due while %s; skipped", self._timer.phase.value)

    def __enter__(self) -> "BreakReminderClock":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
