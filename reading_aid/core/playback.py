"""Word-highlight playback synchronizer for the read-aloud view.

WHY: While the narration engine reads text aloud, the reader highlights
the word being spoken. The engine only reports "finished" or "stopped",
never word-level progress, so the highlight runs on its own clock: a
fixed cadence of BASELINE_WORDS_PER_MINUTE scaled by the reading rate.
Narration and highlight are started together and are expected (not
guaranteed) to stay close. Drift is accepted rather than hidden behind
a synchronization guarantee the engine cannot give.

HOW: PlaybackSynchronizer is a two-state machine (STOPPED, RUNNING).
start() schedules a repeating tick on the injected Scheduler and asks the
narrator to speak; each tick advances current_index; the tick after the
last word stops playback and fires on_complete. stop() and the narrator's
end-of-narration callbacks reset to the idle state.

RULES:
- current_index is in [-1, token_count - 1]; -1 exactly when stopped
- Tick period = 60 / (rate * BASELINE_WORDS_PER_MINUTE) seconds
- rate must already be clamped by the caller (see config.clamp_rate)
- start() while running restarts: stop the old cycle, then start anew;
  there is never more than one tick schedule
- stop() is idempotent and never fires on_complete
- Narrator callbacks from an earlier cycle are ignored
- Use as a context manager (or call close()) so ticks are always cancelled
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from reading_aid.config import BASELINE_WORDS_PER_MINUTE, DEFAULT_READING_RATE, clamp_rate
from reading_aid.core.effects import Haptics, ImpactStyle, Narrator, NullHaptics, NullNarrator
from reading_aid.core.scheduler import Scheduler, TickHandle

logger = logging.getLogger(__name__)


class PlaybackStatus(str, enum.Enum):
    STOPPED = "stopped"
    RUNNING = "running"


@dataclass(frozen=True)
class PlaybackState:
    """Snapshot of the synchronizer for the UI layer."""

    is_active: bool
    current_index: int
    rate: float
    token_count: int


def highlight_interval(rate: float) -> float:
    """Seconds between word advances at the given reading rate."""
    return 60.0 / (rate * BASELINE_WORDS_PER_MINUTE)


def adjust_rate(current: float, increment: float) -> float:
    """Apply a speed-button step, clamped to the supported range.

    Rounded to two decimals so repeated 0.1 steps stay readable
    (0.8 + 0.1 is 0.9, not 0.9000000000000001).
    """
    return round(clamp_rate(current + increment), 2)


class PlaybackSynchronizer:
    """Advances a highlighted word index alongside external narration.

    Args:
        scheduler: Tick source for the word-advance cadence.
        narrator: Text-to-speech collaborator; defaults to NullNarrator.
        haptics: Haptic sink; defaults to NullHaptics.
        on_tick: Called with the new current_index on start and each advance.
        on_complete: Called once when the last word's time has elapsed.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        narrator: Optional[Narrator] = None,
        haptics: Optional[Haptics] = None,
        on_tick: Optional[Callable[[int], None]] = None,
        on_complete: Optional[Callable[[], None]] = None,
    ) -> None:
        self._scheduler = scheduler
        self._narrator = narrator if narrator is not None else NullNarrator()
        self._haptics = haptics if haptics is not None else NullHaptics()
        self.on_tick = on_tick
        self.on_complete = on_complete

        self._handle: Optional[TickHandle] = None
        self._current_index = -1
        self._token_count = 0
        self._rate = DEFAULT_READING_RATE
        self._cycle = 0

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def status(self) -> PlaybackStatus:
        return PlaybackStatus.RUNNING if self._handle is not None else PlaybackStatus.STOPPED

    @property
    def is_active(self) -> bool:
        return self._handle is not None

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def state(self) -> PlaybackState:
        return PlaybackState(
            is_active=self.is_active,
            current_index=self._current_index,
            rate=self._rate,
            token_count=self._token_count,
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start(self, token_count: int, rate: float, text: Optional[str] = None) -> bool:
        """Begin highlighting token_count words at the given rate.

        HOW: Restarts if already running. Schedules the repeating tick
        first, then asks the narrator to speak ``text`` (when given), then
        reports index 0 through on_tick.

        RULES:
        - token_count <= 0 → nothing to read; logged, returns False
        - rate <= 0 → ValueError (callers clamp into [0.3, 1.5])

        Returns:
            True if playback started.
        """
        if rate <= 0:
            raise ValueError("rate must be positive, got {}".format(rate))
        if token_count <= 0:
            logger.warning("Ignoring playback start: no words to read")
            return False

        if self.is_active:
            logger.debug("Restarting playback (cycle %d)", self._cycle)
            self.stop()

        self._cycle += 1
        cycle = self._cycle
        self._token_count = token_count
        self._rate = rate
        self._current_index = 0

        interval = highlight_interval(rate)
        self._handle = self._scheduler.every(interval, self._tick)
        logger.info(
            "Playback started: %d words at rate %.2f (%.3fs per word)",
            token_count, rate, interval,
        )
        self._haptics.impact(ImpactStyle.LIGHT)

        if text is not None:
            self._narrator.speak(
                text,
                rate,
                on_done=lambda: self._on_narration_end(cycle, "finished"),
                on_stopped=lambda: self._on_narration_end(cycle, "stopped"),
            )

        # The narrator may have ended this cycle synchronously.
        if self._cycle == cycle and self.is_active:
            self._emit_tick(0)
        return True

    def stop(self) -> None:
        """Cancel playback and tell the narrator to stop. No-op when stopped."""
        if not self.is_active:
            return
        self._reset()
        self._narrator.stop()
        logger.info("Playback stopped")

    def close(self) -> None:
        """Release the tick schedule; the synchronizer stays reusable."""
        self.stop()

    def __enter__(self) -> "PlaybackSynchronizer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _reset(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._current_index = -1

    def _emit_tick(self, index: int) -> None:
        if self.on_tick is not None:
            self.on_tick(index)

    def _tick(self) -> None:
        if self._current_index + 1 < self._token_count:
            self._current_index += 1
            self._emit_tick(self._current_index)
            return

        self._reset()
        self._narrator.stop()
        logger.info("Playback complete after %d words", self._token_count)
        if self.on_complete is not None:
            self.on_complete()

    def _on_narration_end(self, cycle: int, reason: str) -> None:
        if cycle != self._cycle or not self.is_active:
            return
        logger.info(
            "Narration %s at word %d of %d; resetting highlight",
            reason, self._current_index + 1, self._token_count,
        )
        self._reset()
