"""Simulated speech-to-text capture flow.

WHY: The speech-to-text screen lets a user dictate instead of typing.
No recognition engine is bundled, so capture is simulated: listening for
a few seconds produces a fixed transcript. The surrounding flow (append
to the current text, save recent texts, reload one) is real and is what
the screen relies on.

HOW: DictationSession holds the transcript and a short history. Listening
schedules a one-shot timer on the injected Scheduler; when it fires, the
simulated text is appended and listening ends.

RULES:
- Appended text is joined to existing text with one space
- stop_listening() cancels the pending recognition (nothing is appended)
- save() ignores blank transcripts and keeps the MAX_SAVED_TEXTS newest,
  newest first
- close() (or leaving the context manager) cancels any pending timer
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from reading_aid.core.effects import Haptics, ImpactStyle, NotificationKind, NullHaptics
from reading_aid.core.scheduler import Scheduler, TickHandle

logger = logging.getLogger(__name__)

SIMULATED_TRANSCRIPT = (
    "This is a simulated speech-to-text conversion. In a real implementation, "
    "this would use the device's speech recognition capabilities."
)
RECOGNITION_DELAY_SECONDS = 3.0
MAX_SAVED_TEXTS = 5


class DictationSession:
    def __init__(
        self,
        scheduler: Scheduler,
        haptics: Optional[Haptics] = None,
        on_transcribed: Optional[Callable[[str], None]] = None,
        simulated_text: str = SIMULATED_TRANSCRIPT,
        delay_seconds: float = RECOGNITION_DELAY_SECONDS,
    ) -> None:
        self._scheduler = scheduler
        self._haptics = haptics if haptics is not None else NullHaptics()
        self.on_transcribed = on_transcribed
        self._simulated_text = simulated_text
        self._delay = delay_seconds

        self.transcript = ""
        self._saved: List[str] = []
        self._handle: Optional[TickHandle] = None

    @property
    def is_listening(self) -> bool:
        return self._handle is not None

    @property
    def saved_texts(self) -> List[str]:
        return list(self._saved)

    def start_listening(self) -> bool:
        if self.is_listening:
            logger.warning("Invalid transition: start_listening() while listening; ignored")
            return False
        self._handle = self._scheduler.after(self._delay, self._recognized)
        self._haptics.impact(ImpactStyle.MEDIUM)
        logger.debug("Listening")
        return True

    def stop_listening(self) -> None:
        if self._handle is None:
            return
        self._handle.cancel()
        self._handle = None
        self._haptics.impact(ImpactStyle.LIGHT)

    def clear(self) -> None:
        self.transcript = ""
        self._haptics.impact(ImpactStyle.LIGHT)

    def save(self) -> bool:
        """Push the current transcript onto the saved list."""
        if not self.transcript.strip():
            return False
        self._saved = [self.transcript] + self._saved[: MAX_SAVED_TEXTS - 1]
        self._haptics.notify(NotificationKind.SUCCESS)
        return True

    def restore(self, index: int) -> str:
        """Make saved text number ``index`` the current transcript."""
        self.transcript = self._saved[index]
        return self.transcript

    def close(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def __enter__(self) -> "DictationSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _recognized(self) -> None:
        self._handle = None
        if self.transcript:
            self.transcript = self.transcript + " " + self._simulated_text
        else:
            self.transcript = self._simulated_text
        logger.info("Recognized %d characters", len(self._simulated_text))
        self._haptics.notify(NotificationKind.SUCCESS)
        if self.on_transcribed is not None:
            self.on_transcribed(self.transcript)
