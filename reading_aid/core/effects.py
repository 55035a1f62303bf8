"""Interfaces for the narration engine and haptic feedback sink.

WHY: Text-to-speech and device vibration are platform effects the core
triggers but never implements. Declaring them as small protocols lets
the app plug in a real engine while tests plug in recorders.

HOW: Narrator and Haptics are typing.Protocol classes. NullNarrator and
NullHaptics are do-nothing defaults (they log at DEBUG). GatedHaptics
wraps a sink and drops effects while the user has haptics switched off.

RULES:
- All effect calls are fire-and-forget; return values are ignored
- Narrator.speak() reports the end of narration only through on_done /
  on_stopped; there is no word-level progress
"""

from __future__ import annotations

import enum
import logging
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class ImpactStyle(str, enum.Enum):
    """Strength of a tap-style haptic impact."""

    LIGHT = "light"
    MEDIUM = "medium"
    HEAVY = "heavy"


class NotificationKind(str, enum.Enum):
    """Pattern of a notification-style haptic."""

    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Narrator(Protocol):
    """External text-to-speech engine."""

    def speak(
        self,
        text: str,
        rate: float,
        on_done: Optional[Callable[[], None]] = None,
        on_stopped: Optional[Callable[[], None]] = None,
    ) -> None:
        """Start narrating text; call on_done at the end or on_stopped if cut short."""

    def stop(self) -> None:
        """Stop narration as soon as possible (fire-and-forget)."""


class Haptics(Protocol):
    """External haptic feedback sink."""

    def impact(self, style: ImpactStyle) -> None: ...

    def notify(self, kind: NotificationKind) -> None: ...


class NullNarrator:
    """Narrator that says nothing; used when no speech engine is available."""

    def speak(self, text, rate, on_done=None, on_stopped=None) -> None:
        logger.debug("Narration requested at rate %.2f (%d chars)", rate, len(text))

    def stop(self) -> None:
        logger.debug("Narration stop requested")


class NullHaptics:
    def impact(self, style: ImpactStyle) -> None:
        logger.debug("Haptic impact: %s", style.value)

    def notify(self, kind: NotificationKind) -> None:
        logger.debug("Haptic notification: %s", kind.value)


class GatedHaptics:
    """Forward haptic effects only while the user has them enabled.

    ``enabled`` is a callable so the gate follows live settings changes
    without rewiring the state machines that hold this sink.
    """

    def __init__(self, sink: Haptics, enabled: Callable[[], bool]) -> None:
        self._sink = sink
        self._enabled = enabled

    def impact(self, style: ImpactStyle) -> None:
        if self._enabled():
            self._sink.impact(style)

    def notify(self, kind: NotificationKind) -> None:
        if self._enabled():
            self._sink.notify(kind)
