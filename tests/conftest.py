"""Shared test fixtures for the reading_aid test suite.

WHY: The state-machine tests all need a deterministic clock and
collaborators that record what the core asked them to do. Centralizing
them here keeps every test module on the same fakes.

HOW: ``scheduler`` is a fresh ManualScheduler (virtual time starting at
0). RecordingNarrator keeps the callbacks handed to speak() so a test
can play the narration engine finishing or being cut off. RecordingHaptics
logs every effect as a (kind, value) tuple.

RULES:
- Fakes never call back on their own; tests decide when narration ends
- Every fixture returns a new instance (no shared mutable state)
"""

from typing import Callable, List, Optional, Tuple

import pytest

from reading_aid.core.effects import ImpactStyle, NotificationKind
from reading_aid.core.scheduler import ManualScheduler

SAMPLE_MISSPELLED = "Ths is a sentance with som speling erors that ned to be corected."
SAMPLE_COMPLEX = (
    "The implementation of comprehensive educational methodologies necessitates "
    "the utilization of multifaceted pedagogical approaches to facilitate "
    "optimal learning outcomes."
)


class RecordingNarrator:
    """Narrator fake that records speak/stop calls."""

    def __init__(self) -> None:
        self.spoken: List[Tuple[str, float]] = []
        self.stop_calls = 0
        self.on_done: Optional[Callable[[], None]] = None
        self.on_stopped: Optional[Callable[[], None]] = None

    def speak(self, text, rate, on_done=None, on_stopped=None) -> None:
        self.spoken.append((text, rate))
        self.on_done = on_done
        self.on_stopped = on_stopped

    def stop(self) -> None:
        self.stop_calls += 1

    def finish(self) -> None:
        """Play the engine reaching the end of the text."""
        assert self.on_done is not None
        self.on_done()

    def cut_off(self) -> None:
        """Play the engine reporting that narration was stopped."""
        assert self.on_stopped is not None
        self.on_stopped()


class RecordingHaptics:
    def __init__(self) -> None:
        self.effects: List[Tuple[str, str]] = []

    def impact(self, style: ImpactStyle) -> None:
        self.effects.append(("impact", style.value))

    def notify(self, kind: NotificationKind) -> None:
        self.effects.append(("notify", kind.value))


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def narrator():
    return RecordingNarrator()


@pytest.fixture
def haptics():
    return RecordingHaptics()


@pytest.fixture
def misspelled_text():
    """The word corrector's sample sentence."""
    return SAMPLE_MISSPELLED


@pytest.fixture
def complex_text():
    """The text simplifier's sample sentence."""
    return SAMPLE_COMPLEX
