"""Tests for the word-highlight playback synchronizer.

WHY: The highlight must walk every word exactly once, stop cleanly on
every exit path, and never leave a tick running. These are the
behaviors a reader notices first when they break.

HOW: A ManualScheduler drives ticks; RecordingNarrator and
RecordingHaptics capture the platform effects.
  - TestCadence: interval math and rate steps
  - TestLifecycle: start, tick, complete, stop
  - TestRestart: start while running, stale narrator callbacks
  - TestNarratorCallbacks: engine finishing or being cut off
  - TestTeardown: context manager and close()
"""

import pytest

from reading_aid.core.playback import (
    PlaybackState,
    PlaybackStatus,
    PlaybackSynchronizer,
    adjust_rate,
    highlight_interval,
)


@pytest.fixture
def events():
    return {"ticks": [], "complete": 0}


@pytest.fixture
def sync(scheduler, narrator, haptics, events):
    def on_complete():
        events["complete"] += 1

    return PlaybackSynchronizer(
        scheduler,
        narrator=narrator,
        haptics=haptics,
        on_tick=events["ticks"].append,
        on_complete=on_complete,
    )


# ---------------------------------------------------------------------------
# TestCadence
# ---------------------------------------------------------------------------


class TestCadence:
    @pytest.mark.parametrize("rate, expected", [
        (1.0, 0.3),
        (0.5, 0.6),
        (1.5, 0.2),
        (0.3, 1.0),
    ])
    def test_highlight_interval(self, rate, expected):
        assert highlight_interval(rate) == pytest.approx(expected)

    def test_adjust_rate_steps(self):
        assert adjust_rate(0.8, 0.1) == 0.9
        assert adjust_rate(0.8, -0.1) == 0.7

    def test_adjust_rate_clamps(self):
        assert adjust_rate(1.5, 0.1) == 1.5
        assert adjust_rate(0.3, -0.1) == 0.3

    def test_tick_spacing_follows_rate(self, scheduler, sync, events):
        sync.start(10, 1.0)
        scheduler.advance(0.3)
        assert events["ticks"] == [0, 1]
        scheduler.advance(0.29)
        assert events["ticks"] == [0, 1]
        scheduler.advance(0.01)
        assert events["ticks"] == [0, 1, 2]


# ---------------------------------------------------------------------------
# TestLifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    def test_initial_state(self, sync):
        assert sync.status is PlaybackStatus.STOPPED
        assert sync.current_index == -1
        assert not sync.is_active

    def test_start_highlights_first_word(self, scheduler, sync, events, haptics):
        assert sync.start(5, 1.0) is True
        assert sync.is_active
        assert sync.current_index == 0
        assert events["ticks"] == [0]
        assert scheduler.pending == 1
        assert haptics.effects == [("impact", "light")]

    def test_runs_to_completion(self, scheduler, sync, events):
        sync.start(5, 1.0)
        for _ in range(4):
            scheduler.step()
        assert sync.current_index == 4
        assert events["complete"] == 0

        scheduler.step()
        assert not sync.is_active
        assert sync.current_index == -1
        assert events["complete"] == 1
        assert events["ticks"] == [0, 1, 2, 3, 4]
        assert scheduler.pending == 0

    def test_completion_stops_narrator(self, scheduler, sync, narrator):
        sync.start(2, 1.0, text="two words")
        scheduler.advance(10)
        assert narrator.stop_calls == 1

    def test_index_always_in_range(self, scheduler, sync):
        seen = []
        sync.on_tick = seen.append
        sync.start(3, 1.5)
        while scheduler.step():
            seen.append(sync.current_index)
        assert all(-1 <= i <= 2 for i in seen)

    def test_stop_midway(self, scheduler, sync, events, narrator):
        sync.start(5, 1.0, text="one two three four five")
        scheduler.step()
        sync.stop()
        assert sync.current_index == -1
        assert not sync.is_active
        assert events["complete"] == 0
        assert narrator.stop_calls == 1
        assert scheduler.pending == 0

    def test_stop_is_idempotent(self, sync, narrator):
        sync.start(5, 1.0)
        sync.stop()
        sync.stop()
        assert narrator.stop_calls == 1

    def test_stop_when_never_started(self, sync, narrator):
        sync.stop()
        assert narrator.stop_calls == 0
        assert sync.current_index == -1

    def test_zero_tokens_does_not_start(self, scheduler, sync, events):
        assert sync.start(0, 1.0) is False
        assert not sync.is_active
        assert events["ticks"] == []
        assert scheduler.pending == 0

    @pytest.mark.parametrize("rate", [0, -1.0])
    def test_non_positive_rate_rejected(self, sync, rate):
        with pytest.raises(ValueError):
            sync.start(5, rate)

    def test_narrator_receives_text_and_rate(self, sync, narrator):
        sync.start(3, 0.8, text="read this aloud")
        assert narrator.spoken == [("read this aloud", 0.8)]

    def test_no_narration_without_text(self, sync, narrator):
        sync.start(3, 0.8)
        assert narrator.spoken == []

    def test_state_snapshot(self, sync):
        sync.start(4, 0.5)
        assert sync.state == PlaybackState(
            is_active=True, current_index=0, rate=0.5, token_count=4
        )


# ---------------------------------------------------------------------------
# TestRestart
# ---------------------------------------------------------------------------


class TestRestart:
    def test_start_while_running_restarts(self, scheduler, sync, events, narrator):
        sync.start(5, 1.0, text="a b c d e")
        scheduler.step()
        scheduler.step()
        assert sync.current_index == 2

        sync.start(3, 1.0, text="x y z")
        assert sync.current_index == 0
        assert scheduler.pending == 1
        assert narrator.stop_calls == 1
        assert events["complete"] == 0

    def test_stale_narrator_callback_ignored(self, scheduler, sync, narrator):
        sync.start(5, 1.0, text="first text here")
        stale_stopped = narrator.on_stopped
        sync.start(5, 1.0, text="second text here")

        stale_stopped()
        assert sync.is_active
        assert sync.current_index == 0

    def test_restart_from_on_complete(self, scheduler, sync):
        restarts = []

        def on_complete():
            if not restarts:
                restarts.append(1)
                sync.start(2, 1.0)

        sync.on_complete = on_complete
        sync.start(1, 1.0)
        scheduler.step()
        assert sync.is_active
        assert sync.current_index == 0
        assert scheduler.pending == 1


# ---------------------------------------------------------------------------
# TestNarratorCallbacks
# ---------------------------------------------------------------------------


class TestNarratorCallbacks:
    def test_narration_finished_resets_without_completion(self, scheduler, sync, events, narrator):
        sync.start(10, 1.0, text="some long text")
        scheduler.step()
        narrator.finish()
        assert not sync.is_active
        assert sync.current_index == -1
        assert events["complete"] == 0
        assert narrator.stop_calls == 0
        assert scheduler.pending == 0

    def test_narration_cut_off_resets(self, scheduler, sync, narrator):
        sync.start(10, 1.0, text="some long text")
        narrator.cut_off()
        assert not sync.is_active
        assert scheduler.pending == 0

    def test_callback_after_stop_ignored(self, sync, narrator):
        sync.start(10, 1.0, text="text")
        sync.stop()
        narrator.finish()
        assert sync.current_index == -1

    def test_narrator_ending_synchronously(self, scheduler, events):
        class InstantNarrator:
            def speak(self, text, rate, on_done=None, on_stopped=None):
                on_done()

            def stop(self):
                pass

        sync = PlaybackSynchronizer(scheduler, narrator=InstantNarrator(), on_tick=events["ticks"].append)
        assert sync.start(3, 1.0, text="a b c") is True
        assert not sync.is_active
        assert events["ticks"] == []
        assert scheduler.pending == 0


# ---------------------------------------------------------------------------
# TestTeardown
# ---------------------------------------------------------------------------


class TestTeardown:
    def test_context_manager_cancels_ticks(self, scheduler, narrator):
        with PlaybackSynchronizer(scheduler, narrator=narrator) as sync:
            sync.start(5, 1.0)
            assert scheduler.pending == 1
        assert scheduler.pending == 0
        assert not sync.is_active

    def test_context_manager_cancels_on_error(self, scheduler):
        with pytest.raises(RuntimeError):
            with PlaybackSynchronizer(scheduler) as sync:
                sync.start(5, 1.0)
                raise RuntimeError("screen torn down")
        assert scheduler.pending == 0

    def test_reusable_after_close(self, scheduler, sync):
        sync.start(2, 1.0)
        sync.close()
        assert sync.start(2, 1.0) is True
        assert scheduler.pending == 1
