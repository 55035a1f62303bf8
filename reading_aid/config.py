"""Configuration constants, reading-rate limits, and .env loading.

WHY: Centralizes all tunable values (rate limits, the words-per-minute
baseline, break durations, storage paths) so they are easy to find and
override without touching engine logic.

HOW: python-dotenv loads the .env file on import. Constants are plain
module-level values; the few that deployments may want to change read
an environment variable first.

RULES:
- Reading rate is always clamped into [READING_RATE_MIN, READING_RATE_MAX]
- BASELINE_WORDS_PER_MINUTE is the highlight cadence at rate 1.0
- Break intervals are restricted to BREAK_INTERVAL_CHOICES
- Storage/rule file paths are optional; None means "use in-memory defaults"
"""

from __future__ import annotations

import os
from typing import Tuple

from dotenv import load_dotenv

# Load .env from the project root (where the app is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Reading rate
# ---------------------------------------------------------------------------

READING_RATE_MIN = 0.3
READING_RATE_MAX = 1.5
READING_RATE_STEP = 0.1

BASELINE_WORDS_PER_MINUTE = 200
"""Assumed narration speed at rate 1.0; highlighting scales linearly."""

DEFAULT_READING_RATE = float(os.getenv("READING_AID_DEFAULT_RATE", "0.8"))


def clamp_rate(rate: float) -> float:
    """Clamp a reading rate into the supported range.

    WHY: Narration engines accept a narrow band of speeds, and the
    highlight cadence is derived from the same number. Callers clamp
    before handing the rate to the playback synchronizer.

    RULES:
    - Values below READING_RATE_MIN become READING_RATE_MIN
    - Values above READING_RATE_MAX become READING_RATE_MAX
    """
    return max(READING_RATE_MIN, min(READING_RATE_MAX, rate))


# ---------------------------------------------------------------------------
# Breaks
# ---------------------------------------------------------------------------

DEFAULT_BREAK_DURATION_MINUTES = int(os.getenv("READING_AID_BREAK_MINUTES", "5"))

BREAK_INTERVAL_CHOICES: Tuple[int, ...] = (5, 10, 15, 20, 30)
"""Minutes of reading between break prompts offered by the settings screen."""

DEFAULT_BREAK_INTERVAL_MINUTES = 15

# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------

SETTINGS_PATH = os.getenv("READING_AID_SETTINGS_PATH") or None
RULES_PATH = os.getenv("READING_AID_RULES_PATH") or None
