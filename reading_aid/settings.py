"""Reader settings model and persistence.

WHY: Font, spacing, contrast, haptics, break reminders and reading speed
are chosen on the settings screen and read by every other screen. The
core holds no global state, so settings live in one explicit object the
UI layer owns and passes (or reads values from) into core calls.

HOW: ReaderSettings is a Pydantic model: enums for the closed choices,
validators for break intervals and reading speed. SettingsRepository
stores it as JSON under one key of an injected KeyValueStore.

RULES:
- Defaults match the app's factory settings (medium Lexend, normal
  spacing, haptics and auto breaks on, 15-minute interval, 5-minute break)
- break_interval_minutes must be one of BREAK_INTERVAL_CHOICES
- reading_speed is clamped (not rejected) into the supported rate range
- Corrupt stored settings are logged and replaced by defaults on load
- update() validates the merged result before anything is saved
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, Field, ValidationError, field_validator

from reading_aid.config import (
    BREAK_INTERVAL_CHOICES,
    DEFAULT_BREAK_DURATION_MINUTES,
    DEFAULT_BREAK_INTERVAL_MINUTES,
    DEFAULT_READING_RATE,
    clamp_rate,
)
from reading_aid.storage import KeyValueStore

logger = logging.getLogger(__name__)

SETTINGS_KEY = "reader_settings"


class FontSize(str, Enum):
    small = "small"
    medium = "medium"
    large = "large"
    xlarge = "xlarge"


FONT_SIZE_POINTS: Dict[FontSize, int] = {
    FontSize.small: 16,
    FontSize.medium: 18,
    FontSize.large: 22,
    FontSize.xlarge: 26,
}


class FontFamily(str, Enum):
    """Reading fonts; Lexend and OpenDyslexic are designed for dyslexic readers."""

    lexend = "lexend"
    opendyslexic = "opendyslexic"
    system = "system"


class WordSpacing(str, Enum):
    normal = "normal"
    wide = "wide"
    extra_wide = "extra-wide"


class ReaderSettings(BaseModel):
    """All user-adjustable reading preferences."""

    model_config = {"extra": "forbid"}

    font_size: FontSize = Field(default=FontSize.medium, description="Text size preset.")
    font_family: FontFamily = Field(default=FontFamily.lexend, description="Reading font.")
    word_spacing: WordSpacing = Field(default=WordSpacing.normal, description="Gap between words.")
    high_contrast: bool = Field(default=False, description="Use the high-contrast palette.")
    haptic_feedback: bool = Field(default=True, description="Vibrate on interactions.")
    auto_breaks: bool = Field(default=True, description="Prompt for breaks automatically.")
    break_interval_minutes: int = Field(
        default=DEFAULT_BREAK_INTERVAL_MINUTES,
        description="Minutes of reading between break prompts.",
    )
    break_duration_minutes: int = Field(
        default=DEFAULT_BREAK_DURATION_MINUTES,
        ge=1,
        description="Length of a break in minutes.",
    )
    parental_controls: bool = Field(default=False, description="Restrict feature access.")
    reading_speed: float = Field(
        default=DEFAULT_READING_RATE,
        description="Narration rate multiplier (clamped to 0.3-1.5).",
    )

    @field_validator("break_interval_minutes")
    @classmethod
    def _check_break_interval(cls, value: int) -> int:
        if value not in BREAK_INTERVAL_CHOICES:
            raise ValueError(
                "break interval must be one of {}".format(
                    ", ".join(str(choice) for choice in BREAK_INTERVAL_CHOICES)
                )
            )
        return value

    @field_validator("reading_speed")
    @classmethod
    def _clamp_reading_speed(cls, value: float) -> float:
        return round(clamp_rate(value), 2)

    @property
    def font_size_points(self) -> int:
        return FONT_SIZE_POINTS[self.font_size]


class SettingsRepository:
    """Load and save ReaderSettings through a KeyValueStore.

    WHY: The settings screen edits one field at a time; other screens
    only read. A repository keeps serialization and validation in one
    place and leaves the storage medium to the platform.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def load(self) -> ReaderSettings:
        raw = self._store.get(SETTINGS_KEY)
        if raw is None:
            return ReaderSettings()
        try:
            return ReaderSettings.model_validate_json(raw)
        except ValidationError:
            logger.warning("Stored settings are invalid; using defaults")
            return ReaderSettings()

    def save(self, settings: ReaderSettings) -> None:
        self._store.set(SETTINGS_KEY, settings.model_dump_json())

    def update(self, **changes: Any) -> ReaderSettings:
        """Apply field changes, validate, save, and return the new settings.

        Raises:
            pydantic.ValidationError: If the merged settings are invalid
                (nothing is saved in that case).
        """
        merged = self.load().model_dump()
        merged.update(changes)
        settings = ReaderSettings.model_validate(merged)
        self.save(settings)
        if changes.get("parental_controls"):
            logger.info("Parental controls enabled")
        return settings

    def reset(self) -> ReaderSettings:
        """Restore factory defaults."""
        self._store.delete(SETTINGS_KEY)
        logger.info("Settings reset to defaults")
        return ReaderSettings()
