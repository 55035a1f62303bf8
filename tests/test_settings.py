"""Tests for reader settings, the key-value stores, and gated haptics.

WHY: Settings are read by every screen. A corrupt file or an invalid
value must never take the app down, and a rejected update must never
be half-saved.

HOW:
  - TestReaderSettings: model defaults and validators
  - TestSettingsRepository: load/update/reset over a MemoryStore
  - TestJsonFileStore: on-disk persistence under tmp_path
  - TestGatedHaptics: haptics follow the haptic_feedback setting
"""

import json

import pytest
from pydantic import ValidationError

from reading_aid.core.effects import GatedHaptics, ImpactStyle, NotificationKind
from reading_aid.settings import (
    SETTINGS_KEY,
    FontFamily,
    FontSize,
    ReaderSettings,
    SettingsRepository,
    WordSpacing,
)
from reading_aid.storage import JsonFileStore, MemoryStore


# ---------------------------------------------------------------------------
# TestReaderSettings
# ---------------------------------------------------------------------------


class TestReaderSettings:
    def test_defaults(self):
        settings = ReaderSettings()
        assert settings.font_size is FontSize.medium
        assert settings.font_family is FontFamily.lexend
        assert settings.word_spacing is WordSpacing.normal
        assert settings.high_contrast is False
        assert settings.haptic_feedback is True
        assert settings.auto_breaks is True
        assert settings.break_interval_minutes == 15
        assert settings.break_duration_minutes == 5
        assert settings.parental_controls is False
        assert settings.reading_speed == 0.8

    @pytest.mark.parametrize("size, points", [
        ("small", 16), ("medium", 18), ("large", 22), ("xlarge", 26),
    ])
    def test_font_size_points(self, size, points):
        assert ReaderSettings(font_size=size).font_size_points == points

    def test_extra_wide_spacing_value(self):
        assert ReaderSettings(word_spacing="extra-wide").word_spacing is WordSpacing.extra_wide

    @pytest.mark.parametrize("minutes", [5, 10, 15, 20, 30])
    def test_allowed_break_intervals(self, minutes):
        assert ReaderSettings(break_interval_minutes=minutes).break_interval_minutes == minutes

    @pytest.mark.parametrize("minutes", [0, 7, 60])
    def test_other_break_intervals_rejected(self, minutes):
        with pytest.raises(ValidationError):
            ReaderSettings(break_interval_minutes=minutes)

    def test_break_duration_must_be_positive(self):
        with pytest.raises(ValidationError):
            ReaderSettings(break_duration_minutes=0)

    @pytest.mark.parametrize("speed, expected", [
        (2.0, 1.5),
        (0.1, 0.3),
        (1.0, 1.0),
        (0.9000000000000001, 0.9),
    ])
    def test_reading_speed_clamped(self, speed, expected):
        assert ReaderSettings(reading_speed=speed).reading_speed == expected

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            ReaderSettings(dark_mode=True)

    def test_unknown_font_rejected(self):
        with pytest.raises(ValidationError):
            ReaderSettings(font_family="comic-sans")


# ---------------------------------------------------------------------------
# TestSettingsRepository
# ---------------------------------------------------------------------------


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def repository(store):
    return SettingsRepository(store)


class TestSettingsRepository:
    def test_load_defaults_when_empty(self, repository):
        assert repository.load() == ReaderSettings()

    def test_save_and_load(self, repository):
        repository.save(ReaderSettings(font_size="large", high_contrast=True))
        loaded = repository.load()
        assert loaded.font_size is FontSize.large
        assert loaded.high_contrast is True

    def test_update_merges(self, repository):
        repository.update(font_family="opendyslexic")
        settings = repository.update(reading_speed=1.2)
        assert settings.font_family is FontFamily.opendyslexic
        assert settings.reading_speed == 1.2
        assert repository.load() == settings

    def test_invalid_update_saves_nothing(self, repository, store):
        repository.update(high_contrast=True)
        before = store.get(SETTINGS_KEY)
        with pytest.raises(ValidationError):
            repository.update(break_interval_minutes=7, font_size="small")
        assert store.get(SETTINGS_KEY) == before
        assert repository.load().font_size is FontSize.medium

    def test_corrupt_store_falls_back_to_defaults(self, caplog):
        repository = SettingsRepository(MemoryStore({SETTINGS_KEY: "{not json"}))
        assert repository.load() == ReaderSettings()
        assert "invalid" in caplog.text

    def test_stored_invalid_value_falls_back(self):
        raw = json.dumps({"break_interval_minutes": 7})
        repository = SettingsRepository(MemoryStore({SETTINGS_KEY: raw}))
        assert repository.load() == ReaderSettings()

    def test_reset(self, repository, store):
        repository.update(font_size="xlarge")
        assert repository.reset() == ReaderSettings()
        assert store.get(SETTINGS_KEY) is None
        assert repository.load() == ReaderSettings()


# ---------------------------------------------------------------------------
# TestJsonFileStore
# ---------------------------------------------------------------------------


class TestJsonFileStore:
    def test_missing_file_is_empty(self, tmp_path):
        assert JsonFileStore(tmp_path / "missing.json").get("key") is None

    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "nested" / "store.json"
        JsonFileStore(path).set("key", "value")
        assert path.is_file()
        assert JsonFileStore(path).get("key") == "value"

    def test_delete(self, tmp_path):
        store = JsonFileStore(tmp_path / "store.json")
        store.set("a", "1")
        store.set("b", "2")
        store.delete("a")
        store.delete("missing")
        assert store.get("a") is None
        assert store.get("b") == "2"

    def test_corrupt_file_treated_as_empty(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("[1, 2", encoding="utf-8")
        store = JsonFileStore(path)
        assert store.get("key") is None
        store.set("key", "value")
        assert json.loads(path.read_text(encoding="utf-8")) == {"key": "value"}

    def test_non_object_file_treated_as_empty(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert JsonFileStore(path).get("key") is None

    def test_no_temp_files_left(self, tmp_path):
        store = JsonFileStore(tmp_path / "store.json")
        store.set("key", "value")
        assert [p.name for p in tmp_path.iterdir()] == ["store.json"]

    def test_settings_round_trip_on_disk(self, tmp_path):
        path = tmp_path / "settings.json"
        SettingsRepository(JsonFileStore(path)).update(word_spacing="wide")
        loaded = SettingsRepository(JsonFileStore(path)).load()
        assert loaded.word_spacing is WordSpacing.wide


# ---------------------------------------------------------------------------
# TestGatedHaptics
# ---------------------------------------------------------------------------


class TestGatedHaptics:
    def test_follows_setting(self, haptics):
        settings = {"on": True}
        gated = GatedHaptics(haptics, enabled=lambda: settings["on"])
        gated.impact(ImpactStyle.HEAVY)
        settings["on"] = False
        gated.notify(NotificationKind.ERROR)
        settings["on"] = True
        gated.notify(NotificationKind.SUCCESS)
        assert haptics.effects == [("impact", "heavy"), ("notify", "success")]

    def test_from_repository(self, haptics, repository):
        gated = GatedHaptics(haptics, enabled=lambda: repository.load().haptic_feedback)
        repository.update(haptic_feedback=False)
        gated.impact(ImpactStyle.LIGHT)
        assert haptics.effects == []
