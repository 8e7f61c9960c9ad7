"""Tests for settings resolution and the settings agent."""

from runcal_agents.settings import (
    DEFAULT_SETTINGS,
    SettingsAgent,
    coerce_settings_payload,
    resolve_settings,
)
from runcal_engine.store import MemoryStore


class TestResolveSettings:
    def test_defaults(self):
        assert resolve_settings({}) == DEFAULT_SETTINGS
        assert resolve_settings(None) == DEFAULT_SETTINGS

    def test_stored_values(self):
        stored = {
            "default_weight_kg": "55",
            "daily_target_kcal": 1800,
            "gender": "女性",
            "age": 41,
            "monthly_goal_kg": 0,
            "activity_level": "高い",
        }
        assert resolve_settings(stored) == {
            "default_weight_kg": 55,
            "daily_target_kcal": 1800,
            "gender": "female",
            "age": 41,
            "monthly_goal_kg": 0,
            "activity_level": "high",
        }

    def test_blank_gender_falls_back(self):
        assert resolve_settings({"gender": ""})["gender"] == "male"

    def test_unusable_numbers_fall_back(self):
        resolved = resolve_settings({"age": "old", "daily_target_kcal": ""})
        assert resolved["age"] == 30
        assert resolved["daily_target_kcal"] == 2000

    def test_unknown_activity(self):
        assert resolve_settings({"activity_level": "extreme"})["activity_level"] == "medium"


class TestCoerceSettingsPayload:
    def test_blank_numbers_become_zero(self):
        out = coerce_settings_payload({"age": "", "gender": "x", "activity_level": None})
        assert out["age"] == 0
        assert out["default_weight_kg"] == 0
        assert out["gender"] == ""
        assert out["activity_level"] == "medium"


class TestSettingsAgent:
    def test_seeds_missing_keys(self):
        store = MemoryStore()
        out = SettingsAgent(store).run({"updates": None})
        assert out["settings"] == DEFAULT_SETTINGS
        assert set(store.read_settings()) == set(DEFAULT_SETTINGS)

    def test_applies_updates(self):
        store = MemoryStore()
        out = SettingsAgent(store).run({"updates": {"age": "25", "gender": "f", "monthly_goal_kg": "1.5"}})
        assert out["settings"]["age"] == 25
        assert out["settings"]["gender"] == "female"
        assert out["settings"]["monthly_goal_kg"] == 1.5
        assert store.read_settings()["age"] == 25

    def test_zero_setting_survives_read_back(self):
        store = MemoryStore()
        out = SettingsAgent(store).run({"updates": {"monthly_goal_kg": 0, "daily_target_kcal": 2200}})
        assert out["settings"]["monthly_goal_kg"] == 0

    def test_reads_values_stored_under_field_names(self):
        store = MemoryStore()
        store.write_setting("age", 44)
        store.write_setting("activity_level", "low")
        out = SettingsAgent(store).run({"updates": None})
        assert out["settings"]["age"] == 44
        assert out["settings"]["activity_level"] == "low"
        assert store.read_settings()["daily_target_kcal"] == 2000
