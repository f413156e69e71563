"""Tests for the settings module."""

import json

import pytest

from src.settings import LOG_LEVELS, Settings
from src.utils.exceptions import ConfigError


class TestSettings:
    """Tests for Settings defaults and validation."""

    def test_default_values(self):
        """Should have sensible default values."""
        settings = Settings()
        assert settings.ollama_url == "http://localhost:11434"
        assert settings.model == "qwen3:8b"
        assert settings.context_size == 32768
        assert settings.plot_temperature < settings.narrative_temperature
        assert settings.log_level == "INFO"

    def test_defaults_are_valid(self):
        """Default settings pass validation unchanged."""
        assert Settings().validate() is False

    def test_lowercase_log_level_is_normalized(self):
        """A lowercase log level is upper-cased and reported as a change."""
        settings = Settings(log_level="debug")
        assert settings.validate() is True
        assert settings.log_level == "DEBUG"
        assert "DEBUG" in LOG_LEVELS

    @pytest.mark.parametrize(
        ("field", "value", "message"),
        [
            ("log_level", "LOUD", "log_level must be one of"),
            ("ollama_url", "ftp://host:11434", "Invalid URL scheme"),
            ("ollama_url", "http://", "missing host"),
            ("model", "  ", "model must be a non-empty"),
            ("context_size", 512, "context_size must be between"),
            ("max_tokens", 64000, "max_tokens must be between"),
            ("plot_temperature", 2.5, "plot_temperature must be between"),
            ("narrative_temperature", -0.1, "narrative_temperature must be between"),
            ("llm_max_retries", 0, "llm_max_retries must be between"),
            ("llm_retry_delay", 61.0, "llm_retry_delay must be between"),
            ("llm_retry_backoff", 0.5, "llm_retry_backoff must be between"),
            ("ollama_timeout", 5, "ollama_timeout must be between"),
            ("health_check_timeout", 0.5, "health_check_timeout must be between"),
            ("generation_wall_clock_timeout", 30, "generation_wall_clock_timeout must be between"),
        ],
    )
    def test_invalid_values_raise(self, field, value, message):
        """Out-of-range values raise ValueError naming the field."""
        settings = Settings(**{field: value})
        with pytest.raises(ValueError, match=message):
            settings.validate()


class TestSettingsPersistence:
    """Tests for load() and save()."""

    def test_load_creates_file_with_defaults(self, isolate_settings_file):
        """A missing file is written with the defaults."""
        settings = Settings.load()

        assert settings == Settings()
        assert json.loads(isolate_settings_file.read_text())["model"] == "qwen3:8b"

    def test_load_preserves_custom_values(self, isolate_settings_file):
        """Stored values win over defaults."""
        isolate_settings_file.write_text(json.dumps({"model": "gemma3:12b", "dark_mode": True}))

        settings = Settings.load()

        assert settings.model == "gemma3:12b"
        assert settings.dark_mode is True
        assert settings.ollama_url == "http://localhost:11434"

    def test_load_merges_new_and_drops_obsolete_keys(self, isolate_settings_file):
        """Unknown keys are removed and missing keys added on load."""
        isolate_settings_file.write_text(json.dumps({"model": "m", "interaction_mode": "x"}))

        Settings.load()

        stored = json.loads(isolate_settings_file.read_text())
        assert "interaction_mode" not in stored
        assert stored["narrative_temperature"] == 0.9

    def test_load_uses_cache(self, isolate_settings_file):
        """Repeated loads return the cached instance until cleared."""
        first = Settings.load()
        assert Settings.load() is first
        assert Settings.load(use_cache=False) is not first

    def test_corrupt_file_is_backed_up(self, isolate_settings_file):
        """Invalid JSON is copied aside and replaced with defaults."""
        isolate_settings_file.write_text("{not json")

        settings = Settings.load()

        assert settings == Settings()
        backup = isolate_settings_file.with_suffix(".json.corrupt")
        assert backup.read_text() == "{not json"

    def test_non_object_json_is_backed_up(self, isolate_settings_file):
        """A JSON list is treated as corrupt."""
        isolate_settings_file.write_text("[1, 2]")

        assert Settings.load() == Settings()
        assert isolate_settings_file.with_suffix(".json.corrupt").exists()

    def test_invalid_stored_value_raises(self, isolate_settings_file):
        """Out-of-range stored values surface as ValueError."""
        isolate_settings_file.write_text(json.dumps({"context_size": 10}))

        with pytest.raises(ConfigError, match="context_size"):
            Settings.load()

    def test_wrong_type_raises_value_error(self, isolate_settings_file):
        """A value of the wrong type surfaces as ValueError."""
        isolate_settings_file.write_text(json.dumps({"context_size": "large"}))

        with pytest.raises(ValueError):
            Settings.load()

    def test_save_round_trip(self, isolate_settings_file):
        """Saved settings load back equal."""
        Settings(model="llama3.1:8b", sidebar_open=False).save()

        loaded = Settings.load(use_cache=False)

        assert loaded.model == "llama3.1:8b"
        assert loaded.sidebar_open is False

    def test_save_rejects_invalid(self, isolate_settings_file):
        """Invalid settings are never written."""
        with pytest.raises(ValueError):
            Settings(max_tokens=1).save()
        assert not isolate_settings_file.exists()
