"""Tests for configuration loading and validation."""

import pytest

from booking_engine.config import AppConfig, CommitConfig, SchedulingConfig, _validate_config
from booking_engine.errors import InvalidConfiguration


def _config(scheduling=None, commit=None) -> AppConfig:
    config = AppConfig.__new__(AppConfig)
    object.__setattr__(config, "scheduling", scheduling or SchedulingConfig())
    object.__setattr__(config, "commit", commit or CommitConfig())
    object.__setattr__(config, "log_level", "INFO")
    object.__setattr__(config, "engine_name", "test")
    return config


def _scheduling(step=15, tz="UTC", max_days=62) -> SchedulingConfig:
    scheduling = SchedulingConfig.__new__(SchedulingConfig)
    object.__setattr__(scheduling, "slot_step_minutes", step)
    object.__setattr__(scheduling, "default_timezone", tz)
    object.__setattr__(scheduling, "max_range_days", max_days)
    return scheduling


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        config = AppConfig()
        _validate_config(config)  # should not raise

    def test_zero_slot_step(self):
        with pytest.raises(ValueError, match="SLOT_STEP_MINUTES"):
            _validate_config(_config(scheduling=_scheduling(step=0)))

    def test_negative_max_range(self):
        with pytest.raises(ValueError, match="MAX_RANGE_DAYS"):
            _validate_config(_config(scheduling=_scheduling(max_days=-1)))

    def test_unknown_default_timezone(self):
        with pytest.raises(InvalidConfiguration, match="DEFAULT_TIMEZONE"):
            _validate_config(_config(scheduling=_scheduling(tz="Moon/Base")))

    def test_non_positive_lock_timeout(self):
        commit = CommitConfig.__new__(CommitConfig)
        object.__setattr__(commit, "lock_timeout_seconds", 0.0)

        with pytest.raises(ValueError, match="LOCK_TIMEOUT_SECONDS"):
            _validate_config(_config(commit=commit))

    def test_config_is_frozen(self):
        config = AppConfig()
        with pytest.raises(AttributeError):
            config.log_level = "DEBUG"


class TestEnvParsing:
    def test_safe_int_parsing(self):
        from booking_engine.config import _safe_int

        assert _safe_int("NONEXISTENT_VAR_12345", "42") == 42

    def test_safe_float_parsing(self):
        from booking_engine.config import _safe_float

        assert _safe_float("NONEXISTENT_VAR_12345", "2.5") == pytest.approx(2.5)

    def test_safe_int_reads_environment(self, monkeypatch):
        from booking_engine.config import _safe_int

        monkeypatch.setenv("BOOKING_TEST_STEP", "30")
        assert _safe_int("BOOKING_TEST_STEP", "15") == 30

    def test_safe_int_rejects_garbage(self, monkeypatch):
        from booking_engine.config import _safe_int

        monkeypatch.setenv("BOOKING_TEST_STEP", "fifteen")
        with pytest.raises(InvalidConfiguration, match="BOOKING_TEST_STEP"):
            _safe_int("BOOKING_TEST_STEP", "15")

    def test_safe_float_rejects_garbage(self, monkeypatch):
        from booking_engine.config import _safe_float

        monkeypatch.setenv("BOOKING_TEST_TIMEOUT", "soon")
        with pytest.raises(InvalidConfiguration):
            _safe_float("BOOKING_TEST_TIMEOUT", "5.0")
