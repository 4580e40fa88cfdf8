"""Tests for configuration and the engine factory."""

import pytest

from cronkit.config import DEFAULT_BACKOFF_SCHEDULE, Config, EngineConfig
from cronkit.engines.factory import get_engine
from cronkit.engines.local import LocalEngine
from cronkit.exceptions import EngineError


class TestEngineConfig:
    """Tests for EngineConfig validation."""

    def test_defaults(self):
        """Test default engine configuration."""
        config = EngineConfig()
        assert config.url is None
        assert config.max_name_length == 64
        assert config.default_backoff_schedule == DEFAULT_BACKOFF_SCHEDULE

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_name_length": 0},
            {"max_backoff_retries": -1},
            {"max_backoff_delay": -1.0},
            {"default_backoff_schedule": (1.0, -1.0)},
            {"default_backoff_schedule": (7200.0,)},
            {"max_backoff_retries": 1, "default_backoff_schedule": (1.0, 2.0)},
        ],
    )
    def test_invalid_values(self, kwargs):
        """Test that bad values raise ValueError."""
        with pytest.raises(ValueError):
            EngineConfig(**kwargs)

    def test_create_engine(self):
        """Test that engine settings reach the LocalEngine."""
        engine = EngineConfig(max_name_length=10, default_backoff_schedule=[2, 4]).create_engine()

        assert isinstance(engine, LocalEngine)
        assert engine.max_name_length == 10
        assert engine.default_backoff_schedule == (2.0, 4.0)


class TestConfig:
    """Tests for the top-level Config."""

    def test_default_engine_config(self):
        """Test that Config always carries an engine config."""
        assert isinstance(Config().engine, EngineConfig)
        assert isinstance(Config(engine=None).engine, EngineConfig)

    def test_create_engine(self):
        """Test creating the configured engine."""
        assert isinstance(Config().create_engine(), LocalEngine)

    def test_from_env(self, monkeypatch):
        """Test loading settings from environment variables."""
        monkeypatch.setenv("CRONKIT_ENGINE_URL", "local://")
        monkeypatch.setenv("CRONKIT_ENGINE_MAX_NAME_LENGTH", "32")
        monkeypatch.setenv("CRONKIT_ENGINE_MAX_BACKOFF_DELAY", "600")
        monkeypatch.setenv("CRONKIT_ENGINE_DEFAULT_BACKOFF_SCHEDULE", "1, 10,60")

        config = Config.from_env()

        assert config.engine.url == "local://"
        assert config.engine.max_name_length == 32
        assert config.engine.max_backoff_delay == 600.0
        assert config.engine.max_backoff_retries == 5
        assert config.engine.default_backoff_schedule == (1.0, 10.0, 60.0)

    def test_from_env_prefix(self, monkeypatch):
        """Test a custom environment prefix."""
        monkeypatch.setenv("JOBS_ENGINE_MAX_BACKOFF_RETRIES", "2")
        monkeypatch.setenv("JOBS_ENGINE_DEFAULT_BACKOFF_SCHEDULE", "1,2")

        config = Config.from_env(prefix="JOBS_")

        assert config.engine.max_backoff_retries == 2

    def test_from_env_defaults(self, monkeypatch):
        """Test that unset variables fall back to defaults."""
        monkeypatch.delenv("CRONKIT_ENGINE_URL", raising=False)
        monkeypatch.delenv("CRONKIT_ENGINE_DEFAULT_BACKOFF_SCHEDULE", raising=False)

        config = Config.from_env()

        assert config.engine.url is None
        assert config.engine.default_backoff_schedule == DEFAULT_BACKOFF_SCHEDULE


class TestGetEngine:
    """Tests for get_engine()."""

    def test_none_returns_local(self):
        """Test that None creates a LocalEngine."""
        assert isinstance(get_engine(None), LocalEngine)

    @pytest.mark.parametrize("url", ["local://", "memory://", "LOCAL://"])
    def test_local_schemes(self, url):
        """Test the URL schemes served by LocalEngine."""
        assert isinstance(get_engine(url), LocalEngine)

    def test_instance_passthrough(self, engine):
        """Test that engine instances are returned unchanged."""
        assert get_engine(engine) is engine

    def test_kwargs_forwarded(self):
        """Test that options are passed to the engine."""
        assert get_engine("local://", max_name_length=5).max_name_length == 5

    def test_unsupported_scheme(self):
        """Test error for unknown schemes."""
        with pytest.raises(EngineError, match="Unsupported engine URL scheme: 'redis'"):
            get_engine("redis://localhost:6379/0")

    def test_wrong_type(self):
        """Test error for non-string, non-engine values."""
        with pytest.raises(EngineError, match="Got int"):
            get_engine(42)
