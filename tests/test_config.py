"""
Tests for environment-backed configuration.
"""

import pytest

from signal_monitor.config import Config
from signal_monitor.errors import ConfigurationError


def test_defaults(tmp_path):
    settings = Config(data_dir=tmp_path)
    assert settings.cycle_interval_ms == 60_000
    assert settings.cycle_interval_sec == 60
    assert settings.base_threshold == 0.8
    assert settings.dedup_max_size == 1000
    assert settings.dedup_trim_to == 500
    assert settings.db_path == tmp_path / "signals.db"


def test_from_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("SOCIAL_MONITOR_INTERVAL_MS", "30000")
    monkeypatch.setenv("SIGNAL_BASE_THRESHOLD", "0.7")
    monkeypatch.setenv("KEYWORD_SEARCH_LIMIT", "10")
    monkeypatch.setenv("SIGNAL_MONITOR_DATA_DIR", str(tmp_path))

    settings = Config.from_env()

    assert settings.cycle_interval_ms == 30_000
    assert settings.base_threshold == 0.7
    assert settings.keyword_search_limit == 10
    assert settings.data_dir == tmp_path


def test_invalid_number_rejected(monkeypatch):
    monkeypatch.setenv("SOCIAL_MONITOR_INTERVAL_MS", "soon")
    with pytest.raises(ConfigurationError):
        Config.from_env()


def test_trim_larger_than_max_rejected(tmp_path):
    with pytest.raises(ConfigurationError):
        Config(data_dir=tmp_path, dedup_max_size=100, dedup_trim_to=200)


def test_secrets_read_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("TWITTER_BEARER_TOKEN", "abc")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    settings = Config(data_dir=tmp_path)
    assert settings.twitter_bearer_token == "abc"
    assert settings.openai_api_key is None
