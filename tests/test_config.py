"""Tests for configuration loading."""

import pytest
from pydantic import ValidationError

from shortlinks.config import Config, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Keep the developer's environment and .env out of these tests."""
    monkeypatch.chdir(tmp_path)
    for name in ("SHORT_CODE_LENGTH", "DEFAULT_TTL_SECONDS", "DEFAULT_MAX_CLICKS",
                 "DATA_FILE", "REAPER_INTERVAL_SECONDS", "PORT", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


class TestConfig:
    """Configuration defaults and overrides."""

    def test_defaults(self):
        config = Config()

        assert config.short_code_length == 6
        assert config.default_ttl_seconds == 0
        assert config.default_max_clicks == 0
        assert config.max_collision_retries == 50
        assert config.data_file == "./data.json"
        assert config.reaper_interval_seconds == 1.0
        assert config.host == "127.0.0.1"
        assert config.port == 9200
        assert config.log_file is None
        assert config.log_json is False

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_TTL_SECONDS", "3600")
        monkeypatch.setenv("data_file", "/tmp/links.json")
        monkeypatch.setenv("REAPER_INTERVAL_SECONDS", "0.5")

        config = Config()

        assert config.default_ttl_seconds == 3600
        assert config.data_file == "/tmp/links.json"
        assert config.reaper_interval_seconds == 0.5

    def test_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text("DEFAULT_MAX_CLICKS=10\n", encoding="utf-8")

        assert Config().default_max_clicks == 10

    def test_explicit_overrides(self, monkeypatch):
        monkeypatch.setenv("PORT", "8000")

        assert load_config(port=9999).port == 9999

    @pytest.mark.parametrize("field, value", [
        ("default_ttl_seconds", -1),
        ("default_max_clicks", -5),
        ("short_code_length", 0),
        ("reaper_interval_seconds", 0),
        ("max_collision_retries", 0),
    ])
    def test_invalid_values_rejected(self, field, value):
        with pytest.raises(ValidationError):
            Config(**{field: value})
