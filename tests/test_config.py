import logging

import pytest

from config import Config, env_number


class TestConfigValidate:
    def test_missing_api_key_only_warns(self, monkeypatch, caplog):
        monkeypatch.setattr(Config, "GEMINI_API_KEY", None)
        with caplog.at_level(logging.WARNING):
            Config.validate()
        assert "GEMINI_API_KEY" in caplog.text

    @pytest.mark.parametrize("timeout", [0, -1.5])
    def test_non_positive_timeout_raises(self, monkeypatch, timeout):
        monkeypatch.setattr(Config, "RECOMMENDATION_TIMEOUT", timeout)
        with pytest.raises(ValueError):
            Config.validate()


class TestEnvNumber:
    def test_parses_value(self, monkeypatch):
        monkeypatch.setenv("PORT", "9000")
        assert env_number("PORT", 8001, int) == 9000

    @pytest.mark.parametrize("raw", ["", "fast", "10s"])
    def test_bad_value_uses_default(self, monkeypatch, raw):
        monkeypatch.setenv("RECOMMENDATION_TIMEOUT", raw)
        assert env_number("RECOMMENDATION_TIMEOUT", 10.0) == 10.0

    def test_unset_uses_default(self, monkeypatch):
        monkeypatch.delenv("PORT", raising=False)
        assert env_number("PORT", 8001, int) == 8001
