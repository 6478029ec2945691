"""Tests for Settings defaults and validation."""

import pytest
from fastapi import FastAPI
from pydantic import ValidationError

from config import Settings
from main import configure_app
from services.token_vault import ConfigurationError


@pytest.fixture(autouse=True)
def no_keychain(monkeypatch):
    monkeypatch.setattr("config.get_credential", lambda key: None)


class TestDefaults:
    def test_up_api_defaults(self, monkeypatch):
        for name in ("UP_API_BASE_URL", "MAX_PAGES", "RECENT_TRANSACTIONS_PAGE_SIZE", "DASHBOARD_TIMEZONE"):
            monkeypatch.delenv(name, raising=False)
        s = Settings(_env_file=None)
        assert s.UP_API_BASE_URL == "https://api.up.com.au/api/v1"
        assert s.UP_API_TIMEOUT_SECONDS == 30.0
        assert s.MAX_PAGES == 10
        assert s.RECENT_TRANSACTIONS_PAGE_SIZE == 25
        assert s.DASHBOARD_TIMEZONE == "Australia/Melbourne"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("MAX_PAGES", "3")
        assert Settings(_env_file=None).MAX_PAGES == 3


class TestValidation:
    @pytest.mark.parametrize("field", ["MAX_PAGES", "RECENT_TRANSACTIONS_PAGE_SIZE"])
    def test_non_positive_rejected(self, monkeypatch, field):
        monkeypatch.setenv(field, "0")
        with pytest.raises(ValidationError, match=field):
            Settings(_env_file=None)

    def test_invalid_log_level_rejected(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "VERBOS")
        with pytest.raises(ValidationError, match="LOG_LEVEL"):
            Settings(_env_file=None)

    def test_log_level_case_insensitive(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert Settings(_env_file=None).LOG_LEVEL == "DEBUG"


class TestConfigureApp:
    """Startup refuses to run with missing or malformed secrets."""

    def _settings(self, **overrides):
        values = {"UP_TOKEN_ENCRYPTION_KEY": "ab" * 32, "SESSION_SECRET": "s"}
        values.update(overrides)
        return Settings(_env_file=None, **values)

    def test_valid_settings(self):
        app = FastAPI()
        configure_app(app, self._settings())
        assert app.state.vault is not None
        assert app.state.session_service is not None

    @pytest.mark.parametrize("key", ["", "abc", "zz" * 32, "ab" * 16])
    def test_bad_encryption_key(self, key):
        with pytest.raises(ConfigurationError):
            configure_app(FastAPI(), self._settings(UP_TOKEN_ENCRYPTION_KEY=key))

    def test_missing_session_secret(self):
        with pytest.raises(ConfigurationError, match="SESSION_SECRET"):
            configure_app(FastAPI(), self._settings(SESSION_SECRET=""))
