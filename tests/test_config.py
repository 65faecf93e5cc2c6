import pytest
import structlog
from pydantic import ValidationError

from billshare.config import Settings, get_settings
from billshare.logging import configure_logging, get_logger


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    structlog.reset_defaults()


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv("BILLSHARE_SETTLEMENT_EPSILON", raising=False)
    settings = Settings()

    assert settings.settlement_epsilon == 0
    assert settings.log_json is True


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("BILLSHARE_SETTLEMENT_EPSILON", "2")
    monkeypatch.setenv("BILLSHARE_LOG_JSON", "false")

    settings = get_settings()

    assert settings.settlement_epsilon == 2
    assert settings.log_json is False
    assert get_settings() is settings


def test_settings_rejects_negative_epsilon(monkeypatch):
    monkeypatch.setenv("BILLSHARE_SETTLEMENT_EPSILON", "-1")
    with pytest.raises(ValidationError):
        Settings()


def test_configure_logging(monkeypatch):
    monkeypatch.setenv("BILLSHARE_LOG_LEVEL", "debug")

    configure_logging()

    assert structlog.is_configured()
    get_logger(__name__).debug("config.test")
