import pytest
from pydantic import ValidationError

from cors_relay.config import Settings


def test_defaults(monkeypatch):
    for name in ("RELAY_LISTEN_PORT", "RELAY_UPSTREAM_BASE_URL", "RELAY_LOG_REQUESTS"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings()
    assert settings.listen_port == 8080
    assert settings.listen_host == "0.0.0.0"
    assert settings.upstream_base_url == "https://api.groq.com"
    assert settings.log_requests is True
    assert settings.upstream_timeout is None


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("RELAY_LISTEN_PORT", "9000")
    monkeypatch.setenv("RELAY_UPSTREAM_BASE_URL", "http://localhost:1234/")
    monkeypatch.setenv("RELAY_LOG_REQUESTS", "false")
    settings = Settings()
    assert settings.listen_port == 9000
    assert settings.upstream_base_url == "http://localhost:1234"
    assert settings.log_requests is False


def test_rejects_relative_upstream():
    with pytest.raises(ValidationError):
        Settings(upstream_base_url="api.groq.com")


def test_rejects_bad_port():
    with pytest.raises(ValidationError):
        Settings(listen_port=70000)


def test_settings_are_immutable():
    settings = Settings(upstream_base_url="https://api.example.test")
    with pytest.raises(ValidationError):
        settings.upstream_base_url = "https://elsewhere.test"
