"""Tests for settings and logging configuration."""

from pathlib import Path

import structlog

from modreg.core.config import Settings
from modreg.core.logging import configure_logging, get_logger


def test_defaults(monkeypatch):
    for name in ("MODREG_DATA_DIR", "MODREG_OWNER", "MODREG_LOG_LEVEL", "MODREG_JSON_LOGS", "MODREG_WEBHOOKS"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings.from_env()
    assert settings.data_dir == Path.home() / ".modreg"
    assert settings.owner == "owner"
    assert settings.log_level == "INFO"
    assert settings.json_logs is False
    assert settings.webhooks_enabled is True
    assert settings.state_path == settings.data_dir / "state.json"


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("MODREG_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("MODREG_OWNER", "0xDeployer")
    monkeypatch.setenv("MODREG_LOG_LEVEL", "debug")
    monkeypatch.setenv("MODREG_JSON_LOGS", "yes")
    monkeypatch.setenv("MODREG_WEBHOOKS", "0")
    settings = Settings.from_env()
    assert settings.data_dir == tmp_path
    assert settings.owner == "0xDeployer"
    assert settings.log_level == "DEBUG"
    assert settings.json_logs is True
    assert settings.webhooks_enabled is False


def test_explicit_data_dir_wins(monkeypatch, tmp_path):
    monkeypatch.setenv("MODREG_DATA_DIR", "/somewhere/else")
    assert Settings.from_env(tmp_path).data_dir == tmp_path


def test_configure_json_logging():
    configure_logging("INFO", json_logs=True)
    assert structlog.is_configured()
    logger = get_logger("test")
    logger.info("configured", key="value")
