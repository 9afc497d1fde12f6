"""
Tests unitaires pour le chargement de la configuration.
"""
from pathlib import Path

import pytest

from observation_offload.config import (
    Settings,
    get_observation_masking_config,
    get_telemetry_config,
    load_config,
    reload_config,
)
from observation_offload.core.exceptions import ConfigurationError
from observation_offload.core.storage import SessionHistoryDir, StaticHistoryDir, resolver_from_config
from observation_offload.features.observation_masking.service import MaskingPolicy, create_masking_service
from observation_offload.services.telemetry import LoggingTelemetrySink, NullTelemetrySink


def _write_config(path: Path, body: str) -> Path:
    path.write_text(body, encoding="utf-8")
    return path


def test_load_config_missing_file_raises(tmp_path: Path):
    with pytest.raises(ConfigurationError) as exc_info:
        load_config(str(tmp_path / "absent.toml"))
    assert exc_info.value.code == "config_error"


def test_load_config_invalid_toml_raises(tmp_path: Path):
    config_path = _write_config(tmp_path / "config.toml", "[observation_masking\n")
    with pytest.raises(ConfigurationError):
        load_config(str(config_path))


def test_load_config_expands_env_vars_and_caches(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("OBS_TEST_DIR", "/data/obs")
    config_path = _write_config(
        tmp_path / "config.toml",
        '[observation_masking]\nhistory_dir = "${OBS_TEST_DIR}/history"\n',
    )

    config = load_config(str(config_path))

    assert config["observation_masking"]["history_dir"] == "/data/obs/history"
    assert load_config(str(config_path)) is config


def test_reload_config_reads_file_again(tmp_path: Path):
    config_path = _write_config(tmp_path / "config.toml", "[telemetry]\nenabled = false\n")
    first = load_config(str(config_path))

    _write_config(config_path, "[telemetry]\nenabled = true\n")
    second = reload_config(str(config_path))

    assert first["telemetry"]["enabled"] is False
    assert second["telemetry"]["enabled"] is True


def test_observation_masking_config_defaults_when_section_missing():
    config = get_observation_masking_config({})
    assert config.enabled is True
    assert config.protection_threshold == 50000
    assert config.hysteresis_threshold == 30000
    assert config.smart_truncation_tokens == 5000


def test_observation_masking_config_validates_values():
    config = get_observation_masking_config(
        {
            "observation_masking": {
                "enabled": False,
                "protection_threshold": -5,
                "hysteresis_threshold": "beaucoup",
                "smart_truncation_tokens": 2500.0,
                "history_dir": "  /srv/history  ",
            }
        }
    )

    assert config.enabled is False
    assert config.protection_threshold == 0
    assert config.hysteresis_threshold == 30000
    assert config.smart_truncation_tokens == 2500
    assert config.history_dir == "/srv/history"


def test_observation_masking_config_ignores_bool_as_int():
    config = get_observation_masking_config({"observation_masking": {"protection_threshold": True}})
    assert config.protection_threshold == 50000


def test_telemetry_config():
    config = get_telemetry_config(
        {"telemetry": {"enabled": True, "endpoint": " http://collector/events ", "timeout_ms": 0}}
    )
    assert config.enabled is True
    assert config.endpoint == "http://collector/events"
    assert config.timeout_ms == 1


def test_settings_and_service_from_config():
    settings = Settings.from_config(
        {
            "observation_masking": {"protection_threshold": 1000, "hysteresis_threshold": 10},
            "telemetry": {"enabled": True},
        }
    )

    service = create_masking_service(settings)

    assert service.policy == MaskingPolicy(
        enabled=True,
        protection_threshold=1000,
        hysteresis_threshold=10,
        smart_truncation_tokens=5000,
    )
    assert isinstance(service.telemetry, LoggingTelemetrySink)
    assert isinstance(create_masking_service(Settings()).telemetry, NullTelemetrySink)


def test_resolver_from_config(tmp_path: Path):
    settings = Settings.from_config({"observation_masking": {"history_dir": str(tmp_path)}})

    static = resolver_from_config(settings.observation_masking)
    session = resolver_from_config(settings.observation_masking, session_id=7)

    assert isinstance(static, StaticHistoryDir)
    assert static.get_history_dir() == tmp_path
    assert isinstance(session, SessionHistoryDir)
    assert session.get_history_dir() == tmp_path / "7"
