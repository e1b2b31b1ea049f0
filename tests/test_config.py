import json
from pathlib import Path

import pytest

from keyconsole.config import (
    get_config_path,
    get_env_overrides,
    load_config,
    read_config_file,
)


def test_read_config_file_rejects_invalid_json(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text("{not-json}")
    with pytest.raises(ValueError, match="invalid config json"):
        read_config_file(config_path)


def test_read_config_file_rejects_non_object(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text("[1, 2]")
    with pytest.raises(ValueError, match="must be an object"):
        read_config_file(config_path)


def test_load_reads_file_values(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"base_url": "http://keys.internal", "poll_floor_ms": 500}))

    cfg = load_config(config_path)

    assert cfg.base_url == "http://keys.internal"
    assert cfg.poll_floor_ms == 500
    assert cfg.poll_ceiling_ms == 10000


def test_env_overrides_file(monkeypatch, tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"poll_ceiling_ms": 20000, "log_level": "info"}))
    monkeypatch.setenv("KEYCONSOLE_POLL_CEILING_MS", "5000")
    monkeypatch.setenv("KEYCONSOLE_REQUEST_TIMEOUT_S", "2.5")

    cfg = load_config(config_path)

    assert get_env_overrides()["poll_ceiling_ms"] == "5000"
    assert cfg.poll_ceiling_ms == 5000
    assert cfg.request_timeout_s == 2.5
    assert cfg.log_level == "INFO"


def test_invalid_values_warn_and_fall_back(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("KEYCONSOLE_POLL_FLOOR_MS", "soon")
    monkeypatch.setenv("KEYCONSOLE_POLL_GROWTH", "0.5")

    with pytest.warns(RuntimeWarning):
        cfg = load_config(tmp_path / "missing.json")

    assert cfg.poll_floor_ms == 1000
    assert cfg.poll_growth_factor == 1.5


def test_config_path_env(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("KEYCONSOLE_CONFIG", str(tmp_path / "custom.json"))
    assert get_config_path() == tmp_path / "custom.json"
