from __future__ import annotations

import json
import os
import warnings
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

DEFAULT_CONFIG_PATH = Path("~/.config/keyconsole/config.json").expanduser()
DEFAULT_STATE_PATH = "~/.keyconsole/state.json"

CONFIG_ENV_OVERRIDES = {
    "base_url": "KEYCONSOLE_BASE_URL",
    "poll_floor_ms": "KEYCONSOLE_POLL_FLOOR_MS",
    "poll_ceiling_ms": "KEYCONSOLE_POLL_CEILING_MS",
    "poll_growth_factor": "KEYCONSOLE_POLL_GROWTH",
    "request_timeout_s": "KEYCONSOLE_REQUEST_TIMEOUT_S",
    "state_path": "KEYCONSOLE_STATE_PATH",
    "log_level": "KEYCONSOLE_LOG_LEVEL",
}


def get_config_path(path: Path | None = None) -> Path:
    candidate = path or Path(os.getenv("KEYCONSOLE_CONFIG", DEFAULT_CONFIG_PATH))
    return candidate.expanduser()


def read_config_file(path: Path | None = None) -> dict[str, Any]:
    config_path = get_config_path(path)
    if not config_path.exists():
        return {}
    raw = config_path.read_text()
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError("invalid config json") from exc
    if not isinstance(data, dict):
        raise ValueError("config must be an object")
    return data


def get_env_overrides() -> dict[str, str]:
    overrides: dict[str, str] = {}
    for key, env_var in CONFIG_ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value is not None:
            overrides[key] = value
    return overrides


@dataclass
class ConsoleConfig:
    base_url: str = "http://127.0.0.1:8080"
    poll_floor_ms: int = 1000
    poll_ceiling_ms: int = 10000
    poll_growth_factor: float = 1.5
    # 0 disables the timeout; a hung request then delays the next cycle indefinitely.
    request_timeout_s: float = 30.0
    state_path: str = DEFAULT_STATE_PATH
    log_level: str = "WARNING"

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def _parse_int(value: object, default: int, *, key: str) -> int:
    if value is None:
        return default
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        warnings.warn(f"Invalid int for {key}: {value!r}", RuntimeWarning, stacklevel=2)
        return default


def _parse_float(value: object, default: float, *, key: str) -> float:
    if value is None:
        return default
    try:
        parsed = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        warnings.warn(f"Invalid number for {key}: {value!r}", RuntimeWarning, stacklevel=2)
        return default
    if parsed < 0:
        warnings.warn(f"Negative value for {key}: {value!r}", RuntimeWarning, stacklevel=2)
        return default
    return parsed


_INT_KEYS = {"poll_floor_ms", "poll_ceiling_ms"}
_FLOAT_KEYS = {"poll_growth_factor", "request_timeout_s"}


def load_config(path: Path | None = None) -> ConsoleConfig:
    cfg = ConsoleConfig()
    config_path = get_config_path(path)
    if config_path.exists():
        try:
            data = json.loads(config_path.read_text())
        except json.JSONDecodeError:
            data = {}
        if isinstance(data, dict):
            cfg = _apply_dict(cfg, data)
    cfg = _apply_dict(cfg, get_env_overrides())
    return _validate(cfg)


def _apply_dict(cfg: ConsoleConfig, data: dict[str, Any]) -> ConsoleConfig:
    for key, value in data.items():
        if not hasattr(cfg, key):
            continue
        if key in _INT_KEYS:
            setattr(cfg, key, _parse_int(value, getattr(cfg, key), key=key))
            continue
        if key in _FLOAT_KEYS:
            setattr(cfg, key, _parse_float(value, getattr(cfg, key), key=key))
            continue
        if value is None:
            continue
        setattr(cfg, key, str(value))
    return cfg


def _validate(cfg: ConsoleConfig) -> ConsoleConfig:
    defaults = ConsoleConfig()
    if cfg.poll_floor_ms <= 0:
        warnings.warn(
            f"Invalid poll_floor_ms: {cfg.poll_floor_ms!r}", RuntimeWarning, stacklevel=2
        )
        cfg.poll_floor_ms = defaults.poll_floor_ms
    if cfg.poll_ceiling_ms < cfg.poll_floor_ms:
        warnings.warn(
            f"poll_ceiling_ms {cfg.poll_ceiling_ms!r} is below poll_floor_ms",
            RuntimeWarning,
            stacklevel=2,
        )
        cfg.poll_ceiling_ms = max(defaults.poll_ceiling_ms, cfg.poll_floor_ms)
    if cfg.poll_growth_factor < 1.0:
        warnings.warn(
            f"Invalid poll_growth_factor: {cfg.poll_growth_factor!r}",
            RuntimeWarning,
            stacklevel=2,
        )
        cfg.poll_growth_factor = defaults.poll_growth_factor
    cfg.log_level = cfg.log_level.strip().upper() or defaults.log_level
    return cfg
