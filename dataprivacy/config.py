"""Layered configuration for dataprivacy.

Priority (highest to lowest):
1. Environment variables (DATAPRIVACY_*), including any loaded from .env
2. Project config (.dataprivacy.toml in current directory)
3. Global config (~/.config/dataprivacy/config.toml)
4. Built-in defaults

Every layer is checked against the type of the built-in default, so
``analytics_enabled = "false"`` in a TOML file means False.
"""
from __future__ import annotations

import copy
import logging
import os
import sys
from pathlib import Path
from typing import Any, Optional

import tomli_w
from dotenv import load_dotenv

from dataprivacy.errors import ConfigError

logger = logging.getLogger("dataprivacy.config")

# TOML reading: stdlib in 3.11+, tomli on 3.10
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


DEFAULTS: dict[str, Any] = {
    "service": {
        "base_url": "https://data-optout-service.uca.cloud.unity3d.com",
    },
    "identity": {
        "app_id": "",
        "user_id": "",
        "session_id": 0,
        "device_id": "",
        "platform": "",
        "platform_id": -1,
        "engine_version": "",
        "debug_build": False,
        "web_sandbox": False,
    },
    "flags": {
        "analytics_enabled": True,
        "device_stats_enabled": True,
        "limit_user_tracking": False,
        "performance_reporting_enabled": True,
        "performance_reporting_available": True,
    },
    "prefs": {
        "path": "",
    },
}

ENV_VAR_MAP = {
    "DATAPRIVACY_BASE_URL": "service.base_url",
    "DATAPRIVACY_APP_ID": "identity.app_id",
    "DATAPRIVACY_USER_ID": "identity.user_id",
    "DATAPRIVACY_SESSION_ID": "identity.session_id",
    "DATAPRIVACY_DEVICE_ID": "identity.device_id",
    "DATAPRIVACY_PLATFORM": "identity.platform",
    "DATAPRIVACY_ENGINE_VERSION": "identity.engine_version",
    "DATAPRIVACY_DEBUG_BUILD": "identity.debug_build",
    "DATAPRIVACY_WEB_SANDBOX": "identity.web_sandbox",
    "DATAPRIVACY_PREFS": "prefs.path",
}

_TRUE = ("true", "1", "yes", "on")
_FALSE = ("false", "0", "no", "off")


def _global_config_path() -> Path:
    return Path.home() / ".config" / "dataprivacy" / "config.toml"


def _project_config_path() -> Path:
    return Path.cwd() / ".dataprivacy.toml"


def _read_toml(path: Path) -> dict:
    """Read a TOML file, returning empty dict if missing or unreadable."""
    if not path.is_file():
        return {}
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Failed to read %s: %s", path, e)
        return {}


def _write_toml(data: dict, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        tomli_w.dump(data, f)


def _get_nested(data: dict, dotted_key: str, default: Any = None) -> Any:
    current = data
    for key in dotted_key.split("."):
        if not isinstance(current, dict) or current.get(key) is None:
            return default
        current = current[key]
    return current


def _set_nested(data: dict, dotted_key: str, value: Any) -> None:
    *parents, leaf = dotted_key.split(".")
    for key in parents:
        if not isinstance(data.get(key), dict):
            data[key] = {}
        data = data[key]
    data[leaf] = value


def _flatten(data: dict, prefix: str = "") -> dict[str, Any]:
    """``{"a": {"b": 1}}`` -> ``{"a.b": 1}``."""
    flat = {}
    for key, value in data.items():
        dotted = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict):
            flat.update(_flatten(value, dotted))
        else:
            flat[dotted] = value
    return flat


def coerce_value(dotted_key: str, raw: Any) -> Any:
    """Convert ``raw`` to the type of the key's built-in default.

    Strings are parsed; values already of the right type pass through.
    Unknown keys are returned unchanged. Raises ConfigError when the
    value cannot be read as the expected bool/int.
    """
    default = _get_nested(DEFAULTS, dotted_key)
    if isinstance(default, bool):
        if isinstance(raw, bool):
            return raw
        lowered = str(raw).strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ConfigError(
            f"'{dotted_key}' expects a boolean, got '{raw}'",
            context={"key": dotted_key},
        )
    if isinstance(default, int):
        if isinstance(raw, int) and not isinstance(raw, bool):
            return raw
        try:
            return int(str(raw).strip())
        except ValueError as e:
            raise ConfigError(
                f"'{dotted_key}' expects an integer, got '{raw}'",
                context={"key": dotted_key},
            ) from e
    return raw


def _apply_layer(merged: dict, layer: dict) -> None:
    for dotted_key, value in _flatten(layer).items():
        _set_nested(merged, dotted_key, coerce_value(dotted_key, value))


class ConfigService:
    """Resolves and caches the merged configuration."""

    def __init__(self):
        self._data: Optional[dict] = None
        self._sources: dict[str, Optional[Path]] = {}

    def resolve(self, force: bool = False) -> dict:
        """Merge all layers into one nested dict."""
        if self._data is not None and not force:
            return self._data

        load_dotenv(Path.cwd() / ".env")
        merged = copy.deepcopy(DEFAULTS)
        self._sources = {}

        for name, path in (
            ("global_config", _global_config_path()),
            ("project_config", _project_config_path()),
        ):
            layer = _read_toml(path)
            _apply_layer(merged, layer)
            self._sources[name] = path if path.is_file() else None
            if layer:
                logger.debug("Loaded %s from %s", name, path)

        for env_var, config_path in ENV_VAR_MAP.items():
            env_value = os.environ.get(env_var)
            if env_value is not None:
                _set_nested(merged, config_path, coerce_value(config_path, env_value))

        self._data = merged
        return merged

    def get(self, dotted_key: str, default: Any = None) -> Any:
        return _get_nested(self.resolve(), dotted_key, default)

    def get_data_dir(self) -> Path:
        """Data directory: $DATAPRIVACY_HOME or ~/.dataprivacy."""
        env_home = os.environ.get("DATAPRIVACY_HOME")
        if env_home:
            return Path(env_home).expanduser()
        return Path.home() / ".dataprivacy"

    def set_global(self, dotted_key: str, value: Any) -> None:
        """Set a value in the global config file."""
        path = _global_config_path()
        data = _read_toml(path)
        _set_nested(data, dotted_key, coerce_value(dotted_key, value))
        _write_toml(data, path)
        self._data = None
        logger.info("Set %s = %s in %s", dotted_key, value, path)

    def show(self) -> dict:
        """The resolved config plus the files it was read from."""
        data = self.resolve(force=True)
        return {
            "resolved": data,
            "sources": {
                name: str(path) if path else None
                for name, path in self._sources.items()
            },
        }

    def config_paths(self) -> dict[str, str]:
        """Config file and data dir locations with existence status."""
        locations = {
            "global_config": _global_config_path(),
            "project_config": _project_config_path(),
            "data_dir": self.get_data_dir(),
        }
        return {
            name: f"{path} ({'exists' if path.exists() else 'not found'})"
            for name, path in locations.items()
        }


_config_service: Optional[ConfigService] = None


def get_config_service() -> ConfigService:
    """Get or create the process-wide ConfigService."""
    global _config_service
    if _config_service is None:
        _config_service = ConfigService()
    return _config_service


def reset_config_service() -> None:
    """Reset the process-wide config service (for testing)."""
    global _config_service
    _config_service = None
