"""Local preference store and the status snapshot persisted in it.

The store is a flat key -> int mapping that survives restarts. The
status adapter keeps each PrivacyStatus field under its own key as a
0/1 integer.
"""
from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

import yaml

from dataprivacy.models import PrivacyStatus

logger = logging.getLogger("dataprivacy.prefs")

PREF_ANALYTICS_ENABLED = "data.analyticsEnabled"
PREF_DEVICE_STATS_ENABLED = "data.deviceStatsEnabled"
PREF_LIMIT_USER_TRACKING = "data.limitUserTracking"
PREF_PERFORMANCE_REPORTING_ENABLED = "data.performanceReportingEnabled"
PREF_OPT_OUT = "data.optOut"

# Preference key -> (PrivacyStatus attribute, default when unset)
STATUS_KEYS = {
    PREF_ANALYTICS_ENABLED: ("analytics_enabled", 1),
    PREF_DEVICE_STATS_ENABLED: ("device_stats_enabled", 1),
    PREF_LIMIT_USER_TRACKING: ("limit_user_tracking", 0),
    PREF_PERFORMANCE_REPORTING_ENABLED: ("performance_reporting_enabled", 1),
    PREF_OPT_OUT: ("opt_out", 0),
}


@runtime_checkable
class PreferenceStore(Protocol):
    """Protocol for the host's persistent key-value store."""

    def get_int(self, key: str, default: int = 0) -> int: ...
    def set_int(self, key: str, value: int) -> None: ...


class MemoryPreferenceStore:
    """Dict-backed store; nothing outlives the process."""

    def __init__(self, values: dict[str, int] | None = None):
        self.values: dict[str, int] = dict(values or {})

    def get_int(self, key: str, default: int = 0) -> int:
        return self.values.get(key, default)

    def set_int(self, key: str, value: int) -> None:
        self.values[key] = int(value)


class YamlPreferenceStore:
    """Store persisted as a flat YAML mapping.

    Every write rewrites the whole file through a temp file and
    ``os.replace`` so a crash never leaves a half-written file behind.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> dict:
        if not self.path.is_file():
            return {}
        try:
            data = yaml.safe_load(self.path.read_text()) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Failed to read preferences from %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring malformed preferences file %s", self.path)
            return {}
        return data

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as tf:
                yaml.safe_dump(data, tf, default_flow_style=False, sort_keys=True)
            os.replace(temp_name, self.path)
        except Exception:
            if os.path.exists(temp_name):
                os.unlink(temp_name)
            raise

    def get_int(self, key: str, default: int = 0) -> int:
        value = self._read().get(key, default)
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning("Preference %s has non-integer value %r", key, value)
            return default

    def set_int(self, key: str, value: int) -> None:
        data = self._read()
        data[key] = int(value)
        self._write(data)

    def items(self) -> dict:
        """All stored preferences."""
        return self._read()

    def clear(self) -> bool:
        """Delete the preferences file. Returns True if one existed."""
        if not self.path.exists():
            return False
        self.path.unlink()
        logger.info("Removed preferences file %s", self.path)
        return True


# ── Status adapter ──

def load_status(store: PreferenceStore) -> PrivacyStatus:
    """Read the cached status, using defaults for anything never saved."""
    values = {
        attr: store.get_int(key, default) == 1
        for key, (attr, default) in STATUS_KEYS.items()
    }
    return PrivacyStatus(**values)


def save_status(store: PreferenceStore, status: PrivacyStatus) -> None:
    """Persist every field of ``status`` under its own key."""
    for key, (attr, _default) in STATUS_KEYS.items():
        store.set_int(key, 1 if getattr(status, attr) else 0)
    logger.debug("Saved privacy status: %s", status)
