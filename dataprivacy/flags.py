"""Live gating flags consulted by telemetry producers."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager

from dataprivacy.errors import FlagUnavailableError

logger = logging.getLogger("dataprivacy.flags")

ANALYTICS_ENABLED = "analytics_enabled"
DEVICE_STATS_ENABLED = "device_stats_enabled"
LIMIT_USER_TRACKING = "limit_user_tracking"
PERFORMANCE_REPORTING_ENABLED = "performance_reporting_enabled"

FLAG_NAMES = (
    ANALYTICS_ENABLED,
    DEVICE_STATS_ENABLED,
    LIMIT_USER_TRACKING,
    PERFORMANCE_REPORTING_ENABLED,
)


class LiveFlags:
    """The currently-effective telemetry switches for this process.

    One instance is owned by the host and handed to every consumer.
    Reads and writes are serialized by a re-entrant lock so the
    reconciler can hold it across a full merge.

    When ``performance_reporting_available`` is False the build has no
    performance reporting; touching that flag raises FlagUnavailableError.
    """

    def __init__(
        self,
        analytics_enabled: bool = True,
        device_stats_enabled: bool = True,
        limit_user_tracking: bool = False,
        performance_reporting_enabled: bool = True,
        performance_reporting_available: bool = True,
    ):
        self._lock = threading.RLock()
        self._available = set(FLAG_NAMES)
        if not performance_reporting_available:
            self._available.discard(PERFORMANCE_REPORTING_ENABLED)
        self._values: dict[str, bool] = {
            ANALYTICS_ENABLED: bool(analytics_enabled),
            DEVICE_STATS_ENABLED: bool(device_stats_enabled),
            LIMIT_USER_TRACKING: bool(limit_user_tracking),
            PERFORMANCE_REPORTING_ENABLED: bool(performance_reporting_enabled),
        }

    @classmethod
    def from_config(cls, config=None) -> LiveFlags:
        """Build the developer-set flags from the ``flags.*`` config section."""
        if config is None:
            from dataprivacy.config import get_config_service
            config = get_config_service()
        return cls(
            analytics_enabled=config.get("flags.analytics_enabled", True),
            device_stats_enabled=config.get("flags.device_stats_enabled", True),
            limit_user_tracking=config.get("flags.limit_user_tracking", False),
            performance_reporting_enabled=config.get(
                "flags.performance_reporting_enabled", True
            ),
            performance_reporting_available=config.get(
                "flags.performance_reporting_available", True
            ),
        )

    @contextmanager
    def locked(self):
        """Hold the flags lock for a multi-flag update."""
        with self._lock:
            yield self

    def is_available(self, name: str) -> bool:
        return name in self._available

    def get(self, name: str) -> bool:
        self._check(name)
        with self._lock:
            return self._values[name]

    def set(self, name: str, value: bool) -> None:
        self._check(name)
        with self._lock:
            old = self._values[name]
            self._values[name] = bool(value)
        if old != bool(value):
            logger.debug("Flag %s changed: %s -> %s", name, old, bool(value))

    def snapshot(self) -> dict[str, bool]:
        """Copy of the available flags and their values."""
        with self._lock:
            return {
                name: value for name, value in self._values.items()
                if name in self._available
            }

    def _check(self, name: str) -> None:
        if name not in self._values:
            raise KeyError(f"Unknown flag: {name}")
        if name not in self._available:
            raise FlagUnavailableError(name)

    # Convenience accessors for telemetry producers
    @property
    def analytics_enabled(self) -> bool:
        return self.get(ANALYTICS_ENABLED)

    @property
    def device_stats_enabled(self) -> bool:
        return self.get(DEVICE_STATS_ENABLED)

    @property
    def limit_user_tracking(self) -> bool:
        return self.get(LIMIT_USER_TRACKING)

    @property
    def performance_reporting_enabled(self) -> bool:
        return self.get(PERFORMANCE_REPORTING_ENABLED)

    def __repr__(self) -> str:
        flags = ", ".join(f"{k}={v}" for k, v in self.snapshot().items())
        return f"LiveFlags({flags})"
