"""Process-start hook that kicks off the opt-out fetch once."""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from dataprivacy.flags import (
    ANALYTICS_ENABLED,
    DEVICE_STATS_ENABLED,
    PERFORMANCE_REPORTING_ENABLED,
    LiveFlags,
)

logger = logging.getLogger("dataprivacy.bootstrap")

_GATED = (ANALYTICS_ENABLED, DEVICE_STATS_ENABLED, PERFORMANCE_REPORTING_ENABLED)

_bootstrapped = False


def should_bootstrap(flags: LiveFlags) -> bool:
    """True if at least one telemetry category is enabled in this build."""
    return any(flags.is_available(name) and flags.get(name) for name in _GATED)


def bootstrap(client=None) -> Optional[asyncio.Task]:
    """Start the opt-out fetch, at most once per process.

    Must be called from inside a running event loop. The fetch runs in
    the background without a callback; the returned task can be awaited
    by hosts that want to know when it is done.
    """
    global _bootstrapped
    asyncio.get_running_loop()  # raises RuntimeError outside a loop
    if _bootstrapped:
        return None
    _bootstrapped = True

    if client is None:
        from dataprivacy.client import get_client
        client = get_client()

    if not should_bootstrap(client.flags):
        logger.debug("All telemetry disabled, skipping opt-out fetch")
        return None
    return client.start_opt_out_fetch()


def reset_bootstrap() -> None:
    """Allow bootstrap to run again (for testing)."""
    global _bootstrapped
    _bootstrapped = False
