"""Restrictive-wins merge of a status snapshot into the live flags."""

from __future__ import annotations

import logging
import operator

from dataprivacy.flags import (
    ANALYTICS_ENABLED,
    DEVICE_STATS_ENABLED,
    LIMIT_USER_TRACKING,
    PERFORMANCE_REPORTING_ENABLED,
    LiveFlags,
)
from dataprivacy.models import PrivacyStatus

logger = logging.getLogger("dataprivacy.reconciler")

# Enabled flags need both sides to allow; limit_user_tracking sticks once
# either side asks for it.
RULES = (
    (ANALYTICS_ENABLED, operator.and_),
    (DEVICE_STATS_ENABLED, operator.and_),
    (LIMIT_USER_TRACKING, operator.or_),
    (PERFORMANCE_REPORTING_ENABLED, operator.and_),
)


def reconcile(flags: LiveFlags, candidate: PrivacyStatus) -> list[str]:
    """Tighten ``flags`` so none grants more than ``candidate`` allows.

    Each rule is applied on its own: a flag that cannot be read or
    written is logged and skipped, and the rest are still applied.
    ``opt_out`` is never touched.

    Returns:
        Names of the flags that could not be applied.
    """
    failed: list[str] = []
    with flags.locked():
        for name, combine in RULES:
            if not flags.is_available(name):
                logger.debug("Skipping %s: not available in this build", name)
                continue
            try:
                flags.set(name, combine(flags.get(name), getattr(candidate, name)))
            except Exception:
                logger.error("Failed to apply %s", name, exc_info=True)
                failed.append(name)
    return failed
