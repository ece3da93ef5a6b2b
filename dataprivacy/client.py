"""Opt-out status and privacy URL fetchers.

The opt-out fetch is the heart of the package: it applies the cached
status immediately, asks the service for the current one, and on
success applies and caches that. Every failure falls back to the
cached status; nothing here raises except user callbacks.
"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable, Optional, Union

import httpx

from dataprivacy.environment import HostEnvironment, build_user_identity, request_headers
from dataprivacy.errors import ResponseParseError, TransportError
from dataprivacy.flags import LiveFlags
from dataprivacy.models import OptOutResponse, TokenData
from dataprivacy.prefs import PreferenceStore, YamlPreferenceStore, load_status, save_status
from dataprivacy.reconciler import reconcile
from dataprivacy.transport import HttpTransport

logger = logging.getLogger("dataprivacy.client")

DEFAULT_BASE_URL = "https://data-optout-service.uca.cloud.unity3d.com"

_MISSING_IDENTITY_MESSAGES = {
    "app_id": (
        "Could not find AppID for the project. Create a new project ID "
        "or link to an existing one."
    ),
    "user_id": "Could not find UserID!",
    "device_id": "Could not find DeviceID!",
}

EnvironmentSource = Union[HostEnvironment, Callable[[], HostEnvironment]]

# Singleton instance
_client: "DataPrivacy | None" = None


class DataPrivacy:
    """Keeps a host's live flags in line with the opt-out service.

    Args:
        flags: The live flags owned by the host.
        store: Where the last known status is cached.
        environment: A HostEnvironment, or a zero-arg callable returning
            one. A callable is re-evaluated for every request.
        transport: HTTP transport; defaults to a plain HttpTransport.
        base_url: Opt-out service root.
    """

    def __init__(
        self,
        flags: LiveFlags,
        store: PreferenceStore,
        environment: EnvironmentSource,
        transport: Optional[HttpTransport] = None,
        base_url: str = DEFAULT_BASE_URL,
    ):
        self.flags = flags
        self.store = store
        self._environment = environment
        self.transport = transport or HttpTransport()
        self.base_url = base_url.rstrip("/")

    @property
    def opt_out_url(self) -> str:
        return f"{self.base_url}/player/opt_out"

    @property
    def token_url(self) -> str:
        return f"{self.base_url}/token"

    def environment(self) -> HostEnvironment:
        if callable(self._environment):
            return self._environment()
        return self._environment

    async def fetch_opt_out_status(
        self, callback: Optional[Callable[[bool], None]] = None
    ) -> bool:
        """Fetch the remote opt-out status and fold it into the live flags.

        The cached status is applied before any network I/O, so flags are
        correct even offline. ``callback`` (if given) is called exactly
        once with the effective opt-out value, which is also returned.
        """
        local_status = load_status(self.store)
        reconcile(self.flags, local_status)

        env = self.environment()
        identity = build_user_identity(env)
        for name in identity.missing_fields():
            logger.error(_MISSING_IDENTITY_MESSAGES[name])

        params = {
            "appid": identity.app_id,
            "userid": identity.user_id,
            "deviceid": identity.device_id,
        }
        request_url = _full_url(self.opt_out_url, params)

        try:
            body = await self.transport.get(
                self.opt_out_url, params=params, headers=request_headers(env)
            )
            response = OptOutResponse.from_json(body)
        except TransportError as e:
            logger.warning(
                "Failed to load data opt-out status from %s: %s",
                e.url or request_url,
                e.describe(),
            )
            return _deliver(callback, local_status.opt_out)
        except ResponseParseError as e:
            logger.warning(
                "Failed to load data opt-out status from %s: %s", request_url, e
            )
            return _deliver(callback, local_status.opt_out)

        reconcile(self.flags, response.status)
        try:
            save_status(self.store, response.status)
        except OSError:
            # Flags are already applied; the next fetch will try again
            logger.warning("Failed to save privacy status", exc_info=True)
        logger.info(
            "Applied remote privacy status (optOut=%s, date=%s)",
            response.status.opt_out,
            response.request_date or "unknown",
        )
        return _deliver(callback, response.status.opt_out)

    def start_opt_out_fetch(
        self, callback: Optional[Callable[[bool], None]] = None
    ) -> asyncio.Task:
        """Schedule fetch_opt_out_status on the running loop and return at once."""
        return asyncio.get_running_loop().create_task(
            self.fetch_opt_out_status(callback)
        )

    async def fetch_privacy_url(
        self,
        success: Callable[[str], None],
        failure: Optional[Callable[[str], None]] = None,
    ) -> Optional[str]:
        """Request a tokenized privacy dashboard URL.

        Exactly one of ``success`` / ``failure`` is called. A response
        without a ``url`` field counts as success with an empty URL.
        """
        env = self.environment()
        payload = build_user_identity(env).to_payload()

        try:
            body = await self.transport.post_json(
                self.token_url, payload, headers=request_headers(env)
            )
            token = TokenData.from_json(body)
        except TransportError as e:
            return _fail(failure, e.describe())
        except ResponseParseError as e:
            return _fail(failure, str(e))

        success(token.url)
        return token.url


def _full_url(url: str, params: dict) -> str:
    """The request URL for log lines; the bare URL if httpx rejects it."""
    try:
        return str(httpx.URL(url, params=params))
    except httpx.InvalidURL:
        return url


def _deliver(callback: Optional[Callable[[bool], None]], opt_out: bool) -> bool:
    if callback is not None:
        callback(opt_out)
    return opt_out


def _fail(failure: Optional[Callable[[str], None]], error: str) -> None:
    logger.warning("Failed to fetch privacy URL: %s", error)
    if failure is not None:
        failure(error)
    return None


def _default_prefs_path(config) -> Path:
    configured = config.get("prefs.path", "")
    if configured:
        return Path(configured).expanduser()
    return config.get_data_dir() / "prefs.yaml"


def get_client() -> DataPrivacy:
    """Get the process-wide client, built from configuration."""
    global _client
    if _client is None:
        from dataprivacy.config import get_config_service

        config = get_config_service()
        _client = DataPrivacy(
            flags=LiveFlags.from_config(config),
            store=YamlPreferenceStore(_default_prefs_path(config)),
            environment=lambda: HostEnvironment.from_config(config),
            base_url=config.get("service.base_url", DEFAULT_BASE_URL),
        )
    return _client


def reset_client() -> None:
    """Reset the singleton (for testing)."""
    global _client
    _client = None
