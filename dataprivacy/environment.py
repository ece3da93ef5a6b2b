"""Host environment accessors: who is asking, from where."""
from __future__ import annotations

import logging
import sys
from dataclasses import dataclass

from dataprivacy.models import PLUGIN_VERSION, UserIdentity

logger = logging.getLogger("dataprivacy.environment")

# Player platform names and their numeric codes as reported to the service
PLATFORMS = {
    "OSXPlayer": 1,
    "WindowsPlayer": 2,
    "IPhonePlayer": 8,
    "Android": 11,
    "LinuxPlayer": 13,
    "WebGLPlayer": 17,
}

# Targets where custom request headers are not allowed
SANDBOXED_PLATFORMS = {"WebGLPlayer"}


def detect_platform() -> str:
    """Map the running OS to a player platform name."""
    if sys.platform == "darwin":
        return "OSXPlayer"
    if sys.platform.startswith("win"):
        return "WindowsPlayer"
    if sys.platform == "emscripten":
        return "WebGLPlayer"
    return "LinuxPlayer"


@dataclass
class HostEnvironment:
    """Values the host application exposes about itself."""

    app_id: str = ""
    user_id: str = ""
    session_id: int = 0
    platform: str = ""
    platform_id: int = -1
    engine_version: str = ""
    debug_build: bool = False
    device_id: str = ""
    web_sandbox: bool = False

    def __post_init__(self):
        if not self.platform:
            self.platform = detect_platform()
        if self.platform_id < 0:
            self.platform_id = PLATFORMS.get(self.platform, 0)
        if self.platform in SANDBOXED_PLATFORMS:
            self.web_sandbox = True

    @classmethod
    def from_config(cls, config=None) -> HostEnvironment:
        """Build from the ``identity.*`` config section."""
        from dataprivacy.errors import ConfigError

        if config is None:
            from dataprivacy.config import get_config_service
            config = get_config_service()

        try:
            session_id = int(config.get("identity.session_id", 0) or 0)
            platform_id = int(config.get("identity.platform_id", -1))
        except (TypeError, ValueError) as e:
            raise ConfigError(
                f"identity.session_id and identity.platform_id must be integers: {e}",
                context={"section": "identity"},
            ) from e

        return cls(
            app_id=str(config.get("identity.app_id", "") or ""),
            user_id=str(config.get("identity.user_id", "") or ""),
            session_id=session_id,
            platform=str(config.get("identity.platform", "") or ""),
            platform_id=platform_id,
            engine_version=str(config.get("identity.engine_version", "") or ""),
            debug_build=bool(config.get("identity.debug_build", False)),
            device_id=str(config.get("identity.device_id", "") or ""),
            web_sandbox=bool(config.get("identity.web_sandbox", False)),
        )


def build_user_identity(env: HostEnvironment) -> UserIdentity:
    """Snapshot the identifying data for one request."""
    return UserIdentity(
        app_id=env.app_id,
        user_id=env.user_id,
        session_id=env.session_id,
        platform=env.platform,
        platform_id=env.platform_id,
        sdk_version=env.engine_version,
        debug_device=env.debug_build,
        device_id=env.device_id,
        plugin_version=PLUGIN_VERSION,
    )


def user_agent(env: HostEnvironment) -> str:
    """e.g. ``UnityPlayer/2022.3.1f1 (LinuxPlayer/13-dev DataPrivacyPackage/2.0.1)``."""
    dev = "-dev" if env.debug_build else ""
    return (
        f"UnityPlayer/{env.engine_version} "
        f"({env.platform}/{env.platform_id}{dev} {PLUGIN_VERSION})"
    )


def request_headers(env: HostEnvironment) -> dict[str, str]:
    """Headers to attach to outbound requests; none on sandboxed targets."""
    if env.web_sandbox:
        return {}
    return {"User-Agent": user_agent(env)}
