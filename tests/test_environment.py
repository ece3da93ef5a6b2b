"""Tests for host environment, identity snapshots and request headers."""

import pytest

from dataprivacy.environment import (
    PLATFORMS,
    HostEnvironment,
    build_user_identity,
    detect_platform,
    request_headers,
    user_agent,
)
from dataprivacy.errors import ConfigError


class TestHostEnvironment:
    def test_platform_id_from_name(self):
        assert HostEnvironment(platform="WindowsPlayer").platform_id == 2

    def test_explicit_platform_id_kept(self):
        assert HostEnvironment(platform="LinuxPlayer", platform_id=99).platform_id == 99

    def test_unknown_platform_id_zero(self):
        assert HostEnvironment(platform="Toaster").platform_id == 0

    def test_detected_platform_default(self):
        env = HostEnvironment()
        assert env.platform == detect_platform()
        assert env.platform in PLATFORMS

    def test_webgl_is_sandboxed(self):
        env = HostEnvironment(platform="WebGLPlayer")
        assert env.web_sandbox is True
        assert env.platform_id == 17

    def test_from_config_env_vars(self, monkeypatch):
        monkeypatch.setenv("DATAPRIVACY_APP_ID", "app")
        monkeypatch.setenv("DATAPRIVACY_USER_ID", "1")
        monkeypatch.setenv("DATAPRIVACY_SESSION_ID", "42")
        monkeypatch.setenv("DATAPRIVACY_DEBUG_BUILD", "yes")
        monkeypatch.setenv("DATAPRIVACY_PLATFORM", "OSXPlayer")
        env = HostEnvironment.from_config()
        assert env.app_id == "app"
        assert env.user_id == "1"
        assert env.session_id == 42
        assert env.debug_build is True
        assert env.platform == "OSXPlayer"
        assert env.platform_id == 1

    def test_from_config_quoted_toml_values(self, tmp_path):
        (tmp_path / ".dataprivacy.toml").write_text(
            '[identity]\nsession_id = "12"\ndebug_build = "false"\n'
        )
        env = HostEnvironment.from_config()
        assert env.session_id == 12
        assert env.debug_build is False

    def test_from_config_bad_session_id(self, tmp_path):
        (tmp_path / ".dataprivacy.toml").write_text('[identity]\nsession_id = "abc"\n')
        with pytest.raises(ConfigError):
            HostEnvironment.from_config()


class TestIdentityAndHeaders:
    def _env(self, **overrides):
        values = dict(
            app_id="app", user_id="user", session_id=5, platform="LinuxPlayer",
            engine_version="2022.3.1f1", device_id="dev",
        )
        values.update(overrides)
        return HostEnvironment(**values)

    def test_build_user_identity(self):
        identity = build_user_identity(self._env(debug_build=True))
        assert identity.app_id == "app"
        assert identity.session_id == 5
        assert identity.platform_id == 13
        assert identity.sdk_version == "2022.3.1f1"
        assert identity.debug_device is True
        assert identity.plugin_version == "DataPrivacyPackage/2.0.1"

    def test_user_agent_release(self):
        assert user_agent(self._env()) == (
            "UnityPlayer/2022.3.1f1 (LinuxPlayer/13 DataPrivacyPackage/2.0.1)"
        )

    def test_user_agent_debug(self):
        assert user_agent(self._env(debug_build=True)) == (
            "UnityPlayer/2022.3.1f1 (LinuxPlayer/13-dev DataPrivacyPackage/2.0.1)"
        )

    def test_headers(self):
        assert request_headers(self._env()) == {"User-Agent": user_agent(self._env())}

    def test_no_headers_when_sandboxed(self):
        assert request_headers(self._env(web_sandbox=True)) == {}
