"""Shared fixtures for dataprivacy tests."""
import json

import httpx
import pytest

from dataprivacy.config import ENV_VAR_MAP


@pytest.fixture(autouse=True)
def dataprivacy_home(tmp_path, monkeypatch):
    """Point every config and data location at a temporary directory.

    This ensures tests never touch real preferences or config files.
    """
    home = tmp_path / "dataprivacy-data"
    home.mkdir()
    monkeypatch.setenv("DATAPRIVACY_HOME", str(home))
    monkeypatch.delenv("DATAPRIVACY_DEBUG", raising=False)
    for env_var in ENV_VAR_MAP:
        monkeypatch.delenv(env_var, raising=False)

    monkeypatch.setattr(
        "dataprivacy.config._global_config_path",
        lambda: tmp_path / "global" / "config.toml",
    )
    monkeypatch.setattr(
        "dataprivacy.config._project_config_path",
        lambda: tmp_path / ".dataprivacy.toml",
    )
    monkeypatch.chdir(tmp_path)

    _reset_singletons()
    yield home
    _reset_singletons()


def _reset_singletons():
    from dataprivacy.bootstrap import reset_bootstrap
    from dataprivacy.client import reset_client
    from dataprivacy.config import reset_config_service

    reset_config_service()
    reset_client()
    reset_bootstrap()


def _status_body(
    opt_out=False,
    analytics=True,
    device_stats=True,
    limit_tracking=False,
    performance=True,
    date="2024-05-01T00:00:00Z",
) -> str:
    """JSON body as returned by the opt-out endpoint."""
    return json.dumps({
        "request": {"date": date},
        "status": {
            "optOut": opt_out,
            "analyticsEnabled": analytics,
            "deviceStatsEnabled": device_stats,
            "limitUserTracking": limit_tracking,
            "performanceReportingEnabled": performance,
        },
    })


@pytest.fixture
def status_body():
    """Builder for opt-out endpoint bodies."""
    return _status_body


@pytest.fixture
def environment():
    from dataprivacy.environment import HostEnvironment

    return HostEnvironment(
        app_id="app-123",
        user_id="user-456",
        session_id=987654321,
        platform="LinuxPlayer",
        engine_version="2022.3.1f1",
        debug_build=False,
        device_id="device-789",
    )


@pytest.fixture
def make_client(environment):
    """Factory for a DataPrivacy client whose HTTP calls hit ``handler``.

    Every request seen is appended to ``client.requests``.
    """
    from dataprivacy.client import DataPrivacy
    from dataprivacy.flags import LiveFlags
    from dataprivacy.prefs import MemoryPreferenceStore
    from dataprivacy.transport import HttpTransport

    def _make(handler, flags=None, store=None, env=None):
        requests: list[httpx.Request] = []

        def _recording(request):
            requests.append(request)
            return handler(request)

        client = DataPrivacy(
            flags=flags or LiveFlags(),
            store=store if store is not None else MemoryPreferenceStore(),
            environment=env or environment,
            transport=HttpTransport(transport=httpx.MockTransport(_recording)),
            base_url="https://optout.test",
        )
        client.requests = requests
        return client

    return _make
