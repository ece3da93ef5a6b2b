"""Tests for the process-start hook."""

import asyncio

import httpx
import pytest

from dataprivacy.bootstrap import bootstrap, reset_bootstrap, should_bootstrap
from dataprivacy.flags import LiveFlags


def _ok(status_body):
    return lambda request: httpx.Response(200, text=status_body())


class TestShouldBootstrap:
    def test_enabled_by_default(self):
        assert should_bootstrap(LiveFlags()) is True

    def test_all_disabled(self):
        flags = LiveFlags(
            analytics_enabled=False,
            device_stats_enabled=False,
            performance_reporting_enabled=False,
        )
        assert should_bootstrap(flags) is False

    def test_any_one_category_is_enough(self):
        assert should_bootstrap(LiveFlags(
            analytics_enabled=False, device_stats_enabled=False,
        )) is True

    def test_limit_user_tracking_does_not_count(self):
        flags = LiveFlags(
            analytics_enabled=False,
            device_stats_enabled=False,
            limit_user_tracking=True,
            performance_reporting_available=False,
        )
        assert should_bootstrap(flags) is False


class TestBootstrap:
    def test_schedules_fetch(self, make_client, status_body):
        client = make_client(_ok(status_body))

        async def main():
            task = bootstrap(client)
            assert isinstance(task, asyncio.Task)
            return await task

        assert asyncio.run(main()) is False
        assert len(client.requests) == 1

    def test_runs_once_per_process(self, make_client, status_body):
        client = make_client(_ok(status_body))

        async def main():
            first = bootstrap(client)
            second = bootstrap(client)
            await first
            return second

        assert asyncio.run(main()) is None
        assert len(client.requests) == 1

    def test_reset_allows_rerun(self, make_client, status_body):
        client = make_client(_ok(status_body))

        async def main():
            await bootstrap(client)
            reset_bootstrap()
            await bootstrap(client)

        asyncio.run(main())
        assert len(client.requests) == 2

    def test_skipped_when_telemetry_disabled(self, make_client, status_body):
        flags = LiveFlags(
            analytics_enabled=False,
            device_stats_enabled=False,
            performance_reporting_enabled=False,
        )
        client = make_client(_ok(status_body), flags=flags)

        async def main():
            return bootstrap(client)

        assert asyncio.run(main()) is None
        assert client.requests == []

    def test_outside_event_loop_raises_without_consuming(self, make_client, status_body):
        client = make_client(_ok(status_body))
        with pytest.raises(RuntimeError):
            bootstrap(client)

        async def main():
            return await bootstrap(client)

        asyncio.run(main())
        assert len(client.requests) == 1

    def test_uses_default_client(self, monkeypatch, make_client, status_body):
        client = make_client(_ok(status_body))
        monkeypatch.setattr("dataprivacy.client._client", client)

        async def main():
            return await bootstrap()

        asyncio.run(main())
        assert len(client.requests) == 1
