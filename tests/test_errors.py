"""Tests for custom exception hierarchy."""

from dataprivacy.errors import (
    ConfigError,
    DataPrivacyError,
    EmptyResponseError,
    FlagUnavailableError,
    ResponseParseError,
    TransportError,
)


class TestDataPrivacyErrorBase:
    def test_message(self):
        e = DataPrivacyError("test error")
        assert str(e) == "test error"

    def test_empty_context_by_default(self):
        assert DataPrivacyError("test error").context == {}

    def test_context_passed_through(self):
        e = DataPrivacyError("test error", context={"url": "https://x.test"})
        assert e.context == {"url": "https://x.test"}

    def test_exit_code_default(self):
        assert DataPrivacyError("test error").exit_code == 1


class TestTransportErrors:
    def test_describe_without_body(self):
        e = TransportError("HTTP 503 Service Unavailable", url="https://x.test")
        assert e.describe() == "HTTP 503 Service Unavailable"
        assert e.context["url"] == "https://x.test"

    def test_describe_with_body(self):
        e = TransportError("HTTP 429 Too Many Requests", status_code=429, body="rate limited")
        assert e.describe() == "HTTP 429 Too Many Requests: rate limited"
        assert e.context["status_code"] == 429

    def test_empty_message_falls_back(self):
        assert TransportError("", body="oops").describe() == "Empty response: oops"

    def test_empty_response(self):
        e = EmptyResponseError(url="https://x.test", status_code=200)
        assert isinstance(e, TransportError)
        assert e.describe() == "Empty response"


class TestOtherErrors:
    def test_parse_error_keeps_body(self):
        e = ResponseParseError("bad", body="x" * 500)
        assert e.body == "x" * 500
        assert len(e.context["body"]) == 200
        assert isinstance(e, DataPrivacyError)

    def test_flag_unavailable(self):
        e = FlagUnavailableError("performance_reporting_enabled")
        assert "performance_reporting_enabled" in str(e)
        assert e.context["flag"] == "performance_reporting_enabled"

    def test_config_error(self):
        assert issubclass(ConfigError, DataPrivacyError)
