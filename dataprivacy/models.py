"""Core data models for dataprivacy."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass

from dataprivacy.errors import ResponseParseError

# ── Versions ──
MODULE_VERSION = "2.0.1"
PLUGIN_VERSION = f"DataPrivacyPackage/{MODULE_VERSION}"

# Snake-case field name -> wire name
STATUS_FIELDS = {
    "opt_out": "optOut",
    "analytics_enabled": "analyticsEnabled",
    "device_stats_enabled": "deviceStatsEnabled",
    "limit_user_tracking": "limitUserTracking",
    "performance_reporting_enabled": "performanceReportingEnabled",
}


def _parse_json_object(text: str) -> dict:
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        raise ResponseParseError(f"Invalid JSON: {e}", body=text or "") from e
    if not isinstance(data, dict):
        raise ResponseParseError(
            f"Expected a JSON object, got {type(data).__name__}", body=text
        )
    return data


# ── Status Snapshot ──
@dataclass(frozen=True)
class PrivacyStatus:
    """One point-in-time snapshot of permission state."""

    opt_out: bool = False
    analytics_enabled: bool = True
    device_stats_enabled: bool = True
    limit_user_tracking: bool = False
    performance_reporting_enabled: bool = True

    @classmethod
    def from_dict(cls, d: dict) -> PrivacyStatus:
        """Build from a wire-format status object.

        Every field must be present and boolean; a partial status would
        otherwise silently read as "everything disabled".
        """
        if not isinstance(d, dict):
            raise ResponseParseError("Status must be a JSON object")
        values = {}
        for attr, wire in STATUS_FIELDS.items():
            if wire not in d:
                raise ResponseParseError(f"Status is missing '{wire}'")
            value = d[wire]
            if not isinstance(value, bool):
                raise ResponseParseError(
                    f"Status field '{wire}' must be a boolean, got {value!r}"
                )
            values[attr] = value
        return cls(**values)

    def to_dict(self) -> dict:
        return {wire: getattr(self, attr) for attr, wire in STATUS_FIELDS.items()}


@dataclass(frozen=True)
class OptOutResponse:
    """Body of ``GET /player/opt_out``."""

    request_date: str
    status: PrivacyStatus

    @classmethod
    def from_json(cls, text: str) -> OptOutResponse:
        data = _parse_json_object(text)
        if "status" not in data:
            raise ResponseParseError("Response has no 'status' object", body=text)
        request = data.get("request") or {}
        if not isinstance(request, dict):
            raise ResponseParseError("'request' must be a JSON object", body=text)
        return cls(
            request_date=str(request.get("date", "")),
            status=PrivacyStatus.from_dict(data["status"]),
        )


@dataclass(frozen=True)
class TokenData:
    """Body of ``POST /token``."""

    url: str = ""
    token: str = ""

    @classmethod
    def from_json(cls, text: str) -> TokenData:
        data = _parse_json_object(text)
        # null counts as absent
        url = data.get("url")
        url = "" if url is None else url
        token = data.get("token")
        token = "" if token is None else token
        if not isinstance(url, str) or not isinstance(token, str):
            raise ResponseParseError("'url' and 'token' must be strings", body=text)
        return cls(url=url, token=token)


# ── Identity ──
@dataclass(frozen=True)
class UserIdentity:
    """Identifying data sent with every request. Rebuilt per request."""

    app_id: str
    user_id: str
    session_id: int
    platform: str
    platform_id: int
    sdk_version: str
    debug_device: bool
    device_id: str
    plugin_version: str = PLUGIN_VERSION

    def missing_fields(self) -> list[str]:
        """Names of the identifying fields the server needs but are empty."""
        return [
            name for name in ("app_id", "user_id", "device_id")
            if not getattr(self, name)
        ]

    def to_payload(self) -> dict:
        """Serialize to the token endpoint's POST body."""
        d = asdict(self)
        return {
            "appid": d["app_id"],
            "userid": d["user_id"],
            "sessionid": d["session_id"],
            "platform": d["platform"],
            "platformid": d["platform_id"],
            "sdk_ver": d["sdk_version"],
            "debug_device": d["debug_device"],
            "deviceid": d["device_id"],
            "plugin_ver": d["plugin_version"],
        }
