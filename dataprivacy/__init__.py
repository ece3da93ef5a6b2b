"""dataprivacy - gate telemetry on the user's data opt-out status."""

from dataprivacy.bootstrap import bootstrap
from dataprivacy.client import DataPrivacy, get_client
from dataprivacy.environment import HostEnvironment
from dataprivacy.flags import LiveFlags
from dataprivacy.models import PrivacyStatus, UserIdentity
from dataprivacy.prefs import MemoryPreferenceStore, YamlPreferenceStore
from dataprivacy.reconciler import reconcile

__all__ = [
    "DataPrivacy",
    "HostEnvironment",
    "LiveFlags",
    "MemoryPreferenceStore",
    "PrivacyStatus",
    "UserIdentity",
    "YamlPreferenceStore",
    "bootstrap",
    "get_client",
    "reconcile",
]
