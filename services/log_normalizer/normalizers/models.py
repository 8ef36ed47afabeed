"""
Canonical security event model shared by every format parser.
Also carries the JSON encoding used by the HTTP/CLI front ends and forwarders.
"""
import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional


class Category(str, Enum):
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    ACCESS = "access"
    DATA_MODIFICATION = "data-modification"
    SYSTEM_EVENT = "system-event"
    SECURITY_EVENT = "security-event"
    NETWORK_EVENT = "network-event"


class Severity(str, Enum):
    """Five-level ordinal scale, most severe first."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)


_SEVERITY_ORDER = list(Severity)


class Result(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    UNKNOWN = "unknown"


class FormatTag(str, Enum):
    SYSLOG = "syslog"
    CEF = "cef"
    LEEF = "leef"
    XML = "xml"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class EventSource:
    hostname: str = ""
    ip_address: str = ""
    application: str = ""
    process_name: str = ""
    process_id: int = 0


@dataclass(frozen=True)
class Account:
    username: str = ""
    domain: str = ""
    user_id: str = ""


@dataclass(frozen=True)
class CanonicalEvent:
    """
    One normalised security event.

    Built in a single parser call and never mutated afterwards;
    ``additional_data`` is exposed as a read-only mapping.
    """

    timestamp: datetime
    source: EventSource
    category: Category
    severity: Severity
    description: str = ""
    result: Result = Result.UNKNOWN
    action: str = ""
    subject_account: Optional[Account] = None
    object_account: Optional[Account] = None
    additional_data: Mapping[str, Any] = field(default_factory=dict)
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self):
        # Enum coercion rejects raw vocabulary that slipped past a mapper
        object.__setattr__(self, "category", Category(self.category))
        object.__setattr__(self, "severity", Severity(self.severity))
        object.__setattr__(self, "result", Result(self.result))
        object.__setattr__(
            self, "additional_data", MappingProxyType(dict(self.additional_data))
        )


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

def _format_ts(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.isoformat().replace("+00:00", "Z")


def _account_to_dict(account: Account) -> dict:
    return {k: v for k, v in (
        ("username", account.username),
        ("domain", account.domain),
        ("user_id", account.user_id),
    ) if v}


def event_to_dict(event: CanonicalEvent) -> dict:
    """Encode an event field by field; empty optional fields are omitted."""
    src = event.source
    source = {"hostname": src.hostname}
    if src.ip_address:
        source["ip_address"] = src.ip_address
    if src.application:
        source["application"] = src.application
    if src.process_name:
        source["process_name"] = src.process_name
    if src.process_id:
        source["process_id"] = src.process_id

    out = {
        "event_id": event.event_id,
        "timestamp": _format_ts(event.timestamp),
        "source": source,
        "category": event.category.value,
        "severity": event.severity.value,
        "description": event.description,
        "result": event.result.value,
        "action": event.action,
    }
    if event.subject_account is not None:
        out["subject_account"] = _account_to_dict(event.subject_account)
    if event.object_account is not None:
        out["object_account"] = _account_to_dict(event.object_account)
    if event.additional_data:
        out["additional_data"] = dict(event.additional_data)
    return out


def event_to_json(event: CanonicalEvent, indent: Optional[int] = None) -> str:
    return json.dumps(event_to_dict(event), indent=indent, ensure_ascii=False, default=str)


def events_to_json(events, indent: Optional[int] = None) -> str:
    return json.dumps(
        [event_to_dict(e) for e in events], indent=indent, ensure_ascii=False, default=str
    )
