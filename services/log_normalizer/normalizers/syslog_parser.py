"""
Syslog parser supporting RFC 5424 and RFC 3164 (BSD) messages.
RFC 5424 is tried first; RFC 3164 only when the structured grammar fails.
"""
from .errors import MalformedRecordError
from .keywords import classify
from .models import CanonicalEvent, Category, EventSource, Result, Severity
from .patterns import RFC3164_RE, RFC5424_RE
from .timestamps import RFC3339, or_now, parse_bsd_timestamp, parse_timestamp

# ---------------------------------------------------------------------------
# Severity / category mappings
# ---------------------------------------------------------------------------

# RFC 3164/5424 severity code (0-7) → canonical severity
SYSLOG_SEV_MAP = {
    0: Severity.CRITICAL, 1: Severity.CRITICAL, 2: Severity.CRITICAL,
    3: Severity.HIGH,
    4: Severity.MEDIUM,
    5: Severity.LOW, 6: Severity.LOW,
    7: Severity.INFO,
}

# Ordered by priority (first match wins)
CATEGORY_RULES = [
    (Category.AUTHENTICATION, ["login", "auth"]),
    (Category.ACCESS,         ["access", "denied"]),
    (Category.NETWORK_EVENT,  ["network", "connection"]),
    (Category.SECURITY_EVENT, ["security", "breach"]),
]

NIL = "-"


def _decompose(priority: int) -> tuple[int, int]:
    """Split PRI into (facility, severity_code)."""
    return priority // 8, priority % 8


def _nil(value: str) -> str:
    return "" if value == NIL else value


def _int_or_zero(value: str) -> int:
    # isdigit alone accepts non-ASCII digits such as "²"
    return int(value) if value and value.isascii() and value.isdigit() else 0


def _base_data(priority: int) -> dict:
    facility, sev_code = _decompose(priority)
    return {
        "syslog_priority": priority,
        "syslog_facility": facility,
        "syslog_severity": sev_code,
    }


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def parse(raw: str) -> CanonicalEvent:
    """Parse an RFC 5424 or RFC 3164 message into a canonical event."""
    m = RFC5424_RE.match(raw)
    if m:
        return _parse_rfc5424(m)
    m = RFC3164_RE.match(raw)
    if m:
        return _parse_rfc3164(m)
    raise MalformedRecordError("syslog", "unsupported syslog format")


def _parse_rfc5424(m) -> CanonicalEvent:
    priority = int(m.group(1))
    version = m.group(2)
    timestamp = or_now(parse_timestamp, m.group(3), [RFC3339])
    hostname = _nil(m.group(4))
    app_name = _nil(m.group(5))
    proc_id = _int_or_zero(m.group(6))
    msg_id = m.group(7)
    message = m.group(9)

    data = _base_data(priority)
    data["syslog_version"] = version
    data["syslog_msgid"] = msg_id

    return CanonicalEvent(
        timestamp=timestamp,
        source=EventSource(hostname=hostname, application=app_name, process_id=proc_id),
        category=classify(message, CATEGORY_RULES, Category.SYSTEM_EVENT),
        severity=SYSLOG_SEV_MAP[priority % 8],
        description=message,
        result=Result.UNKNOWN,
        additional_data=data,
    )


def _parse_rfc3164(m) -> CanonicalEvent:
    priority = int(m.group(1))
    timestamp = or_now(parse_bsd_timestamp, m.group(2))
    hostname = m.group(3)
    tag = m.group(4)
    proc_id = _int_or_zero(m.group(5))
    message = m.group(6)

    return CanonicalEvent(
        timestamp=timestamp,
        source=EventSource(hostname=hostname, application=tag, process_id=proc_id),
        category=classify(message, CATEGORY_RULES, Category.SYSTEM_EVENT),
        severity=SYSLOG_SEV_MAP[priority % 8],
        description=message,
        result=Result.UNKNOWN,
        additional_data=_base_data(priority),
    )
