"""
Common Event Format (CEF) parser.

CEF:Version|Device Vendor|Device Product|Device Version|Signature ID|Name|Severity|Extension
"""
from typing import Optional

from .errors import MalformedRecordError
from .keywords import classify, contains_any
from .models import Account, CanonicalEvent, Category, EventSource, Result, Severity, now_utc
from .patterns import CEF_RE
from .timestamps import EPOCH_MILLIS, RFC3339, or_now, parse_timestamp

TIMESTAMP_LAYOUTS = [
    RFC3339,
    "%b %d %Y %H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    EPOCH_MILLIS,
]

# Ordered by priority (first match wins)
CATEGORY_RULES = [
    (Category.AUTHENTICATION,    ["login", "logon", "authentication"]),
    (Category.ACCESS,            ["access", "denied", "permission"]),
    (Category.DATA_MODIFICATION, ["modify", "change", "update", "delete"]),
    (Category.NETWORK_EVENT,     ["network", "connection", "firewall"]),
    (Category.SECURITY_EVENT,    ["security", "threat", "attack", "malware"]),
]

# CEF severity (0-10) thresholds, highest first
SEVERITY_THRESHOLDS = [
    (8, Severity.CRITICAL),
    (6, Severity.HIGH),
    (4, Severity.MEDIUM),
    (2, Severity.LOW),
]


def parse_extensions(ext_str: str) -> dict:
    """Split 'k=v k=v' on single spaces and the first '=' of each token."""
    result = {}
    for token in ext_str.split(" "):
        key, sep, value = token.partition("=")
        if sep:
            result[key] = value
    return result


def map_severity(value: str) -> Severity:
    try:
        sev = int(value)
    except (TypeError, ValueError):
        return Severity.INFO
    for floor, severity in SEVERITY_THRESHOLDS:
        if sev >= floor:
            return severity
    return Severity.INFO


def determine_result(ext: dict) -> Result:
    outcome = ext.get("outcome")
    if outcome is not None:
        if contains_any(outcome, ["success"]):
            return Result.SUCCESS
        if contains_any(outcome, ["fail", "deny"]):
            return Result.FAILURE
    act = ext.get("act")
    if act is not None:
        if contains_any(act, ["allow", "permit"]):
            return Result.SUCCESS
        if contains_any(act, ["block", "deny"]):
            return Result.FAILURE
    return Result.UNKNOWN


def _first(ext: dict, *keys: str) -> str:
    for key in keys:
        if ext.get(key):
            return ext[key]
    return ""


def _account(ext: dict, user_key: str, domain_key: str) -> Optional[Account]:
    if user_key not in ext:
        return None
    return Account(username=ext[user_key], domain=ext.get(domain_key, ""))


def _timestamp(ext: dict):
    # Only the first present key is consulted
    for key in ("rt", "end"):
        if key in ext:
            return or_now(parse_timestamp, ext[key], TIMESTAMP_LAYOUTS)
    return now_utc()


def parse(raw: str) -> CanonicalEvent:
    """Parse a CEF record into a canonical event."""
    m = CEF_RE.match(raw)
    if not m:
        raise MalformedRecordError("cef", "invalid CEF header")

    version, vendor, product, dev_version, sig_id, name, severity, ext_str = m.groups()
    ext = parse_extensions(ext_str)

    data = {"cef_" + key: value for key, value in ext.items()}
    # Header fields win over extensions with the same name
    data.update({
        "cef_version": version,
        "device_vendor": vendor,
        "device_product": product,
        "device_version": dev_version,
        "signature_id": sig_id,
        "cef_severity": severity,
    })

    return CanonicalEvent(
        timestamp=_timestamp(ext),
        source=EventSource(
            hostname=_first(ext, "dvc", "shost", "dvchost"),
            ip_address=_first(ext, "src", "dst"),
            application=f"{vendor} {product}",
        ),
        category=classify(name, CATEGORY_RULES, Category.SYSTEM_EVENT),
        severity=map_severity(severity),
        description=name,
        result=determine_result(ext),
        action=ext.get("act", ""),
        subject_account=_account(ext, "suser", "sdomain"),
        object_account=_account(ext, "duser", "ddomain"),
        additional_data=data,
    )
