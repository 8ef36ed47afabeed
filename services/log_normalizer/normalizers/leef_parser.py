"""
Log Event Extended Format (LEEF) parser.

LEEF:Version|Vendor|Product|Version|EventID|Attributes

Attributes are tab-delimited. LEEF 2.0 producers often escape the tab as the
literal text ``x09`` or use ``^`` instead; both are accepted for 2.0.
"""
from typing import Optional

from .errors import MalformedRecordError
from .keywords import classify, contains_any
from .models import Account, CanonicalEvent, Category, EventSource, Result, Severity, now_utc
from .patterns import LEEF_RE
from .timestamps import RFC3339, or_now, parse_timestamp

TIMESTAMP_LAYOUTS = [
    RFC3339,
    "%Y-%m-%d %H:%M:%S",
    "%b %d %Y %H:%M:%S",
]

# (severity, keywords matched as substrings, exact numeric tokens)
SEVERITY_RULES = [
    (Severity.CRITICAL, ["critical", "fatal"], ["10"]),
    (Severity.HIGH,     ["high", "error"],     ["8", "7"]),
    (Severity.MEDIUM,   ["medium", "warn"],    ["5", "6"]),
    (Severity.LOW,      ["low"],               ["3", "4"]),
    (Severity.INFO,     ["info"],              ["1", "2"]),
]

# Checked against the 'cat' attribute before falling back to the event id
CAT_ATTR_RULES = [
    (Category.AUTHENTICATION, ["auth"]),
    (Category.ACCESS,         ["access"]),
    (Category.NETWORK_EVENT,  ["network"]),
]

EVENT_ID_RULES = [
    (Category.AUTHENTICATION,    ["login", "auth"]),
    (Category.ACCESS,            ["access", "permission"]),
    (Category.DATA_MODIFICATION, ["modify", "change"]),
    (Category.NETWORK_EVENT,     ["network", "connection"]),
    (Category.SECURITY_EVENT,    ["security", "threat"]),
]

TAB = "\t"
ESCAPED_TAB = "x09"
CARET = "^"


def split_attributes(attr_str: str, version: str) -> list:
    if version == "2.0":
        if ESCAPED_TAB in attr_str:
            return attr_str.replace(ESCAPED_TAB, TAB).split(TAB)
        if CARET in attr_str:
            return attr_str.split(CARET)
    return attr_str.split(TAB)


def parse_attributes(attr_str: str, version: str) -> dict:
    result = {}
    for pair in split_attributes(attr_str, version):
        key, sep, value = pair.partition("=")
        if sep:
            result[key.strip()] = value.strip()
    return result


def map_severity(attrs: dict) -> Severity:
    sev = attrs.get("sev")
    if sev is None:
        return Severity.INFO
    for severity, keywords, exact in SEVERITY_RULES:
        if contains_any(sev, keywords) or sev in exact:
            return severity
    return Severity.INFO


def categorize(event_id: str, attrs: dict) -> Category:
    cat = attrs.get("cat")
    if cat is not None:
        category = classify(cat, CAT_ATTR_RULES)
        if category is not None:
            return category
    return classify(event_id, EVENT_ID_RULES, Category.SYSTEM_EVENT)


def determine_result(attrs: dict) -> Result:
    result = attrs.get("result")
    if result is not None:
        if contains_any(result, ["success", "allow"]):
            return Result.SUCCESS
        if contains_any(result, ["fail", "deny"]):
            return Result.FAILURE
    action = attrs.get("action")
    if action is not None:
        if contains_any(action, ["allow", "permit"]):
            return Result.SUCCESS
        if contains_any(action, ["block", "deny"]):
            return Result.FAILURE
    return Result.UNKNOWN


def _first(attrs: dict, *keys: str) -> str:
    for key in keys:
        if attrs.get(key):
            return attrs[key]
    return ""


def _subject(attrs: dict) -> Optional[Account]:
    if "srcUser" in attrs:
        return Account(username=attrs["srcUser"], domain=attrs.get("srcDomain", ""))
    if "usrName" in attrs:
        return Account(username=attrs["usrName"])
    return None


def _object(attrs: dict) -> Optional[Account]:
    if "dstUser" in attrs:
        return Account(username=attrs["dstUser"], domain=attrs.get("dstDomain", ""))
    return None


def parse(raw: str) -> CanonicalEvent:
    """Parse a LEEF 1.0/2.0 record into a canonical event."""
    m = LEEF_RE.match(raw)
    if not m:
        raise MalformedRecordError("leef", "invalid LEEF header")

    version, vendor, product, product_version, event_id, attr_str = m.groups()
    attrs = parse_attributes(attr_str, version)

    if "devTime" in attrs:
        timestamp = or_now(parse_timestamp, attrs["devTime"], TIMESTAMP_LAYOUTS)
    else:
        timestamp = now_utc()

    data = {"leef_" + key: value for key, value in attrs.items()}
    # Header fields win over attributes with the same name
    data.update({
        "leef_version": version,
        "leef_vendor": vendor,
        "leef_product": product,
        "leef_product_version": product_version,
        "leef_event_id": event_id,
    })

    return CanonicalEvent(
        timestamp=timestamp,
        source=EventSource(
            hostname=_first(attrs, "devName", "srcHostName", "dstHostName"),
            ip_address=_first(attrs, "src", "dst"),
            application=f"{vendor} {product}",
        ),
        category=categorize(event_id, attrs),
        severity=map_severity(attrs),
        description=_first(attrs, "usrName", "msg", "eventId"),
        result=determine_result(attrs),
        action=attrs["action"] if "action" in attrs else attrs.get("cat", ""),
        subject_account=_subject(attrs),
        object_account=_object(attrs),
        additional_data=data,
    )
