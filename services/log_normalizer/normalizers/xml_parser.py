"""
Windows Event Log style XML parser.

Expects an <Event> document with a <System> header block and an <EventData>
block of <Data Name="...">value</Data> pairs. Element namespaces are ignored.
"""
import xml.etree.ElementTree as ET
from typing import Optional

from .errors import DocumentDecodeError
from .models import Account, CanonicalEvent, Category, EventSource, Result, Severity
from .timestamps import or_now, parse_rfc3339

# Event Log Level → canonical severity. 4 (Information) and 5 (Verbose) are
# deliberately not in scale order.
LEVEL_MAP = {
    1: Severity.CRITICAL,
    2: Severity.HIGH,
    3: Severity.MEDIUM,
    4: Severity.INFO,
    5: Severity.LOW,
}

# Inclusive event id ranges, checked before any text heuristic
EVENT_ID_RANGES = [
    (4624, 4634, Category.AUTHENTICATION),
    (4720, 4767, Category.AUTHORIZATION),
    (4660, 4663, Category.ACCESS),
    (4670, 4690, Category.DATA_MODIFICATION),
]

LOGON_FAILED = 4625


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child(elem: Optional[ET.Element], name: str) -> Optional[ET.Element]:
    if elem is None:
        return None
    for child in elem:
        if _local(child.tag) == name:
            return child
    return None


def _text(elem: Optional[ET.Element]) -> str:
    if elem is None or elem.text is None:
        return ""
    return elem.text.strip()


def _attr(elem: Optional[ET.Element], name: str) -> str:
    if elem is None:
        return ""
    return elem.attrib.get(name, "")


def _int(value: str, field: str) -> int:
    value = value.strip()
    if not value:
        return 0
    try:
        return int(value)
    except ValueError:
        raise DocumentDecodeError(f"{field}: invalid integer {value!r}") from None


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def decode(raw: str) -> tuple[dict, list]:
    """
    Decode the document into (system fields, [(name, value), ...]).

    Raises DocumentDecodeError for malformed XML, a root other than <Event>,
    or a numeric System field that is not an integer.
    """
    try:
        root = ET.fromstring(raw)
    except ET.ParseError as e:
        raise DocumentDecodeError(str(e)) from e
    if _local(root.tag) != "Event":
        raise DocumentDecodeError(f"expected <Event> root, got <{_local(root.tag)}>")

    system = _child(root, "System")
    provider = _child(system, "Provider")
    execution = _child(system, "Execution")

    fields = {
        "provider_name": _attr(provider, "Name"),
        "provider_guid": _attr(provider, "Guid"),
        "event_id": _int(_text(_child(system, "EventID")), "EventID"),
        "version": _int(_text(_child(system, "Version")), "Version"),
        "level": _int(_text(_child(system, "Level")), "Level"),
        "task": _int(_text(_child(system, "Task")), "Task"),
        "opcode": _int(_text(_child(system, "Opcode")), "Opcode"),
        "keywords": _text(_child(system, "Keywords")),
        "time_created": _attr(_child(system, "TimeCreated"), "SystemTime"),
        "record_id": _int(_text(_child(system, "EventRecordID")), "EventRecordID"),
        "activity_id": _attr(_child(system, "Correlation"), "ActivityID"),
        "process_id": _int(_attr(execution, "ProcessID"), "ProcessID"),
        "thread_id": _int(_attr(execution, "ThreadID"), "ThreadID"),
        "channel": _text(_child(system, "Channel")),
        "computer": _text(_child(system, "Computer")),
        "user_id": _attr(_child(system, "Security"), "UserID"),
    }

    pairs = []
    event_data = _child(root, "EventData")
    if event_data is not None:
        for d in event_data:
            if _local(d.tag) == "Data":
                pairs.append((d.attrib.get("Name", ""), _text(d)))
    return fields, pairs


# ---------------------------------------------------------------------------
# Mapping
# ---------------------------------------------------------------------------

def categorize(fields: dict) -> Category:
    event_id = fields["event_id"]
    for lo, hi, category in EVENT_ID_RANGES:
        if lo <= event_id <= hi:
            return category

    channel = fields["channel"].lower()
    provider = fields["provider_name"].lower()
    if "security" in channel or "security" in provider:
        return Category.SECURITY_EVENT
    if "system" in channel or "system" in provider:
        return Category.SYSTEM_EVENT
    if "application" in channel:
        return Category.SYSTEM_EVENT
    return Category.SYSTEM_EVENT


def determine_result(fields: dict, pairs: list) -> Result:
    for name, value in pairs:
        name_lower = name.lower()
        value_lower = value.lower()
        if "status" in name_lower or "result" in name_lower:
            if "success" in value_lower or value_lower in ("0", "0x0"):
                return Result.SUCCESS
            if "fail" in value_lower or "error" in value_lower:
                return Result.FAILURE

    if fields["level"] in (1, 2):
        return Result.FAILURE

    event_id = fields["event_id"]
    if event_id == LOGON_FAILED:
        return Result.FAILURE
    if event_id == 4624 or 4634 <= event_id <= 4647:
        return Result.SUCCESS
    return Result.UNKNOWN


def build_description(fields: dict, pairs: list) -> str:
    parts = [f"{name}: {value}" for name, value in pairs if value]
    if parts:
        return "; ".join(parts)
    return f"Event ID {fields['event_id']} from {fields['provider_name']}"


def parse(raw: str) -> CanonicalEvent:
    """Parse an XML event document into a canonical event."""
    fields, pairs = decode(raw)

    username = domain = ip_address = process_name = ""
    has_account = bool(fields["user_id"])
    for name, value in pairs:
        lower = name.lower()
        if "targetusername" in lower or "subjectusername" in lower:
            username = value
            has_account = True
        elif "targetdomainname" in lower or "subjectdomainname" in lower:
            domain = value
            has_account = True
        elif "ipaddress" in lower or "workstationname" in lower:
            if not ip_address:
                ip_address = value
        elif "processname" in lower:
            process_name = value

    subject = None
    if has_account:
        subject = Account(username=username, domain=domain, user_id=fields["user_id"])

    data = {"xml_" + name: value for name, value in pairs if name}
    # System fields win over EventData pairs with the same name
    data.update({
        "xml_event_id": fields["event_id"],
        "xml_level": fields["level"],
        "xml_task": fields["task"],
        "xml_opcode": fields["opcode"],
        "xml_keywords": fields["keywords"],
        "xml_channel": fields["channel"],
        "xml_record_id": fields["record_id"],
        "xml_provider_guid": fields["provider_guid"],
        "xml_thread_id": fields["thread_id"],
        "xml_activity_id": fields["activity_id"],
    })

    return CanonicalEvent(
        timestamp=or_now(parse_rfc3339, fields["time_created"]),
        source=EventSource(
            hostname=fields["computer"],
            ip_address=ip_address,
            application=fields["provider_name"],
            process_name=process_name,
            process_id=fields["process_id"],
        ),
        category=categorize(fields),
        severity=LEVEL_MAP.get(fields["level"], Severity.INFO),
        description=build_description(fields, pairs),
        result=determine_result(fields, pairs),
        subject_account=subject,
        additional_data=data,
    )
