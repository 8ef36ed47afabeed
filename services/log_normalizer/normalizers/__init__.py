"""
Normalizer package.
Detects CEF, LEEF, syslog (RFC 3164/5424) and XML event records and maps
them onto one canonical security event.
"""

from .detector import detect_format
from .errors import (
    DocumentDecodeError,
    MalformedRecordError,
    NormalizerError,
    RecordError,
    UnrecognizedFormatError,
)
from .models import (
    Account,
    CanonicalEvent,
    Category,
    EventSource,
    FormatTag,
    Result,
    Severity,
    event_to_dict,
    event_to_json,
    events_to_json,
)
from .processor import FORMAT_NAMES, PARSERS, process, process_batch

__all__ = [
    "detect_format", "process", "process_batch", "PARSERS", "FORMAT_NAMES",
    "CanonicalEvent", "EventSource", "Account", "Category", "Severity", "Result",
    "FormatTag", "event_to_dict", "event_to_json", "events_to_json",
    "NormalizerError", "UnrecognizedFormatError", "MalformedRecordError",
    "DocumentDecodeError", "RecordError",
]
