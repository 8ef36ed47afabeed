"""
Orchestration: detect the format, dispatch to the matching parser.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, Optional, Union

from . import cef_parser, leef_parser, syslog_parser, xml_parser
from .detector import detect_format
from .errors import NormalizerError, RecordError, UnrecognizedFormatError
from .models import CanonicalEvent, FormatTag

logger = logging.getLogger(__name__)

Parser = Callable[[str], CanonicalEvent]

# Tag → parser dispatch table
PARSERS: dict = {
    FormatTag.SYSLOG: syslog_parser.parse,
    FormatTag.CEF: cef_parser.parse,
    FormatTag.LEEF: leef_parser.parse,
    FormatTag.XML: xml_parser.parse,
}

# Display names used by the HTTP /detect endpoint
FORMAT_NAMES = {
    FormatTag.SYSLOG: "Syslog",
    FormatTag.CEF: "CEF",
    FormatTag.LEEF: "LEEF",
    FormatTag.XML: "XML",
    FormatTag.UNKNOWN: "Unknown",
}


def process(raw: str) -> CanonicalEvent:
    """
    Normalise a single raw record.

    Raises:
        UnrecognizedFormatError: the detector could not classify the record
        MalformedRecordError: the matching parser rejected the record
    """
    tag = detect_format(raw)
    parser: Optional[Parser] = PARSERS.get(tag)
    if parser is None:
        raise UnrecognizedFormatError()
    return parser(raw.strip())


def _try_process(raw: str) -> Union[CanonicalEvent, NormalizerError]:
    try:
        return process(raw)
    except NormalizerError as e:
        return e


def process_batch(lines: Iterable[str], max_workers: Optional[int] = None):
    """
    Normalise many records.

    Returns (events, errors). Failed records are left out of ``events``, so
    positions there do not line up with the input; each RecordError keeps the
    1-based input line number.
    """
    lines = list(lines)
    if max_workers and max_workers > 1 and len(lines) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            outcomes = list(pool.map(_try_process, lines))
    else:
        outcomes = [_try_process(line) for line in lines]

    events, errors = [], []
    for i, outcome in enumerate(outcomes, start=1):
        if isinstance(outcome, NormalizerError):
            logger.debug("Record rejected", extra={"line_number": i, "error": str(outcome)})
            errors.append(RecordError(i, outcome))
        else:
            events.append(outcome)
    return events, errors
