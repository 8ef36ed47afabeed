"""Timestamp helpers shared by the format parsers."""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from .errors import UnparsableTimestampError
from .models import now_utc
from .patterns import RFC3339_RE

logger = logging.getLogger(__name__)

# Layout sentinels understood by parse_timestamp alongside strptime formats
RFC3339 = "rfc3339"
EPOCH_MILLIS = "epoch_ms"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_rfc3339(value: str) -> datetime:
    """
    Parse an RFC 3339 timestamp with a mandatory offset.

    Fractions longer than microseconds (e.g. Windows' 7-digit or nanosecond
    SystemTime) are truncated.
    """
    m = RFC3339_RE.match(value.strip())
    if not m:
        raise UnparsableTimestampError(value)
    date, clock, frac, offset = m.groups()
    if offset in ("Z", "z"):
        offset = "+00:00"
    frac = f".{(frac or '')[:6].ljust(6, '0')}"
    try:
        return datetime.fromisoformat(f"{date}T{clock}{frac}{offset}")
    except ValueError as e:
        raise UnparsableTimestampError(value) from e


def parse_epoch_millis(value: str) -> datetime:
    try:
        return _EPOCH + timedelta(milliseconds=int(value.strip()))
    except (ValueError, OverflowError) as e:
        raise UnparsableTimestampError(value) from e


def parse_timestamp(value: str, layouts: Sequence[str]) -> datetime:
    """Try each layout in order; naive layouts are read as UTC."""
    for layout in layouts:
        try:
            if layout == RFC3339:
                return parse_rfc3339(value)
            if layout == EPOCH_MILLIS:
                return parse_epoch_millis(value)
            return datetime.strptime(value.strip(), layout).replace(tzinfo=timezone.utc)
        except (UnparsableTimestampError, ValueError):
            continue
    raise UnparsableTimestampError(value)


def parse_bsd_timestamp(value: str, year: Optional[int] = None) -> datetime:
    """Parse an RFC 3164 'Mmm dd HH:MM:SS' stamp, which carries no year."""
    if year is None:
        year = now_utc().year
    try:
        return datetime.strptime(f"{year} {value.strip()}", "%Y %b %d %H:%M:%S").replace(
            tzinfo=timezone.utc
        )
    except ValueError as e:
        raise UnparsableTimestampError(value) from e


def or_now(parse, value: str, *args) -> datetime:
    """Run a timestamp parser, substituting processing time on failure."""
    try:
        return parse(value, *args)
    except UnparsableTimestampError:
        logger.debug("Unparsable timestamp, using processing time", extra={"value": value})
        return now_utc()
