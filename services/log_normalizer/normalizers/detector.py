"""
Format detection by prefix/shape only; no grammar is applied here.

Rules are evaluated in a fixed order and the first match wins. A bracketed
all-digit prefix such as "<12>not syslog" is classified as syslog; the
parser rejects it later.
"""
from .models import FormatTag

PRIORITY_SCAN = 10


def _is_digits(s: str) -> bool:
    return bool(s) and all("0" <= c <= "9" for c in s)


def detect_format(raw: str) -> FormatTag:
    """Return the FormatTag for ``raw``; total, never raises."""
    s = raw.strip()

    if s.startswith("CEF:"):
        return FormatTag.CEF
    if s.startswith("LEEF:"):
        return FormatTag.LEEF
    if s.startswith("<?xml") or (s.startswith("<") and "<?xml" in s):
        return FormatTag.XML
    if s.startswith("<Event"):
        return FormatTag.XML
    if s.startswith("<"):
        end = s.find(">")
        if 0 < end < PRIORITY_SCAN and _is_digits(s[1:end]):
            return FormatTag.SYSLOG
    return FormatTag.UNKNOWN
