"""
Compiled grammar patterns for every supported wire format.
Compiled once at import and only ever read afterwards.
"""
import re

# ---------------------------------------------------------------------------
# Syslog
# ---------------------------------------------------------------------------

RFC5424_RE = re.compile(
    r"^<(\d+)>(\d+)\s+"               # priority, version
    r"(\S+)\s+"                        # timestamp
    r"(\S+)\s+"                        # hostname
    r"(\S+)\s+"                        # app-name
    r"(\S+)\s+"                        # procid
    r"(\S+)\s+"                        # msgid
    r"(\S+)\s+"                        # structured-data
    r"(.*)$",                          # message
    re.DOTALL,
)

RFC3164_RE = re.compile(
    r"^<(\d+)>"                        # priority
    r"(\w+\s+\d+\s+\d+:\d+:\d+)\s+"    # timestamp (Mmm DD HH:MM:SS)
    r"(\S+)\s+"                        # hostname
    r"(\S+?)(?:\[(\d+)\])?:\s+"        # tag[pid]:
    r"(.*)$",                          # message
    re.DOTALL,
)

# ---------------------------------------------------------------------------
# CEF / LEEF
# ---------------------------------------------------------------------------

CEF_RE = re.compile(
    r"^CEF:(\d+)\|"                    # CEF version
    r"([^|]*)\|"                       # device vendor
    r"([^|]*)\|"                       # device product
    r"([^|]*)\|"                       # device version
    r"([^|]*)\|"                       # signature id
    r"([^|]*)\|"                       # name
    r"([^|]*)\|"                       # severity (0-10)
    r"(.*)$",                          # extensions
    re.DOTALL,
)

LEEF_RE = re.compile(
    r"^LEEF:([\d.]+)\|"                # LEEF version
    r"([^|]*)\|"                       # vendor
    r"([^|]*)\|"                       # product
    r"([^|]*)\|"                       # product version
    r"([^|]*)\|"                       # event id
    r"(.*)$",                          # attributes
    re.DOTALL,
)

# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------

RFC3339_RE = re.compile(
    r"^(\d{4}-\d{2}-\d{2})T(\d{2}:\d{2}:\d{2})"
    r"(?:\.(\d+))?"
    r"(Z|z|[+-]\d{2}:\d{2})$"
)
