"""
Forward canonical events to a SIEM over syslog.

Each event is framed as an RFC 5424 message whose MSG part is the JSON
encoded event:

    <PRI>1 TIMESTAMP HOSTNAME APP-NAME - - - {"event_id": ...}
"""
import logging
import socket

from log_normalizer.normalizers.models import CanonicalEvent, Severity, event_to_json

from .base import ForwardError

logger = logging.getLogger(__name__)

FACILITY_LOCAL0 = 16

# Canonical severity → syslog severity code
SEVERITY_LEVELS = {
    Severity.CRITICAL: 2,
    Severity.HIGH: 3,
    Severity.MEDIUM: 4,
    Severity.LOW: 5,
    Severity.INFO: 6,
}

DEFAULT_APP_NAME = "log-normalizer"


def calculate_priority(severity: Severity, facility: int = FACILITY_LOCAL0) -> int:
    return facility * 8 + SEVERITY_LEVELS.get(severity, 6)


def format_message(event: CanonicalEvent) -> str:
    ts = event.timestamp.isoformat().replace("+00:00", "Z")
    hostname = event.source.hostname or "unknown"
    app_name = (event.source.application or DEFAULT_APP_NAME).replace(" ", "_")
    return f"<{calculate_priority(event.severity)}>1 {ts} {hostname} {app_name} - - - {event_to_json(event)}"


class SyslogForwarder:
    """Connected UDP or TCP syslog sender; usable as a context manager."""

    def __init__(self, host: str, port: int = 514, protocol: str = "udp", timeout: float = 10.0):
        self.host = host
        self.port = port
        self.protocol = protocol.lower()
        if self.protocol not in ("udp", "tcp"):
            raise ValueError("Protocol must be 'udp' or 'tcp'")

        try:
            if self.protocol == "tcp":
                self.sock = socket.create_connection((host, port), timeout=timeout)
            else:
                self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
                self.sock.connect((host, port))
        except OSError as e:
            raise ForwardError(f"could not connect to SIEM at {host}:{port}: {e}") from e

        logger.debug("Syslog forwarder connected", extra={
            'host': host, 'port': port, 'protocol': self.protocol
        })

    def forward(self, event: CanonicalEvent) -> None:
        message = format_message(event) + "\n"
        try:
            self.sock.sendall(message.encode("utf-8"))
        except OSError as e:
            raise ForwardError(f"failed to send event {event.event_id}: {e}") from e

    def forward_batch(self, events) -> list:
        """Send events one by one; returns the errors, empty if all succeeded."""
        errors = []
        for i, event in enumerate(events):
            try:
                self.forward(event)
            except ForwardError as e:
                errors.append(ForwardError(f"event {i}: {e}"))
        return errors

    def close(self) -> None:
        if self.sock is not None:
            self.sock.close()
            self.sock = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
