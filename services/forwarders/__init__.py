"""
Delivery back ends for normalised events.

- SyslogForwarder: RFC 5424 frames with a JSON payload over UDP/TCP
- HTTPForwarder: JSON POST to a collector (Splunk HEC, Elastic, webhooks)
"""

from .base import ForwardError
from .http_forwarder import HTTPForwarder
from .syslog_forwarder import SyslogForwarder

__all__ = ["ForwardError", "HTTPForwarder", "SyslogForwarder"]
