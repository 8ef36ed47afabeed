"""
Pytest configuration: sets up sys.path and required env vars before any
test module is imported, so module-level initialisation in the services
(rate limiter, logging) works without an installed package.
"""

import os
import sys
from datetime import datetime, timezone

import pytest

# Make all service packages importable from the repo root
_REPO = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, os.path.join(_REPO, "services"))

# Generous limit so the suite never trips the limiter
os.environ.setdefault("RATE_LIMIT", "10000 per minute")
os.environ.setdefault("API_KEY", "")

from log_normalizer.normalizers.models import (  # noqa: E402
    Account,
    CanonicalEvent,
    Category,
    EventSource,
    Result,
    Severity,
)

WINDOWS_LOGON_XML = """<Event xmlns="http://schemas.microsoft.com/win/2004/08/events/event">
  <System>
    <Provider Name="Microsoft-Windows-Security-Auditing" Guid="{54849625-5478-4994-A5BA-3E3B0328C30D}"/>
    <EventID>4624</EventID>
    <Level>0</Level>
    <TimeCreated SystemTime="2023-10-11T22:14:15.123456Z"/>
    <Computer>workstation.example.com</Computer>
    <Execution ProcessID="500" ThreadID="600"/>
  </System>
  <EventData>
    <Data Name="TargetUserName">john.doe</Data>
    <Data Name="TargetDomainName">EXAMPLE</Data>
  </EventData>
</Event>"""


@pytest.fixture
def logon_xml():
    return WINDOWS_LOGON_XML


@pytest.fixture
def sample_event():
    """A fully populated canonical event"""
    return CanonicalEvent(
        timestamp=datetime(2023, 10, 11, 22, 14, 15, tzinfo=timezone.utc),
        source=EventSource(
            hostname="fw01",
            ip_address="10.0.0.1",
            application="Security threatmanager",
        ),
        category=Category.SECURITY_EVENT,
        severity=Severity.CRITICAL,
        description="worm successfully stopped",
        result=Result.SUCCESS,
        action="blocked",
        subject_account=Account(username="alice", domain="CORP"),
        additional_data={"device_vendor": "Security", "cef_src": "10.0.0.1"},
    )
