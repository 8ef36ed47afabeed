"""
Unit tests for the CEF parser.
"""

from datetime import datetime, timezone

import pytest

from log_normalizer.normalizers import Account, Category, MalformedRecordError, Result, Severity
from log_normalizer.normalizers.cef_parser import parse, parse_extensions


class TestParseCef:
    def test_basic_cef(self):
        raw = "CEF:0|Security|threatmanager|1.0|100|worm successfully stopped|10|src=10.0.0.1 dst=2.1.2.2 spt=1232"
        evt = parse(raw)
        assert evt.severity == Severity.CRITICAL
        assert evt.additional_data["device_vendor"] == "Security"
        assert evt.additional_data["device_product"] == "threatmanager"
        assert evt.additional_data["signature_id"] == "100"
        assert evt.additional_data["cef_severity"] == "10"
        assert evt.additional_data["cef_src"] == "10.0.0.1"
        assert evt.additional_data["cef_spt"] == "1232"
        assert evt.source.ip_address == "10.0.0.1"
        assert evt.source.application == "Security threatmanager"
        assert evt.description == "worm successfully stopped"
        assert evt.result == Result.UNKNOWN
        assert evt.action == ""

    def test_accounts_and_action(self):
        raw = ("CEF:0|Vendor|Product|1.0|200|User login|5|"
               "suser=alice sdomain=CORP duser=bob ddomain=EXT act=allow outcome=success")
        evt = parse(raw)
        assert evt.subject_account == Account(username="alice", domain="CORP")
        assert evt.object_account == Account(username="bob", domain="EXT")
        assert evt.action == "allow"
        assert evt.result == Result.SUCCESS
        assert evt.category == Category.AUTHENTICATION
        assert evt.severity == Severity.MEDIUM

    def test_no_accounts(self):
        evt = parse("CEF:0|V|P|1|1|Test|5|src=1.1.1.1")
        assert evt.subject_account is None
        assert evt.object_account is None

    def test_hostname_lookup_order(self):
        evt = parse("CEF:0|V|P|1|1|Test|5|dvchost=fw01.example.com shost=web01")
        assert evt.source.hostname == "web01"
        evt = parse("CEF:0|V|P|1|1|Test|5|dvchost=fw01.example.com")
        assert evt.source.hostname == "fw01.example.com"

    def test_destination_ip_fallback(self):
        evt = parse("CEF:0|V|P|1|1|Test|5|dst=192.168.1.1")
        assert evt.source.ip_address == "192.168.1.1"

    def test_header_fields_not_overwritten_by_extensions(self):
        evt = parse("CEF:0|Security|threatmanager|1.0|100|Test|5|version=9 severity=1")
        assert evt.additional_data["cef_version"] == "0"
        assert evt.additional_data["cef_severity"] == "5"

    def test_empty_extension(self):
        evt = parse("CEF:0|V|P|1|1|Test|3|")
        assert evt.severity == Severity.LOW
        assert not any(k.startswith("cef_") and k not in ("cef_version", "cef_severity")
                       for k in evt.additional_data)


class TestCefExtensions:
    def test_first_equals_splits(self):
        assert parse_extensions("request=http://x/?a=b") == {"request": "http://x/?a=b"}

    def test_tokens_without_equals_ignored(self):
        assert parse_extensions("msg=Too many failures src=1.2.3.4") == {
            "msg": "Too", "src": "1.2.3.4"
        }


class TestCefSeverity:
    @pytest.mark.parametrize("value,expected", [
        ("0", Severity.INFO),
        ("1", Severity.INFO),
        ("2", Severity.LOW),
        ("3", Severity.LOW),
        ("4", Severity.MEDIUM),
        ("5", Severity.MEDIUM),
        ("6", Severity.HIGH),
        ("7", Severity.HIGH),
        ("8", Severity.CRITICAL),
        ("10", Severity.CRITICAL),
        ("High", Severity.INFO),
        ("", Severity.INFO),
    ])
    def test_thresholds(self, value, expected):
        evt = parse(f"CEF:0|V|P|1|1|Test|{value}|src=1.1.1.1")
        assert evt.severity == expected


class TestCefCategory:
    @pytest.mark.parametrize("name,expected", [
        ("Successful Logon", Category.AUTHENTICATION),
        ("Authentication failed", Category.AUTHENTICATION),
        ("Access denied to share", Category.ACCESS),
        ("Permission revoked", Category.ACCESS),
        ("File Delete", Category.DATA_MODIFICATION),
        ("Policy update", Category.DATA_MODIFICATION),
        ("Firewall drop", Category.NETWORK_EVENT),
        ("Malware detected", Category.SECURITY_EVENT),
        ("Port scan detected", Category.SYSTEM_EVENT),
    ])
    def test_name_keywords(self, name, expected):
        evt = parse(f"CEF:0|V|P|1|1|{name}|5|")
        assert evt.category == expected


class TestCefResult:
    @pytest.mark.parametrize("ext,expected", [
        ("outcome=Success", Result.SUCCESS),
        ("outcome=failure act=allow", Result.FAILURE),
        ("outcome=deny", Result.FAILURE),
        ("outcome=pending act=blocked", Result.FAILURE),
        ("act=permit", Result.SUCCESS),
        ("act=deny", Result.FAILURE),
        ("act=alert", Result.UNKNOWN),
        ("src=1.1.1.1", Result.UNKNOWN),
    ])
    def test_outcome_then_act(self, ext, expected):
        evt = parse(f"CEF:0|V|P|1|1|Test|5|{ext}")
        assert evt.result == expected


class TestCefTimestamp:
    def test_rt_rfc3339(self):
        evt = parse("CEF:0|V|P|1|1|Test|5|rt=2023-10-11T22:14:15Z")
        assert evt.timestamp == datetime(2023, 10, 11, 22, 14, 15, tzinfo=timezone.utc)

    def test_rt_epoch_millis(self):
        evt = parse("CEF:0|V|P|1|1|Test|5|rt=1700000000000")
        assert evt.timestamp == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)

    def test_end_used_without_rt(self):
        evt = parse("CEF:0|V|P|1|1|Test|5|end=1700000000000")
        assert evt.timestamp == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)

    def test_unparsable_rt_does_not_fall_through_to_end(self):
        before = datetime.now(timezone.utc)
        evt = parse("CEF:0|V|P|1|1|Test|5|rt=garbage end=1700000000000")
        assert evt.timestamp >= before

    def test_missing_timestamp_uses_now(self):
        before = datetime.now(timezone.utc)
        evt = parse("CEF:0|V|P|1|1|Test|5|src=1.1.1.1")
        after = datetime.now(timezone.utc)
        assert before <= evt.timestamp <= after


class TestCefRejected:
    @pytest.mark.parametrize("raw", [
        "CEF:0|Vendor|Product|1.0",
        "CEF:0|V|P|1|1|Name|5",
        "CEF:x|V|P|1|1|Name|5|src=1.1.1.1",
    ])
    def test_malformed(self, raw):
        with pytest.raises(MalformedRecordError):
            parse(raw)
