"""
Unit tests for the LEEF parser.
"""

from datetime import datetime, timezone

import pytest

from log_normalizer.normalizers import Account, Category, MalformedRecordError, Result, Severity
from log_normalizer.normalizers.leef_parser import parse, split_attributes


class TestParseLeef:
    def test_leef2_caret_delimiter(self):
        raw = "LEEF:2.0|Vendor|Product|1.0|EventID|usrName=admin^action=login^result=success"
        evt = parse(raw)
        assert evt.subject_account == Account(username="admin")
        assert evt.result == Result.SUCCESS
        assert evt.action == "login"
        assert evt.additional_data["leef_usrName"] == "admin"
        assert evt.additional_data["leef_vendor"] == "Vendor"
        assert evt.additional_data["leef_event_id"] == "EventID"
        assert evt.source.application == "Vendor Product"

    def test_leef1_tab_delimiter(self):
        raw = "LEEF:1.0|IBM|QRadar|7.3|Login|usrName=admin\tresult=success\tsev=3"
        evt = parse(raw)
        assert evt.severity == Severity.LOW
        assert evt.category == Category.AUTHENTICATION
        assert evt.result == Result.SUCCESS
        assert evt.additional_data["leef_version"] == "1.0"

    def test_leef2_escaped_tab(self):
        raw = "LEEF:2.0|V|P|1.0|Auth|srcUser=jdoex09srcDomain=CORPx09dstUser=rootx09dstDomain=SRV"
        evt = parse(raw)
        assert evt.subject_account == Account(username="jdoe", domain="CORP")
        assert evt.object_account == Account(username="root", domain="SRV")

    def test_src_user_preferred_over_usr_name(self):
        evt = parse("LEEF:1.0|V|P|1|E|usrName=admin\tsrcUser=alice")
        assert evt.subject_account == Account(username="alice")

    def test_whitespace_trimmed(self):
        evt = parse("LEEF:1.0|V|P|1|E| src = 10.0.0.1 \t devName = fw01 ")
        assert evt.source.ip_address == "10.0.0.1"
        assert evt.source.hostname == "fw01"

    def test_description_prefers_usr_name(self):
        evt = parse("LEEF:2.0|V|P|1|E|usrName=bob^msg=hello")
        assert evt.description == "bob"

    def test_description_falls_back_to_msg_then_event_id_attribute(self):
        evt = parse("LEEF:1.0|V|P|1|E|msg=User locked out\teventId=4740")
        assert evt.description == "User locked out"
        evt = parse("LEEF:1.0|V|P|1|E|eventId=4740")
        assert evt.description == "4740"
        evt = parse("LEEF:1.0|V|P|1|PolicyEvent|src=1.1.1.1")
        assert evt.description == ""

    def test_header_fields_not_overwritten_by_attributes(self):
        evt = parse("LEEF:1.0|Vendor|Product|1|E|vendor=spoofed\tversion=9")
        assert evt.additional_data["leef_vendor"] == "Vendor"
        assert evt.additional_data["leef_version"] == "1.0"

    def test_action_falls_back_to_cat(self):
        evt = parse("LEEF:1.0|V|P|1|E|cat=Firewall Deny")
        assert evt.action == "Firewall Deny"

    def test_no_accounts(self):
        evt = parse("LEEF:1.0|V|P|1|E|src=1.1.1.1")
        assert evt.subject_account is None
        assert evt.object_account is None


class TestLeefDelimiters:
    def test_caret_only_split_for_v2(self):
        assert split_attributes("a=b^c=d", "1.0") == ["a=b^c=d"]
        assert split_attributes("a=b^c=d", "2.0") == ["a=b", "c=d"]

    def test_escaped_tab_wins_over_caret(self):
        assert split_attributes("a=b^cx09d=e", "2.0") == ["a=b^c", "d=e"]

    def test_caret_in_v1_keeps_value(self):
        evt = parse("LEEF:1.0|V|P|1|E|usrName=admin^result=success")
        assert evt.additional_data["leef_usrName"] == "admin^result=success"
        assert evt.result == Result.UNKNOWN


class TestLeefSeverity:
    @pytest.mark.parametrize("sev,expected", [
        ("Critical", Severity.CRITICAL),
        ("fatal", Severity.CRITICAL),
        ("10", Severity.CRITICAL),
        ("8", Severity.HIGH),
        ("7", Severity.HIGH),
        ("error", Severity.HIGH),
        ("6", Severity.MEDIUM),
        ("Warning", Severity.MEDIUM),
        ("4", Severity.LOW),
        ("low", Severity.LOW),
        ("2", Severity.INFO),
        ("informational", Severity.INFO),
        ("9", Severity.INFO),
    ])
    def test_keyword_or_number(self, sev, expected):
        evt = parse(f"LEEF:1.0|V|P|1|E|sev={sev}")
        assert evt.severity == expected

    def test_missing_sev_is_info(self):
        assert parse("LEEF:1.0|V|P|1|E|src=1.1.1.1").severity == Severity.INFO


class TestLeefCategory:
    @pytest.mark.parametrize("event_id,cat,expected", [
        ("E", "Authentication", Category.AUTHENTICATION),
        ("E", "File Access", Category.ACCESS),
        ("E", "Network Traffic", Category.NETWORK_EVENT),
        ("ThreatDetected", "Firewall", Category.SECURITY_EVENT),
        ("UserLogin", None, Category.AUTHENTICATION),
        ("PermissionGrant", None, Category.ACCESS),
        ("FileModify", None, Category.DATA_MODIFICATION),
        ("ConnectionOpened", None, Category.NETWORK_EVENT),
        ("SecurityAlert", None, Category.SECURITY_EVENT),
        ("ServiceStart", None, Category.SYSTEM_EVENT),
    ])
    def test_cat_then_event_id(self, event_id, cat, expected):
        attrs = f"cat={cat}" if cat else "src=1.1.1.1"
        evt = parse(f"LEEF:1.0|V|P|1|{event_id}|{attrs}")
        assert evt.category == expected


class TestLeefResult:
    @pytest.mark.parametrize("attrs,expected", [
        ("result=Allowed", Result.SUCCESS),
        ("result=failed\taction=allow", Result.FAILURE),
        ("action=permit", Result.SUCCESS),
        ("action=block", Result.FAILURE),
        ("action=login", Result.UNKNOWN),
    ])
    def test_result_then_action(self, attrs, expected):
        evt = parse(f"LEEF:1.0|V|P|1|E|{attrs}")
        assert evt.result == expected


class TestLeefTimestamp:
    def test_dev_time_rfc3339(self):
        evt = parse("LEEF:1.0|V|P|1|E|devTime=2023-10-11T22:14:15Z")
        assert evt.timestamp == datetime(2023, 10, 11, 22, 14, 15, tzinfo=timezone.utc)

    def test_dev_time_date_time(self):
        evt = parse("LEEF:1.0|V|P|1|E|devTime=2023-10-11 22:14:15")
        assert evt.timestamp == datetime(2023, 10, 11, 22, 14, 15, tzinfo=timezone.utc)

    def test_dev_time_month_day_year(self):
        evt = parse("LEEF:1.0|V|P|1|E|devTime=Oct 11 2023 22:14:15")
        assert evt.timestamp == datetime(2023, 10, 11, 22, 14, 15, tzinfo=timezone.utc)

    def test_numeric_dev_time_uses_now(self):
        before = datetime.now(timezone.utc)
        evt = parse("LEEF:1.0|V|P|1|E|devTime=1")
        assert evt.timestamp >= before

    def test_unparsable_dev_time_uses_now(self):
        before = datetime.now(timezone.utc)
        evt = parse("LEEF:1.0|V|P|1|E|devTime=yesterday")
        assert evt.timestamp >= before


class TestLeefRejected:
    @pytest.mark.parametrize("raw", [
        "LEEF:1.0|V|P|1.0",
        "LEEF:1.0|V|P|1.0|E",
        "LEEF:one|V|P|1|E|src=1.1.1.1",
    ])
    def test_malformed(self, raw):
        with pytest.raises(MalformedRecordError):
            parse(raw)
