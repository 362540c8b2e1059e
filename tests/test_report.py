"""Unit tests for the batch anomaly report."""

import logging
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from payroll_audit.calculators.rules import ConfigurationError
from payroll_audit.calculators.types import InvalidRecordError
from payroll_audit.detection.report import build_report, current_pay_period
from payroll_audit.detection.types import (
    AnomalyReport,
    EmployeeFlags,
    Flag,
    FlagLevel,
    HistoryRecord,
    ReportStatus,
    status_for,
)
from tests.conftest import make_employee


def flagged(*levels: FlagLevel) -> EmployeeFlags:
    return EmployeeFlags("E", "Name", tuple(Flag(level, "reason") for level in levels))


class TestReportStatus:
    """ANOMALY_DETECTED outranks REVIEW_REQUIRED outranks CLEAN."""

    def test_no_entries_is_clean(self):
        assert status_for([]) == ReportStatus.CLEAN

    def test_review_only(self):
        assert status_for([flagged(FlagLevel.REVIEW)]) == ReportStatus.REVIEW_REQUIRED

    def test_any_anomaly_wins(self):
        entries = [flagged(FlagLevel.REVIEW), flagged(FlagLevel.REVIEW, FlagLevel.ANOMALY)]

        assert status_for(entries) == ReportStatus.ANOMALY_DETECTED

    def test_highest_level(self):
        assert flagged(FlagLevel.REVIEW, FlagLevel.ANOMALY).highest_level == FlagLevel.ANOMALY

    def test_anomaly_listed_before_review_still_wins(self):
        entries = [flagged(FlagLevel.ANOMALY, FlagLevel.REVIEW), flagged(FlagLevel.REVIEW)]

        assert status_for(entries) == ReportStatus.ANOMALY_DETECTED

    def test_unflagged_entries_are_clean(self):
        assert status_for([flagged(), flagged()]) == ReportStatus.CLEAN

    def test_unflagged_entry_beside_review(self):
        assert status_for([flagged(), flagged(FlagLevel.REVIEW)]) == ReportStatus.REVIEW_REQUIRED


class TestBuildReport:
    """Test running every strategy over a batch."""

    def test_clean_batch(self, rules):
        batch = [make_employee("E1"), make_employee("E2")]

        report = build_report(batch, [], rules, pay_period="2025-11")

        assert report == AnomalyReport("2025-11", ReportStatus.CLEAN, ())
        assert report.to_dict() == {"pay_period": "2025-11", "status": "CLEAN", "report": []}

    def test_negative_net_pay_is_anomaly_regardless_of_other_checks(self, rules):
        batch = [make_employee("E1", salary=20000, bonus=0, deductions=22000)]

        report = build_report(batch, [], rules, pay_period="2025-11")

        assert report.status == ReportStatus.ANOMALY_DETECTED
        (entry,) = report.report
        assert entry.employee_id == "E1"
        assert [f.level for f in entry.flags] == [FlagLevel.ANOMALY]

    def test_unflagged_employees_are_omitted_and_order_kept(self, rules):
        batch = [
            make_employee("E1", salary=30000, bonus=70000, location="Delhi", department="Sales"),
            make_employee("E2", salary=40000),
            make_employee("E3", salary=40000),
            make_employee("E4", salary=130000),
        ]

        report = build_report(batch, [], rules, pay_period="2025-11")

        assert [entry.employee_id for entry in report.report] == ["E1", "E4"]
        assert report.status == ReportStatus.ANOMALY_DETECTED
        assert report.report[0].flags[0].level == FlagLevel.REVIEW

    def test_flags_follow_strategy_order(self, rules):
        """Historical, then peer, then absolute checks."""
        employee = make_employee("E3", salary=130000, bonus=300000)
        batch = [make_employee("E1", salary=40000), make_employee("E2", salary=40000), employee]
        past = [
            HistoryRecord("E3", f"2025-{m:02d}", Decimal("50000")) for m in (10, 9, 8)
        ]

        report = build_report(batch, past, rules, pay_period="2025-11")

        (entry,) = report.report
        reasons = [f.reason for f in entry.flags]
        assert reasons[0].startswith("Net pay jump")
        assert reasons[1].startswith("Salary (130000)")
        assert reasons[2].startswith("Bonus (300000)")
        assert report.flag_count == 3

    def test_review_only_batch(self, rules):
        batch = [make_employee("E1", salary=30000, bonus=70000)]

        report = build_report(batch, [], rules, pay_period="2025-11")

        assert report.status == ReportStatus.REVIEW_REQUIRED

    def test_duplicate_ids_rejected(self, rules):
        batch = [make_employee("E1"), make_employee("E1", salary=1)]

        with pytest.raises(InvalidRecordError, match="duplicated"):
            build_report(batch, [], rules)

    def test_missing_rules_rejected(self):
        with pytest.raises(ConfigurationError):
            build_report([make_employee()], [], None)

    def test_default_pay_period_is_current_month(self, rules):
        report = build_report([make_employee()], [], rules)

        assert report.pay_period == current_pay_period()

    def test_summary_is_logged(self, rules, caplog):
        with caplog.at_level(logging.INFO, logger="payroll_audit.detection.report"):
            build_report([make_employee()], [], rules, pay_period="2025-11")

        assert any("2025-11" in r.getMessage() for r in caplog.records)

    def test_inputs_unchanged(self, rules):
        batch = [make_employee("E1", salary=40000), make_employee("E2", salary=130000)]
        past = [HistoryRecord("E1", "2025-10", Decimal("1"))]
        batch_before, past_before = list(batch), list(past)

        build_report(batch, past, rules, pay_period="2025-11")

        assert batch == batch_before
        assert past == past_before


class TestCurrentPayPeriod:
    def test_formats_year_month(self):
        now = datetime(2025, 3, 31, 23, 59, tzinfo=timezone.utc)

        assert current_pay_period(now) == "2025-03"
