"""Batch report builder: runs every strategy over a payroll batch."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Sequence

from payroll_audit.calculators.net_pay import NetPayCalculator
from payroll_audit.calculators.rules import RuleTable
from payroll_audit.calculators.types import EmployeeRecord, InvalidRecordError
from payroll_audit.detection.config import DetectionConfig
from payroll_audit.detection.peers import aggregate_peer_groups
from payroll_audit.detection.strategies import (
    check_absolute_rules,
    check_historical_variance,
    check_peer_variance,
)
from payroll_audit.detection.types import (
    AnomalyReport,
    EmployeeFlags,
    HistoryRecord,
    status_for,
)

logger = logging.getLogger(__name__)


def current_pay_period(now: datetime | None = None) -> str:
    """Year-month token for the current UTC date, e.g. ``2025-11``."""
    now = now or datetime.now(timezone.utc)
    return now.strftime("%Y-%m")


def _check_unique_ids(batch: Sequence[EmployeeRecord]) -> None:
    seen: set[str] = set()
    for employee in batch:
        if employee.employee_id in seen:
            raise InvalidRecordError(
                "employee_id", "is duplicated in the batch", employee.employee_id
            )
        seen.add(employee.employee_id)


def build_report(
    batch: Sequence[EmployeeRecord],
    history: Sequence[HistoryRecord],
    rules: RuleTable,
    pay_period: str | None = None,
    config: DetectionConfig | None = None,
) -> AnomalyReport:
    """Run net pay and all detection strategies over a proposed batch.

    Employees are reported in batch order; employees without flags are
    omitted. Strategy order per employee is historical, peer, absolute.

    Raises:
        ConfigurationError: If the rule table is unusable
        InvalidRecordError: If a record is malformed or an id repeats
    """
    config = config or DetectionConfig()
    calculator = NetPayCalculator(rules)
    _check_unique_ids(batch)
    peer_groups = aggregate_peer_groups(batch)

    entries: list[EmployeeFlags] = []
    for employee in batch:
        result = calculator.calculate(employee)
        flags = [
            *check_historical_variance(employee, result, history, config),
            *check_peer_variance(employee, batch, config, peer_groups=peer_groups),
            *check_absolute_rules(employee, result, config),
        ]
        if flags:
            entries.append(EmployeeFlags(
                employee_id=employee.employee_id,
                name=employee.name,
                flags=tuple(flags),
            ))

    report = AnomalyReport(
        pay_period=pay_period or current_pay_period(),
        status=status_for(entries),
        report=tuple(entries),
    )
    logger.info(
        "Anomaly report for %s: %s (%d employees checked, %d flagged, %d flags)",
        report.pay_period,
        report.status.value,
        len(batch),
        len(entries),
        report.flag_count,
    )
    return report
