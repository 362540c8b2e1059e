"""Flag and report types for payroll anomaly detection."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Sequence


class FlagLevel(str, Enum):
    """Severity of a detection finding. ANOMALY outranks REVIEW."""

    REVIEW = "REVIEW"
    ANOMALY = "ANOMALY"

    @property
    def severity(self) -> int:
        return {"REVIEW": 1, "ANOMALY": 2}[self.value]


class ReportStatus(str, Enum):
    """Overall status of a payroll batch."""

    CLEAN = "CLEAN"
    REVIEW_REQUIRED = "REVIEW_REQUIRED"
    ANOMALY_DETECTED = "ANOMALY_DETECTED"


@dataclass(frozen=True)
class Flag:
    """A single finding attached to an employee."""

    level: FlagLevel
    reason: str

    def to_dict(self) -> dict[str, str]:
        return {"level": self.level.value, "reason": self.reason}


@dataclass(frozen=True)
class HistoryRecord:
    """One committed net pay amount from a past pay period."""

    employee_id: str
    pay_period: str
    net_pay: Decimal


@dataclass(frozen=True)
class EmployeeFlags:
    """All flags raised for one employee, in strategy order."""

    employee_id: str
    name: str
    flags: tuple[Flag, ...]

    @property
    def highest_level(self) -> FlagLevel:
        return max((f.level for f in self.flags), key=lambda level: level.severity)

    def to_dict(self) -> dict[str, Any]:
        return {
            "employee_id": self.employee_id,
            "name": self.name,
            "flags": [f.to_dict() for f in self.flags],
        }


def status_for(entries: Sequence[EmployeeFlags]) -> ReportStatus:
    """ANOMALY_DETECTED beats REVIEW_REQUIRED beats CLEAN."""
    levels = [entry.highest_level for entry in entries if entry.flags]
    if not levels:
        return ReportStatus.CLEAN
    if max(levels, key=lambda level: level.severity) == FlagLevel.ANOMALY:
        return ReportStatus.ANOMALY_DETECTED
    return ReportStatus.REVIEW_REQUIRED


@dataclass(frozen=True)
class AnomalyReport:
    """Detection report for one payroll batch."""

    pay_period: str
    status: ReportStatus
    report: tuple[EmployeeFlags, ...]

    @property
    def flag_count(self) -> int:
        return sum(len(entry.flags) for entry in self.report)

    def to_dict(self) -> dict[str, Any]:
        return {
            "pay_period": self.pay_period,
            "status": self.status.value,
            "report": [entry.to_dict() for entry in self.report],
        }
