"""Payroll anomaly detection."""

from payroll_audit.detection.config import DetectionConfig
from payroll_audit.detection.peers import (
    PeerGroup,
    PeerKey,
    aggregate_peer_groups,
    compute_peer_averages,
)
from payroll_audit.detection.report import build_report, current_pay_period
from payroll_audit.detection.strategies import (
    check_absolute_rules,
    check_historical_variance,
    check_peer_variance,
)
from payroll_audit.detection.types import (
    AnomalyReport,
    EmployeeFlags,
    Flag,
    FlagLevel,
    HistoryRecord,
    ReportStatus,
)

__all__ = [
    "AnomalyReport",
    "DetectionConfig",
    "EmployeeFlags",
    "Flag",
    "FlagLevel",
    "HistoryRecord",
    "PeerGroup",
    "PeerKey",
    "ReportStatus",
    "aggregate_peer_groups",
    "build_report",
    "check_absolute_rules",
    "check_historical_variance",
    "check_peer_variance",
    "compute_peer_averages",
    "current_pay_period",
]
