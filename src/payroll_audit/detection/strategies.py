"""Anomaly detection strategies.

Each strategy inspects one employee and returns zero or more flags. Strategies
never mutate their inputs and never raise for missing context: insufficient
history, an empty peer group or a zero historical average simply produce no
flag.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping, Sequence

from payroll_audit.calculators.types import EmployeeRecord, NetPayResult
from payroll_audit.detection.config import DetectionConfig
from payroll_audit.detection.peers import PeerGroup, PeerKey
from payroll_audit.detection.types import Flag, FlagLevel, HistoryRecord

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = DetectionConfig()


def _display(value: Decimal) -> int:
    """Round half-up to an integer for reason strings only."""
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


# =============================================================================
# Strategy 1: Historical variance (intra-employee)
# =============================================================================


def check_historical_variance(
    employee: EmployeeRecord,
    net_pay_result: NetPayResult,
    history: Sequence[HistoryRecord],
    config: DetectionConfig = DEFAULT_CONFIG,
) -> list[Flag]:
    """Compare proposed net pay to the employee's recent average.

    ``history`` must already be ordered most-recent-first; it is not sorted
    here.
    """
    records = [h for h in history if h.employee_id == employee.employee_id]
    if len(records) < config.min_history_records:
        return []

    recent = records[: config.history_window]
    average = sum((r.net_pay for r in recent), Decimal("0")) / len(recent)
    if average == 0:
        logger.debug(
            "Skipping historical check for %s: average net pay is zero",
            employee.employee_id,
        )
        return []

    current = net_pay_result.net_pay
    percent_change = (current - average) / average
    magnitude = abs(percent_change)

    detail = (
        f"{_display(percent_change * 100)}% from {len(recent)}-period average "
        f"(Avg: {_display(average)}, Proposed: {_display(current)})."
    )
    if magnitude > config.historical_anomaly_ratio:
        return [Flag(FlagLevel.ANOMALY, f"Net pay jump of {detail}")]
    if magnitude > config.historical_review_ratio:
        return [Flag(FlagLevel.REVIEW, f"Net pay change of {detail}")]
    return []


# =============================================================================
# Strategy 2: Peer variance (inter-employee)
# =============================================================================


def _peer_average(
    employee: EmployeeRecord,
    batch: Sequence[EmployeeRecord],
    peer_groups: Mapping[PeerKey, PeerGroup] | None,
) -> Decimal | None:
    if peer_groups is not None:
        group = peer_groups.get(PeerKey.of(employee))
        return group.average_excluding(employee.salary) if group else None

    key = PeerKey.of(employee)
    peers = [
        p for p in batch
        if PeerKey.of(p) == key and p.employee_id != employee.employee_id
    ]
    if not peers:
        return None
    return sum((p.salary for p in peers), Decimal("0")) / len(peers)


def check_peer_variance(
    employee: EmployeeRecord,
    batch: Sequence[EmployeeRecord],
    config: DetectionConfig = DEFAULT_CONFIG,
    peer_groups: Mapping[PeerKey, PeerGroup] | None = None,
) -> list[Flag]:
    """Compare salary to the average of peers in the same department and location.

    ``peer_groups`` is the pre-aggregated batch from
    ``aggregate_peer_groups``; it must include ``employee``. Without it the
    batch is scanned directly.
    """
    average = _peer_average(employee, batch, peer_groups)
    if average is None:
        return []

    salary = employee.salary
    where = f"for {employee.department} in {employee.location}"
    if salary > average * config.peer_anomaly_multiplier:
        return [Flag(
            FlagLevel.ANOMALY,
            f"Salary ({salary}) is {config.peer_anomaly_multiplier}x+ the peer "
            f"average ({_display(average)}) {where}.",
        )]
    if salary > average * config.peer_review_multiplier:
        return [Flag(
            FlagLevel.REVIEW,
            f"Salary ({salary}) is {config.peer_review_multiplier}x+ the peer "
            f"average ({_display(average)}) {where}.",
        )]
    return []


# =============================================================================
# Strategy 3: Absolute rule checks
# =============================================================================


def check_absolute_rules(
    employee: EmployeeRecord,
    net_pay_result: NetPayResult,
    config: DetectionConfig = DEFAULT_CONFIG,
) -> list[Flag]:
    """Sanity checks for impossible or suspicious values. Both may fire."""
    flags: list[Flag] = []

    if net_pay_result.net_pay < 0:
        flags.append(Flag(
            FlagLevel.ANOMALY,
            f"Net pay is negative ({net_pay_result.net_pay}). "
            "Total deductions exceed gross pay.",
        ))

    if employee.bonus > employee.salary * config.bonus_review_multiplier:
        flags.append(Flag(
            FlagLevel.REVIEW,
            f"Bonus ({employee.bonus}) is more than "
            f"{_display(config.bonus_review_multiplier * 100)}% of base salary.",
        ))

    return flags
