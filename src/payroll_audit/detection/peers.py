"""Peer group aggregation by department and location."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, NamedTuple

from payroll_audit.calculators.types import EmployeeRecord


class PeerKey(NamedTuple):
    department: str
    location: str | None  # None is its own group, not folded into a default

    @classmethod
    def of(cls, employee: EmployeeRecord) -> PeerKey:
        return cls(employee.department, employee.location)


@dataclass
class PeerGroup:
    """Running salary total for one (department, location) group."""

    total_salary: Decimal = Decimal("0")
    size: int = 0

    def add(self, salary: Decimal) -> None:
        self.total_salary += salary
        self.size += 1

    @property
    def average(self) -> Decimal:
        return self.total_salary / self.size

    def average_excluding(self, salary: Decimal) -> Decimal | None:
        """Average salary of the other members, or None without peers."""
        if self.size <= 1:
            return None
        return (self.total_salary - salary) / (self.size - 1)


def aggregate_peer_groups(batch: Iterable[EmployeeRecord]) -> dict[PeerKey, PeerGroup]:
    """Single pass over the batch; lookups are then O(1) per employee."""
    groups: dict[PeerKey, PeerGroup] = {}
    for employee in batch:
        groups.setdefault(PeerKey.of(employee), PeerGroup()).add(employee.salary)
    return groups


def compute_peer_averages(batch: Iterable[EmployeeRecord]) -> dict[PeerKey, Decimal]:
    """Average salary per (department, location), self included."""
    return {key: group.average for key, group in aggregate_peer_groups(batch).items()}
