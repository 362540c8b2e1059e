"""Append-only pay history store."""

from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_audit.calculators.types import NetPayResult, check_places
from payroll_audit.detection.types import HistoryRecord
from payroll_audit.models import PayrollHistory
from payroll_audit.models.base import NET_PAY_SCALE

logger = logging.getLogger(__name__)


class PeriodAlreadyRecordedError(Exception):
    """Raised when net pay for an employee and pay period was already appended."""

    def __init__(self, conflicts: Sequence[tuple[str, str]]):
        self.conflicts = list(conflicts)
        listed = ", ".join(f"{emp} ({period})" for emp, period in self.conflicts)
        super().__init__(f"Pay history already recorded for {listed}")


class HistoryService:
    """Reads and appends pay history. Records are never updated or deleted."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def load_history(self, employee_id: str | None = None) -> list[HistoryRecord]:
        """History ordered most-recent-first, the order detection expects."""
        query = select(PayrollHistory)
        if employee_id is not None:
            query = query.where(PayrollHistory.employee_id == employee_id)
        query = query.order_by(
            PayrollHistory.pay_period.desc(),
            PayrollHistory.history_id.desc(),
        )
        result = await self.session.execute(query)
        return [row.to_record() for row in result.scalars().all()]

    async def append(self, records: Sequence[HistoryRecord]) -> list[HistoryRecord]:
        """Append records; all or nothing.

        Raises:
            PeriodAlreadyRecordedError: If any (employee, period) pair is
                already present; nothing is appended in that case
            InvalidRecordError: If a net pay is finer than the store holds
        """
        for r in records:
            check_places(r.net_pay, NET_PAY_SCALE, "net_pay", r.employee_id)

        pairs = {(r.employee_id, r.pay_period) for r in records}
        existing = await self.session.execute(
            select(PayrollHistory.employee_id, PayrollHistory.pay_period).where(
                PayrollHistory.pay_period.in_(sorted({p for _, p in pairs})),
                PayrollHistory.employee_id.in_(sorted({e for e, _ in pairs})),
            )
        )
        conflicts = sorted(pairs & {(e, p) for e, p in existing.all()})
        if conflicts:
            raise PeriodAlreadyRecordedError(conflicts)

        rows = [
            PayrollHistory(
                employee_id=r.employee_id,
                pay_period=r.pay_period,
                net_pay=r.net_pay,
            )
            for r in records
        ]
        self.session.add_all(rows)
        await self.session.flush()
        logger.info("Appended %d pay history records", len(rows))
        return list(records)

    async def record_period(
        self, pay_period: str, results: Sequence[NetPayResult]
    ) -> list[HistoryRecord]:
        """Append the computed net pay of each result under ``pay_period``."""
        return await self.append([
            HistoryRecord(employee_id=r.employee_id, pay_period=pay_period, net_pay=r.net_pay)
            for r in results
        ])
