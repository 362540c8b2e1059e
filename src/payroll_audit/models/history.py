"""Append-only pay history model."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from payroll_audit.detection.types import HistoryRecord
from payroll_audit.models.base import NET_PAY, Base, TimestampMixin


class PayrollHistory(Base, TimestampMixin):
    """Net pay committed for one employee in one pay period."""

    __tablename__ = "payroll_history"
    __table_args__ = (
        UniqueConstraint("employee_id", "pay_period", name="uq_history_employee_period"),
        Index("ix_history_period", "pay_period"),
    )

    history_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    pay_period: Mapped[str] = mapped_column(String, nullable=False)
    net_pay: Mapped[Decimal] = mapped_column(NET_PAY, nullable=False)

    def to_record(self) -> HistoryRecord:
        return HistoryRecord(
            employee_id=self.employee_id,
            pay_period=self.pay_period,
            net_pay=Decimal(self.net_pay),
        )
