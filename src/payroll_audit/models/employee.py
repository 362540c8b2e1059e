"""Employee compensation model."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from payroll_audit.calculators.types import EmployeeRecord
from payroll_audit.models.base import Base, TimestampMixin


class Employee(Base, TimestampMixin):
    """Employee record as held by the store.

    ``seq`` preserves insertion order, which is the batch order used for
    detection reports.
    """

    __tablename__ = "employee"
    __table_args__ = (
        CheckConstraint("salary >= 0", name="employee_salary_nonnegative"),
        CheckConstraint("bonus >= 0", name="employee_bonus_nonnegative"),
        CheckConstraint("deductions >= 0", name="employee_deductions_nonnegative"),
    )

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    department: Mapped[str] = mapped_column(String, nullable=False)
    location: Mapped[str | None] = mapped_column(String, nullable=True)
    salary: Mapped[Decimal] = mapped_column(nullable=False)
    bonus: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    deductions: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    def to_record(self) -> EmployeeRecord:
        """Snapshot for the calculation engine."""
        return EmployeeRecord(
            employee_id=self.employee_id,
            name=self.name,
            department=self.department,
            location=self.location,
            salary=Decimal(self.salary),
            bonus=Decimal(self.bonus),
            deductions=Decimal(self.deductions),
        )
