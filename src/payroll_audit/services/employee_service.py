"""Employee store operations."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_audit.calculators.types import EmployeeRecord, check_places
from payroll_audit.models import Employee
from payroll_audit.models.base import MONEY_SCALE

logger = logging.getLogger(__name__)


class EmployeeNotFoundError(Exception):
    """Raised when an employee id is not in the store."""

    def __init__(self, employee_id: str):
        self.employee_id = employee_id
        super().__init__(f"Employee '{employee_id}' not found")


class DuplicateEmployeeError(Exception):
    """Raised when creating an employee whose id already exists."""

    def __init__(self, employee_id: str):
        self.employee_id = employee_id
        super().__init__(f"Employee with id '{employee_id}' already exists")


def _check_storable(record: EmployeeRecord) -> None:
    for name in ("salary", "bonus", "deductions"):
        check_places(getattr(record, name), MONEY_SCALE, name, record.employee_id)


class EmployeeService:
    """CRUD over the employee table plus the batch snapshot for detection.

    The service does not commit; the caller owns the transaction.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get(self, employee_id: str) -> Employee | None:
        result = await self.session.execute(
            select(Employee).where(Employee.employee_id == employee_id)
        )
        return result.scalar_one_or_none()

    async def get(self, employee_id: str) -> Employee:
        employee = await self._get(employee_id)
        if employee is None:
            raise EmployeeNotFoundError(employee_id)
        return employee

    async def list_all(self) -> list[Employee]:
        """All employees in insertion order."""
        result = await self.session.execute(select(Employee).order_by(Employee.seq))
        return list(result.scalars().all())

    async def load_batch(self) -> list[EmployeeRecord]:
        """Snapshot of the current batch as engine records."""
        return [employee.to_record() for employee in await self.list_all()]

    async def create(self, record: EmployeeRecord) -> Employee:
        _check_storable(record)
        if await self._get(record.employee_id) is not None:
            raise DuplicateEmployeeError(record.employee_id)

        employee = Employee(
            employee_id=record.employee_id,
            name=record.name,
            department=record.department,
            location=record.location,
            salary=record.salary,
            bonus=record.bonus,
            deductions=record.deductions,
        )
        self.session.add(employee)
        await self.session.flush()
        logger.info("Created employee %s", record.employee_id)
        return employee

    async def update(self, employee_id: str, record: EmployeeRecord) -> Employee:
        """Replace every field except the identity key."""
        _check_storable(record)
        employee = await self.get(employee_id)
        employee.name = record.name
        employee.department = record.department
        employee.location = record.location
        employee.salary = record.salary
        employee.bonus = record.bonus
        employee.deductions = record.deductions
        await self.session.flush()
        logger.info("Updated employee %s", employee_id)
        return employee

    async def delete(self, employee_id: str) -> None:
        employee = await self.get(employee_id)
        await self.session.delete(employee)
        await self.session.flush()
        logger.info("Deleted employee %s", employee_id)
