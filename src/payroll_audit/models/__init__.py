"""ORM models."""

from payroll_audit.models.base import Base, TimestampMixin
from payroll_audit.models.employee import Employee
from payroll_audit.models.history import PayrollHistory

__all__ = ["Base", "Employee", "PayrollHistory", "TimestampMixin"]
