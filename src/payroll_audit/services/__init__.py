"""Store services used by the API."""

from payroll_audit.services.employee_service import (
    DuplicateEmployeeError,
    EmployeeNotFoundError,
    EmployeeService,
)
from payroll_audit.services.history_service import (
    HistoryService,
    PeriodAlreadyRecordedError,
)

__all__ = [
    "DuplicateEmployeeError",
    "EmployeeNotFoundError",
    "EmployeeService",
    "HistoryService",
    "PeriodAlreadyRecordedError",
]
