"""Pydantic schemas for API request/response models."""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    StringConstraints,
)

from payroll_audit.calculators.types import EmployeeRecord
from payroll_audit.models.base import MONEY_SCALE


def _require_number(value: Any) -> Any:
    """Reject strings and booleans before pydantic's lax Decimal coercion."""
    if isinstance(value, (str, bool)):
        raise ValueError("must be a JSON number")
    return value


# Money leaves the API as a JSON number, not a string
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]
# Compensation input: a JSON number the employee store can hold without rounding
Amount = Annotated[
    Decimal,
    BeforeValidator(_require_number),
    Field(ge=0, decimal_places=MONEY_SCALE),
]
NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


# ============================================================================
# Employee schemas
# ============================================================================


class EmployeeFields(BaseModel):
    """Compensation fields shared by create and update."""

    name: NonEmptyStr
    department: NonEmptyStr
    location: str | None = None
    salary: Amount
    bonus: Amount
    deductions: Amount


class EmployeeCreate(EmployeeFields):
    """Schema for submitting an employee record."""

    employee_id: NonEmptyStr

    def to_record(self) -> EmployeeRecord:
        return EmployeeRecord(
            employee_id=self.employee_id,
            name=self.name,
            department=self.department,
            location=self.location,
            salary=self.salary,
            bonus=self.bonus,
            deductions=self.deductions,
        )


class EmployeeUpdate(EmployeeFields):
    """Schema for replacing an employee record; the id comes from the path."""

    def to_record(self, employee_id: str) -> EmployeeRecord:
        return EmployeeRecord(
            employee_id=employee_id,
            name=self.name,
            department=self.department,
            location=self.location,
            salary=self.salary,
            bonus=self.bonus,
            deductions=self.deductions,
        )


class EmployeeResponse(BaseModel):
    """Schema for employee response."""

    model_config = ConfigDict(from_attributes=True)

    employee_id: str
    name: str
    department: str
    location: str | None = None
    salary: Money
    bonus: Money
    deductions: Money


class EmployeeListResponse(BaseModel):
    """Schema for listing employees."""

    items: list[EmployeeResponse]
    total: int


# ============================================================================
# Net pay schemas
# ============================================================================


class CalculateNetRequest(BaseModel):
    """Schema for an ad-hoc net pay calculation."""

    employee: EmployeeCreate


class DeductionBreakdownResponse(BaseModel):
    """Itemized deductions."""

    company_tax: Money
    social_security: Money
    professional_tax: Money
    personal_deductions: Money
    total_deductions: Money


class NetPayResponse(BaseModel):
    """Schema for net pay response."""

    employee_id: str
    gross_pay: Money
    net_pay: Money
    breakdown: DeductionBreakdownResponse


# ============================================================================
# Anomaly detection schemas
# ============================================================================


class DetectAnomaliesRequest(BaseModel):
    """Schema for running detection.

    When ``employees`` is omitted the stored employee batch is checked.
    """

    pay_period: NonEmptyStr | None = None
    employees: list[EmployeeCreate] | None = None


class FlagResponse(BaseModel):
    """A single detection finding."""

    level: str
    reason: str


class EmployeeFlagsResponse(BaseModel):
    """Flags raised for one employee."""

    employee_id: str
    name: str
    flags: list[FlagResponse]


class AnomalyReportResponse(BaseModel):
    """Schema for anomaly report response."""

    pay_period: str
    status: str
    report: list[EmployeeFlagsResponse]


# ============================================================================
# History schemas
# ============================================================================


class RecordHistoryRequest(BaseModel):
    """Schema for appending a pay period to history."""

    pay_period: NonEmptyStr


class HistoryRecordResponse(BaseModel):
    """One history entry."""

    employee_id: str
    pay_period: str
    net_pay: Money


class HistoryListResponse(BaseModel):
    """Schema for listing history, most recent first."""

    items: list[HistoryRecordResponse]
    total: int


class RecordHistoryResponse(BaseModel):
    """Schema for history append response."""

    pay_period: str
    recorded: int
    items: list[HistoryRecordResponse]


# ============================================================================
# Rule table schemas
# ============================================================================


class RuleTableSummary(BaseModel):
    """Shape of the active rule table."""

    social_security_percent: Money
    income_tax_slabs: int
    professional_tax_locations: list[str]
    coverage_gaps: dict[str, list[list[Money | None]]]
    loaded_at: datetime


# ============================================================================
# Error schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Schema for error response."""

    detail: str
    code: str | None = None
