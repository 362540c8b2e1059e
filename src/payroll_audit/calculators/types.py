"""Type definitions for the net pay calculation pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping


class InvalidRecordError(Exception):
    """Raised when an employee record is missing or has malformed fields."""

    def __init__(self, field_name: str, reason: str, employee_id: str | None = None):
        self.field_name = field_name
        self.reason = reason
        self.employee_id = employee_id
        prefix = f"Employee '{employee_id}': " if employee_id else ""
        super().__init__(f"{prefix}field '{field_name}' {reason}")


def to_decimal(value: Any, field_name: str, employee_id: str | None = None) -> Decimal:
    """Convert a JSON-ish number into a Decimal without coercing strings or bools."""
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise InvalidRecordError(field_name, "must be a number", employee_id)
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        raise InvalidRecordError(field_name, "must be a number", employee_id)
    if not result.is_finite():
        raise InvalidRecordError(field_name, "must be a finite number", employee_id)
    return result


def check_places(
    value: Decimal, places: int, field_name: str, employee_id: str | None = None
) -> Decimal:
    """Reject amounts with more significant decimal places than ``places``."""
    if -value.normalize().as_tuple().exponent > places:
        raise InvalidRecordError(
            field_name, f"must have at most {places} decimal places", employee_id
        )
    return value


@dataclass(frozen=True)
class EmployeeRecord:
    """An employee as submitted to the engine.

    Owned by the employee store and passed by value. A missing location maps
    to the ``default`` professional tax table.
    """

    employee_id: str
    name: str
    department: str
    salary: Decimal
    bonus: Decimal = Decimal("0")
    deductions: Decimal = Decimal("0")
    location: str | None = None

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Reject records the engine cannot compute on."""
        if not isinstance(self.employee_id, str) or not self.employee_id.strip():
            raise InvalidRecordError("employee_id", "must be a non-empty string")
        for name in ("name", "department"):
            if not isinstance(getattr(self, name), str):
                raise InvalidRecordError(name, "must be a string", self.employee_id)
        if self.location is not None and not isinstance(self.location, str):
            raise InvalidRecordError("location", "must be a string or null", self.employee_id)
        for name in ("salary", "bonus", "deductions"):
            value = getattr(self, name)
            if not isinstance(value, Decimal):
                raise InvalidRecordError(name, "must be a Decimal", self.employee_id)
            if value < 0:
                raise InvalidRecordError(name, "must be non-negative", self.employee_id)

    @property
    def gross_pay(self) -> Decimal:
        return self.salary + self.bonus

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> EmployeeRecord:
        """Build a record from a decoded JSON object.

        Raises:
            InvalidRecordError: If a required field is absent or mistyped
        """
        if not isinstance(data, Mapping):
            raise InvalidRecordError("employee", "must be an object")

        employee_id = data.get("employee_id")
        if not isinstance(employee_id, str) or not employee_id.strip():
            raise InvalidRecordError("employee_id", "must be a non-empty string")

        for required in ("name", "department", "salary", "bonus", "deductions"):
            if required not in data or data[required] is None:
                raise InvalidRecordError(required, "is required", employee_id)

        return cls(
            employee_id=employee_id,
            name=data["name"],
            department=data["department"],
            location=data.get("location"),
            salary=to_decimal(data["salary"], "salary", employee_id),
            bonus=to_decimal(data["bonus"], "bonus", employee_id),
            deductions=to_decimal(data["deductions"], "deductions", employee_id),
        )


@dataclass(frozen=True)
class DeductionBreakdown:
    """Itemized deductions for one employee."""

    company_tax: Decimal
    social_security: Decimal
    professional_tax: Decimal
    personal_deductions: Decimal

    @property
    def total_deductions(self) -> Decimal:
        return (
            self.company_tax
            + self.social_security
            + self.professional_tax
            + self.personal_deductions
        )

    def to_dict(self) -> dict[str, Decimal]:
        return {
            "company_tax": self.company_tax,
            "social_security": self.social_security,
            "professional_tax": self.professional_tax,
            "personal_deductions": self.personal_deductions,
            "total_deductions": self.total_deductions,
        }


@dataclass(frozen=True)
class NetPayResult:
    """Result of calculating net pay for one employee.

    ``net_pay`` may be negative when deductions exceed gross pay; that is a
    signal for anomaly detection, not an error.
    """

    employee_id: str
    gross_pay: Decimal
    breakdown: DeductionBreakdown

    @property
    def net_pay(self) -> Decimal:
        return self.gross_pay - self.breakdown.total_deductions

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON response shape."""
        return {
            "employee_id": self.employee_id,
            "gross_pay": self.gross_pay,
            "net_pay": self.net_pay,
            "breakdown": self.breakdown.to_dict(),
        }
