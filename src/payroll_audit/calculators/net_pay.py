"""Net pay calculation from gross compensation and the rule table."""

from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from payroll_audit.calculators.rules import (
    REQUIRED_SECTIONS,
    ConfigurationError,
    IncomeTaxSlab,
    ProfessionalTaxSlab,
    RuleTable,
    find_slab,
)
from payroll_audit.calculators.types import (
    DeductionBreakdown,
    EmployeeRecord,
    InvalidRecordError,
    NetPayResult,
)

ZERO = Decimal("0")


def calculate_income_tax(gross_pay: Decimal, slabs: Sequence[IncomeTaxSlab]) -> Decimal:
    """Tax at the rate of the single slab containing gross pay.

    This is not a progressive calculation: the matched rate applies to the
    whole amount. An amount no slab covers is taxed at zero.
    """
    slab = find_slab(gross_pay, slabs)
    if slab is None:
        return ZERO
    return gross_pay * slab.rate


def calculate_slab_tax(gross_pay: Decimal, slabs: Sequence[ProfessionalTaxSlab]) -> Decimal:
    """Flat amount of the slab containing gross pay, or zero."""
    slab = find_slab(gross_pay, slabs)
    return slab.tax if slab is not None else ZERO


def _check_rules(rules: RuleTable | None) -> RuleTable:
    if rules is None:
        raise ConfigurationError("Tax rules are not loaded")
    for section in REQUIRED_SECTIONS:
        if getattr(rules, section, None) is None:
            raise ConfigurationError(f"Rule table is missing '{section}'", section)
    return rules


class NetPayCalculator:
    """Calculates net pay for employees against one rule table.

    Calculation order (per employee):
    1) Gross pay = salary + bonus
    2) Company income tax from the matching income tax slab
    3) Social security as a flat share of gross pay
    4) Professional tax from the employee's location table (or default)
    5) Personal deductions from the employee record
    6) Net pay = gross pay - total deductions
    """

    def __init__(self, rules: RuleTable):
        self.rules = _check_rules(rules)

    def calculate(self, employee: EmployeeRecord) -> NetPayResult:
        """Calculate net pay for a single employee.

        Raises:
            ConfigurationError: If no employee is given
            InvalidRecordError: If the employee is not a valid record
        """
        if employee is None:
            raise ConfigurationError("Employee data is required")
        if not isinstance(employee, EmployeeRecord):
            raise InvalidRecordError("employee", "must be an EmployeeRecord")

        gross_pay = employee.gross_pay

        company_tax = calculate_income_tax(gross_pay, self.rules.income_tax_slabs)
        social_security = gross_pay * self.rules.social_security_percent
        professional_tax = calculate_slab_tax(
            gross_pay, self.rules.professional_tax_slabs(employee.location)
        )

        return NetPayResult(
            employee_id=employee.employee_id,
            gross_pay=gross_pay,
            breakdown=DeductionBreakdown(
                company_tax=company_tax,
                social_security=social_security,
                professional_tax=professional_tax,
                personal_deductions=employee.deductions,
            ),
        )


def compute_net_pay(employee: EmployeeRecord, rules: RuleTable) -> NetPayResult:
    """Calculate net pay for ``employee`` under ``rules``."""
    return NetPayCalculator(rules).calculate(employee)
