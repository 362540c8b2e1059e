"""Net pay calculation engine."""

from payroll_audit.calculators.net_pay import NetPayCalculator, compute_net_pay
from payroll_audit.calculators.rules import (
    ConfigurationError,
    RuleTable,
    RuleTableProvider,
    load_rule_table,
)
from payroll_audit.calculators.types import (
    DeductionBreakdown,
    EmployeeRecord,
    InvalidRecordError,
    NetPayResult,
)

__all__ = [
    "ConfigurationError",
    "DeductionBreakdown",
    "EmployeeRecord",
    "InvalidRecordError",
    "NetPayCalculator",
    "NetPayResult",
    "RuleTable",
    "RuleTableProvider",
    "compute_net_pay",
    "load_rule_table",
]
