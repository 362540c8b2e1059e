"""Pytest fixtures for payroll audit tests."""

from __future__ import annotations

import copy
import json
from decimal import Decimal
from pathlib import Path
from typing import Any

import pytest

from payroll_audit.calculators.rules import RuleTable
from payroll_audit.calculators.types import EmployeeRecord

REPO_ROOT = Path(__file__).resolve().parent.parent

RULES_PAYLOAD: dict[str, Any] = {
    "social_security_percent": Decimal("0.12"),
    "income_tax_slabs": [
        {"min": 0, "max": 9999999, "rate": Decimal("0.10")},
    ],
    "professional_tax": {
        "Mumbai": [{"min": 10001, "max": 9999999, "tax": 200}],
        "Delhi": [{"min": 0, "max": 9999999, "tax": 0}],
        "default": [{"min": 0, "max": None, "tax": 150}],
    },
}


def make_employee(
    employee_id: str = "E001",
    salary: str | int = 80000,
    bonus: str | int = 10000,
    deductions: str | int = 5000,
    location: str | None = "Mumbai",
    department: str = "Engineering",
    name: str | None = None,
) -> EmployeeRecord:
    """Build an employee record with Scenario A compensation by default."""
    return EmployeeRecord(
        employee_id=employee_id,
        name=name or f"Employee {employee_id}",
        department=department,
        location=location,
        salary=Decimal(str(salary)),
        bonus=Decimal(str(bonus)),
        deductions=Decimal(str(deductions)),
    )


def write_rules(path: Path, payload: dict[str, Any]) -> Path:
    """Write a rule payload as JSON, turning Decimals into JSON numbers."""
    path.write_text(json.dumps(payload, default=float), encoding="utf-8")
    return path


@pytest.fixture
def rules_payload() -> dict[str, Any]:
    return copy.deepcopy(RULES_PAYLOAD)


@pytest.fixture
def rules() -> RuleTable:
    return RuleTable.from_payload(RULES_PAYLOAD)


@pytest.fixture
def rules_file(tmp_path: Path) -> Path:
    return write_rules(tmp_path / "tax_rules.json", RULES_PAYLOAD)


@pytest.fixture
def employee() -> EmployeeRecord:
    return make_employee()
