"""Payroll audit command line interface.

Runs the engine over JSON files without a database:
- Net pay calculation
- Anomaly detection
- API server

Usage:
    python -m payroll_audit.cli calculate --rules config/tax_rules.json --employees staff.json
    python -m payroll_audit.cli detect --rules config/tax_rules.json --employees staff.json \\
        --history history.json --pay-period 2025-11
    python -m payroll_audit.cli serve
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable

from payroll_audit.calculators.net_pay import NetPayCalculator
from payroll_audit.calculators.rules import ConfigurationError, load_rule_table
from payroll_audit.calculators.types import EmployeeRecord, InvalidRecordError, to_decimal
from payroll_audit.config import get_settings
from payroll_audit.detection.report import build_report
from payroll_audit.detection.types import HistoryRecord, ReportStatus
from payroll_audit.logging_config import configure_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_ANOMALY = 2


def _read_json(path: Path) -> Any:
    with path.open(encoding="utf-8") as fh:
        return json.load(fh, parse_float=Decimal)


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    raise TypeError(f"Cannot serialize {type(value).__name__}")


def load_employees(path: Path) -> list[EmployeeRecord]:
    """Read a JSON array of employee objects."""
    data = _read_json(path)
    if not isinstance(data, list):
        raise InvalidRecordError("employees", "file must hold a JSON array")
    return [EmployeeRecord.from_mapping(item) for item in data]


def load_history(path: Path) -> list[HistoryRecord]:
    """Read a JSON array of history objects, kept in file order."""
    data = _read_json(path)
    if not isinstance(data, list):
        raise InvalidRecordError("history", "file must hold a JSON array")
    records = []
    for item in data:
        if not isinstance(item, dict):
            raise InvalidRecordError("history", f"entry {item!r} must be an object")
        employee_id = item.get("employee_id")
        if not isinstance(employee_id, str) or not employee_id.strip():
            raise InvalidRecordError("employee_id", "must be a non-empty string")
        pay_period = item.get("pay_period")
        if not isinstance(pay_period, str):
            raise InvalidRecordError("pay_period", "must be a string", employee_id)
        if "net_pay" not in item:
            raise InvalidRecordError("net_pay", "is required", employee_id)
        records.append(HistoryRecord(
            employee_id=employee_id,
            pay_period=pay_period,
            net_pay=to_decimal(item["net_pay"], "net_pay", employee_id),
        ))
    return records


class PayrollAuditCli:
    """Payroll audit command line interface."""

    def __init__(self) -> None:
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="python -m payroll_audit.cli",
            description="Net pay calculation and payroll anomaly detection",
        )
        parser.add_argument(
            "--log-level",
            default=None,
            help="Logging level (default: LOG_LEVEL setting)",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        calculate = subparsers.add_parser(
            "calculate",
            help="Calculate net pay for employees in a JSON file",
        )
        calculate.add_argument("--rules", type=Path, required=True, help="Rule table JSON")
        calculate.add_argument(
            "--employees", type=Path, required=True, help="JSON array of employees"
        )
        calculate.add_argument(
            "--employee-id", type=str, help="Only calculate this employee"
        )

        detect = subparsers.add_parser(
            "detect",
            help="Run anomaly detection over a proposed batch",
        )
        detect.add_argument("--rules", type=Path, required=True, help="Rule table JSON")
        detect.add_argument(
            "--employees", type=Path, required=True, help="JSON array of employees"
        )
        detect.add_argument(
            "--history",
            type=Path,
            help="JSON array of history records, most recent first",
        )
        detect.add_argument(
            "--pay-period", type=str, help="Pay period token (default: current month)"
        )

        subparsers.add_parser("serve", help="Run the HTTP API")

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run CLI with arguments."""
        parsed = self.parser.parse_args(args)
        configure_logging(parsed.log_level or get_settings().log_level)

        if not parsed.command:
            self.parser.print_help()
            return EXIT_ERROR

        commands: dict[str, Callable[[argparse.Namespace], int]] = {
            "calculate": self._cmd_calculate,
            "detect": self._cmd_detect,
            "serve": self._cmd_serve,
        }

        try:
            return commands[parsed.command](parsed)
        except (ConfigurationError, InvalidRecordError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return EXIT_ERROR
        except OSError as e:
            print(f"Error: {e}", file=sys.stderr)
            return EXIT_ERROR

    def _print(self, payload: Any) -> None:
        print(json.dumps(payload, indent=2, default=_json_default))

    def _cmd_calculate(self, args: argparse.Namespace) -> int:
        rules = load_rule_table(args.rules)
        employees = load_employees(args.employees)
        if args.employee_id:
            employees = [e for e in employees if e.employee_id == args.employee_id]
            if not employees:
                print(f"Error: employee '{args.employee_id}' not found", file=sys.stderr)
                return EXIT_ERROR

        calculator = NetPayCalculator(rules)
        self._print([calculator.calculate(e).to_dict() for e in employees])
        return EXIT_OK

    def _cmd_detect(self, args: argparse.Namespace) -> int:
        rules = load_rule_table(args.rules)
        employees = load_employees(args.employees)
        if not employees:
            print("Error: no employees to check", file=sys.stderr)
            return EXIT_ERROR
        history = load_history(args.history) if args.history else []

        report = build_report(
            employees,
            history,
            rules,
            pay_period=args.pay_period,
            config=get_settings().detection_config(),
        )
        self._print(report.to_dict())
        return EXIT_ANOMALY if report.status == ReportStatus.ANOMALY_DETECTED else EXIT_OK

    def _cmd_serve(self, args: argparse.Namespace) -> int:
        from payroll_audit.__main__ import main as serve

        serve()
        return EXIT_OK


def main() -> None:
    """CLI entry point."""
    sys.exit(PayrollAuditCli().run())


if __name__ == "__main__":
    main()
