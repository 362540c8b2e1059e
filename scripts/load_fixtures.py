"""Load fixture data into the database.

Usage:
    python -m scripts.load_fixtures [--employees PATH] [--history PATH]

Loads employee records and pay history from JSON files. Useful for setting
up a development environment. Existing employees are skipped.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from payroll_audit.cli import load_employees, load_history
from payroll_audit.config import get_settings
from payroll_audit.database import create_tables, dispose_db, get_session, init_db
from payroll_audit.services import (
    DuplicateEmployeeError,
    EmployeeService,
    HistoryService,
    PeriodAlreadyRecordedError,
)

DATA_DIR = Path(__file__).parent.parent / "examples" / "data"


async def load_fixtures(employees_file: Path, history_file: Path | None) -> None:
    """Load fixture JSON files into the database."""
    settings = get_settings()
    print(f"Target database: {settings.database_url}")

    engine, _ = init_db()
    await create_tables(engine)

    async with get_session() as session:
        service = EmployeeService(session)
        created = 0
        for record in load_employees(employees_file):
            try:
                await service.create(record)
                created += 1
            except DuplicateEmployeeError as e:
                print(f"  Skipped: {e}")
        print(f"Employees created: {created}")

    if history_file is not None:
        async with get_session() as session:
            try:
                records = await HistoryService(session).append(load_history(history_file))
                print(f"History records loaded: {len(records)}")
            except PeriodAlreadyRecordedError as e:
                await session.rollback()
                print(f"  Skipped history: {e}")

    await dispose_db()


def main() -> None:
    parser = argparse.ArgumentParser(description="Load fixture data into the database")
    parser.add_argument(
        "--employees",
        type=Path,
        default=DATA_DIR / "employees.json",
        help="JSON array of employee records",
    )
    parser.add_argument(
        "--history",
        type=Path,
        default=DATA_DIR / "history.json",
        help="JSON array of history records",
    )
    parser.add_argument(
        "--no-history",
        action="store_true",
        help="Skip loading pay history",
    )
    args = parser.parse_args()

    if not args.employees.exists():
        print(f"Error: Employees file not found: {args.employees}")
        sys.exit(1)

    asyncio.run(load_fixtures(args.employees, None if args.no_history else args.history))


if __name__ == "__main__":
    main()
