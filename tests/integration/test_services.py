"""Employee and history store tests against an in-memory database."""

from decimal import Decimal

import pytest

from payroll_audit.calculators.net_pay import compute_net_pay
from payroll_audit.calculators.types import InvalidRecordError
from payroll_audit.detection.types import HistoryRecord
from payroll_audit.services import (
    DuplicateEmployeeError,
    EmployeeNotFoundError,
    EmployeeService,
    HistoryService,
    PeriodAlreadyRecordedError,
)
from tests.conftest import make_employee

pytestmark = pytest.mark.asyncio


class TestEmployeeService:
    """Test employee CRUD and batch snapshots."""

    async def test_create_and_get(self, db_session):
        service = EmployeeService(db_session)

        await service.create(make_employee("E001", location=None))
        employee = await service.get("E001")

        assert employee.name == "Employee E001"
        assert employee.location is None
        assert employee.salary == Decimal("80000")

    async def test_duplicate_id_rejected(self, db_session):
        service = EmployeeService(db_session)
        await service.create(make_employee("E001"))

        with pytest.raises(DuplicateEmployeeError) as exc_info:
            await service.create(make_employee("E001", salary=1))

        assert exc_info.value.employee_id == "E001"

    async def test_get_missing_raises(self, db_session):
        with pytest.raises(EmployeeNotFoundError):
            await EmployeeService(db_session).get("E404")

    async def test_batch_keeps_insertion_order(self, db_session):
        service = EmployeeService(db_session)
        for employee_id in ("E3", "E1", "E2"):
            await service.create(make_employee(employee_id))

        batch = await service.load_batch()

        assert [e.employee_id for e in batch] == ["E3", "E1", "E2"]
        assert batch[0] == make_employee("E3")

    async def test_update_replaces_fields(self, db_session):
        service = EmployeeService(db_session)
        await service.create(make_employee("E001"))

        await service.update("E001", make_employee("E001", salary=90000, location="Delhi"))
        record = (await service.get("E001")).to_record()

        assert record.salary == Decimal("90000")
        assert record.location == "Delhi"

    async def test_four_decimal_places_stored_exactly(self, db_session):
        service = EmployeeService(db_session)
        await service.create(make_employee("E001", salary="80000.1234", deductions="0.0001"))

        record = (await service.get("E001")).to_record()

        assert record.salary == Decimal("80000.1234")
        assert record.deductions == Decimal("0.0001")

    @pytest.mark.parametrize("field", ["salary", "bonus", "deductions"])
    async def test_finer_amount_rejected_on_create(self, db_session, field):
        service = EmployeeService(db_session)

        with pytest.raises(InvalidRecordError) as exc_info:
            await service.create(make_employee("E001", **{field: "100.00005"}))

        assert exc_info.value.field_name == field
        assert await service.list_all() == []

    async def test_finer_amount_rejected_on_update(self, db_session):
        service = EmployeeService(db_session)
        await service.create(make_employee("E001"))

        with pytest.raises(InvalidRecordError):
            await service.update("E001", make_employee("E001", salary="90000.12345"))

        assert (await service.get("E001")).to_record().salary == Decimal("80000")

    async def test_trailing_zeros_are_not_extra_places(self, db_session):
        service = EmployeeService(db_session)

        await service.create(make_employee("E001", salary="80000.500000"))

        assert (await service.get("E001")).to_record().salary == Decimal("80000.5")

    async def test_delete(self, db_session):
        service = EmployeeService(db_session)
        await service.create(make_employee("E001"))

        await service.delete("E001")

        assert await service.list_all() == []
        with pytest.raises(EmployeeNotFoundError):
            await service.delete("E001")


class TestHistoryService:
    """Test the append-only pay history."""

    async def test_load_is_most_recent_first(self, db_session):
        service = HistoryService(db_session)
        await service.append([
            HistoryRecord("E001", "2025-08", Decimal("100")),
            HistoryRecord("E001", "2025-10", Decimal("300")),
            HistoryRecord("E001", "2025-09", Decimal("200")),
            HistoryRecord("E002", "2025-10", Decimal("50")),
        ])

        records = await service.load_history("E001")

        assert [r.pay_period for r in records] == ["2025-10", "2025-09", "2025-08"]
        assert records[0].net_pay == Decimal("300")
        assert len(await service.load_history()) == 4

    async def test_record_period_stores_net_pay(self, db_session, rules):
        result = compute_net_pay(make_employee("E001"), rules)

        stored = await HistoryService(db_session).record_period("2025-11", [result])

        assert stored == [HistoryRecord("E001", "2025-11", Decimal("65000"))]
        (loaded,) = await HistoryService(db_session).load_history("E001")
        assert loaded.net_pay == Decimal("65000")

    async def test_fractional_net_pay_stored_exactly(self, db_session, rules):
        result = compute_net_pay(make_employee("E001", salary="80000.1234"), rules)
        assert result.net_pay == Decimal("65000.096252")

        await HistoryService(db_session).record_period("2025-11", [result])
        (loaded,) = await HistoryService(db_session).load_history("E001")

        assert loaded.net_pay == result.net_pay

    async def test_net_pay_finer_than_store_rejected(self, db_session):
        service = HistoryService(db_session)

        with pytest.raises(InvalidRecordError) as exc_info:
            await service.append([
                HistoryRecord("E002", "2025-11", Decimal("100")),
                HistoryRecord("E001", "2025-11", Decimal("1.00000000001")),
            ])

        assert exc_info.value.employee_id == "E001"
        assert await service.load_history() == []

    async def test_same_period_cannot_be_appended_twice(self, db_session):
        service = HistoryService(db_session)
        await service.append([HistoryRecord("E001", "2025-11", Decimal("100"))])

        with pytest.raises(PeriodAlreadyRecordedError) as exc_info:
            await service.append([
                HistoryRecord("E002", "2025-11", Decimal("100")),
                HistoryRecord("E001", "2025-11", Decimal("999")),
            ])

        assert exc_info.value.conflicts == [("E001", "2025-11")]
        # Nothing from the rejected append is stored
        assert await service.load_history("E002") == []
