"""Employee record endpoints."""

from typing import Annotated

from fastapi import APIRouter, Path, Response, status

from payroll_audit.api.dependencies import DbSession, Rules
from payroll_audit.api.schemas import (
    EmployeeCreate,
    EmployeeListResponse,
    EmployeeResponse,
    EmployeeUpdate,
    ErrorResponse,
    NetPayResponse,
)
from payroll_audit.calculators.net_pay import compute_net_pay
from payroll_audit.services.employee_service import EmployeeService

router = APIRouter(prefix="/employees", tags=["employees"])


@router.post(
    "",
    response_model=EmployeeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
async def create_employee(db: DbSession, payload: EmployeeCreate) -> EmployeeResponse:
    """Create a new employee record."""
    employee = await EmployeeService(db).create(payload.to_record())
    await db.commit()
    return EmployeeResponse.model_validate(employee)


@router.get("", response_model=EmployeeListResponse)
async def list_employees(db: DbSession) -> EmployeeListResponse:
    """List all employee records in batch order."""
    employees = await EmployeeService(db).list_all()
    return EmployeeListResponse(
        items=[EmployeeResponse.model_validate(e) for e in employees],
        total=len(employees),
    )


@router.get(
    "/{employee_id}",
    response_model=EmployeeResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_employee(
    db: DbSession,
    employee_id: Annotated[str, Path()],
) -> EmployeeResponse:
    """Get a single employee record."""
    employee = await EmployeeService(db).get(employee_id)
    return EmployeeResponse.model_validate(employee)


@router.put(
    "/{employee_id}",
    response_model=EmployeeResponse,
    responses={404: {"model": ErrorResponse}},
)
async def update_employee(
    db: DbSession,
    employee_id: Annotated[str, Path()],
    payload: EmployeeUpdate,
) -> EmployeeResponse:
    """Replace an employee record."""
    employee = await EmployeeService(db).update(employee_id, payload.to_record(employee_id))
    await db.commit()
    return EmployeeResponse.model_validate(employee)


@router.delete(
    "/{employee_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_employee(
    db: DbSession,
    employee_id: Annotated[str, Path()],
) -> Response:
    """Delete an employee record. Pay history is kept."""
    await EmployeeService(db).delete(employee_id)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{employee_id}/net-pay",
    response_model=NetPayResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_employee_net_pay(
    db: DbSession,
    rules: Rules,
    employee_id: Annotated[str, Path()],
) -> NetPayResponse:
    """Calculate net pay for a stored employee."""
    employee = await EmployeeService(db).get(employee_id)
    result = compute_net_pay(employee.to_record(), rules)
    return NetPayResponse.model_validate(result.to_dict())
