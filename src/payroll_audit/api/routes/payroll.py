"""Net pay calculation, anomaly detection and pay history endpoints."""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status

from payroll_audit.api.dependencies import DbSession, Detection, Rules
from payroll_audit.api.schemas import (
    AnomalyReportResponse,
    CalculateNetRequest,
    DetectAnomaliesRequest,
    ErrorResponse,
    HistoryListResponse,
    HistoryRecordResponse,
    NetPayResponse,
    RecordHistoryRequest,
    RecordHistoryResponse,
)
from payroll_audit.calculators.net_pay import NetPayCalculator, compute_net_pay
from payroll_audit.detection.report import build_report
from payroll_audit.services.employee_service import EmployeeService
from payroll_audit.services.history_service import HistoryService

router = APIRouter(prefix="/payroll", tags=["payroll"])


@router.post(
    "/calculate-net",
    response_model=NetPayResponse,
    responses={422: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def calculate_net_pay(rules: Rules, payload: CalculateNetRequest) -> NetPayResponse:
    """Calculate net pay for the submitted employee record."""
    result = compute_net_pay(payload.employee.to_record(), rules)
    return NetPayResponse.model_validate(result.to_dict())


@router.post(
    "/detect-anomalies",
    response_model=AnomalyReportResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def detect_anomalies(
    db: DbSession,
    rules: Rules,
    config: Detection,
    payload: DetectAnomaliesRequest | None = None,
) -> AnomalyReportResponse:
    """Run anomaly detection on a proposed batch.

    Without an ``employees`` list the stored employee records are the batch.
    """
    payload = payload or DetectAnomaliesRequest()

    if payload.employees is not None:
        batch = [e.to_record() for e in payload.employees]
    else:
        batch = await EmployeeService(db).load_batch()

    if not batch:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No employees to check",
        )

    history = await HistoryService(db).load_history()
    report = build_report(batch, history, rules, payload.pay_period, config)
    return AnomalyReportResponse.model_validate(report.to_dict())


@router.post(
    "/history",
    response_model=RecordHistoryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def record_history(
    db: DbSession,
    rules: Rules,
    payload: RecordHistoryRequest,
) -> RecordHistoryResponse:
    """Compute net pay for every stored employee and append it to history."""
    batch = await EmployeeService(db).load_batch()
    if not batch:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No employees to record",
        )

    calculator = NetPayCalculator(rules)
    records = await HistoryService(db).record_period(
        payload.pay_period, [calculator.calculate(e) for e in batch]
    )
    await db.commit()

    return RecordHistoryResponse(
        pay_period=payload.pay_period,
        recorded=len(records),
        items=[HistoryRecordResponse.model_validate(r, from_attributes=True) for r in records],
    )


@router.get("/history", response_model=HistoryListResponse)
async def list_history(
    db: DbSession,
    employee_id: Annotated[str | None, Query()] = None,
) -> HistoryListResponse:
    """List pay history, most recent period first."""
    records = await HistoryService(db).load_history(employee_id)
    return HistoryListResponse(
        items=[HistoryRecordResponse.model_validate(r, from_attributes=True) for r in records],
        total=len(records),
    )
