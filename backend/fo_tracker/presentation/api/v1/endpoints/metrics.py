"""Workload metrics endpoint for the manager dashboard."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, status

from fo_tracker.application.schemas import JobMetricsResponse
from fo_tracker.application.services import MetricsService
from fo_tracker.domain.entities import MetricsPeriod
from fo_tracker.domain.exceptions import RemoteError
from fo_tracker.infrastructure.dependencies import get_metrics_service

router = APIRouter(prefix="/metrics", tags=["Metrics"])


@router.get("", response_model=JobMetricsResponse)
async def get_metrics(
    year: int | None = Query(None, ge=1900, le=9999),
    month: int | None = Query(None, ge=1, le=12),
    service: MetricsService = Depends(get_metrics_service),
) -> JobMetricsResponse:
    """Job counts, turnaround averages and slowest jobs for a year or month.

    Defaults to the current year.
    """
    period = MetricsPeriod(year=year or datetime.now(timezone.utc).year, month=month)
    try:
        metrics = await service.compute(period)
    except RemoteError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)
    return JobMetricsResponse.model_validate(metrics, from_attributes=True)
