"""Application service for the manager's workload metrics."""

import calendar
import logging
import math
from collections import defaultdict
from datetime import datetime, timezone

from fo_tracker.application.interfaces import DesignerRepository, JobRepository
from fo_tracker.domain.entities import (
    Designer,
    DesignerAverage,
    DesignerCount,
    Job,
    JobMetrics,
    MetricsPeriod,
    MonthCount,
    TopJob,
)

logger = logging.getLogger(__name__)

UNASSIGNED = "unknown"
_SECONDS_PER_DAY = 24 * 60 * 60


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def days_taken(job: Job) -> int | None:
    """Whole days (rounded up) between opening and completion, if completed."""
    if job.created_at is None or job.completed_at is None:
        return None
    delta = _as_utc(job.completed_at) - _as_utc(job.created_at)
    return math.ceil(abs(delta.total_seconds()) / _SECONDS_PER_DAY)


def _in_period(job: Job, period: MetricsPeriod) -> bool:
    if job.created_at is None:
        return False
    if job.created_at.year != period.year:
        return False
    return period.month is None or job.created_at.month == period.month


def compute_metrics(
    jobs: list[Job],
    designers: list[Designer],
    period: MetricsPeriod,
    top_n: int = 10,
) -> JobMetrics:
    """Aggregate the jobs opened in ``period``.

    Jobs without a designer are counted under ``"unknown"``. Averages are
    rounded to one decimal.
    """
    metrics = JobMetrics(period=period)
    metrics.available_years = sorted(
        {job.created_at.year for job in jobs if job.created_at is not None},
        reverse=True,
    )
    if not jobs or not designers:
        return metrics

    names = {d.id: d.name for d in designers}
    selected = [job for job in jobs if _in_period(job, period)]
    metrics.total_jobs = len(selected)

    counts: dict[str, int] = defaultdict(int)
    for job in selected:
        counts[job.designer_id or UNASSIGNED] += 1
    metrics.jobs_per_designer = [
        DesignerCount(name=names.get(key, key), count=count) for key, count in counts.items()
    ]

    durations: dict[str, list[int]] = defaultdict(list)
    for job in selected:
        days = days_taken(job)
        if days is not None:
            durations[job.designer_id or UNASSIGNED].append(days)
    metrics.avg_days_per_designer = [
        DesignerAverage(name=names.get(key, key), average_days=round(sum(values) / len(values), 1))
        for key, values in durations.items()
    ]
    all_days = [d for values in durations.values() for d in values]
    metrics.overall_avg_days = round(sum(all_days) / len(all_days), 1) if all_days else 0.0

    opened: dict[int, int] = defaultdict(int)
    if period.year in metrics.available_years:
        for job in jobs:
            if job.created_at is not None and job.created_at.year == period.year:
                opened[job.created_at.month] += 1
    metrics.opened_per_month = [
        MonthCount(month=m, label=calendar.month_abbr[m], count=opened.get(m, 0))
        for m in range(1, 13)
    ]

    for designer in designers:
        own = sorted(
            (j for j in selected if j.designer_id == designer.id and j.work_order_number is not None),
            key=lambda j: j.work_order_number,
            reverse=True,
        )[:top_n]
        metrics.top_jobs_per_designer[designer.id] = [
            TopJob(work_order_number=j.work_order_number, item=j.item or "N/A", days_taken=days_taken(j))
            for j in own
        ]

    return metrics


class MetricsService:
    """Loads designers and jobs and aggregates them for a period."""

    def __init__(
        self,
        job_repository: JobRepository,
        designer_repository: DesignerRepository,
        top_n: int = 10,
    ):
        self._job_repository = job_repository
        self._designer_repository = designer_repository
        self._top_n = top_n

    async def compute(self, period: MetricsPeriod) -> JobMetrics:
        designers = await self._designer_repository.fetch_designers(active_only=True)
        jobs = await self._job_repository.fetch_jobs()
        logger.debug(
            "Computing metrics for %s/%s over %d jobs",
            period.year,
            period.month or "*",
            len(jobs),
        )
        return compute_metrics(jobs, designers, period, top_n=self._top_n)
