"""Pydantic DTOs for the workload metrics dashboard."""

from pydantic import BaseModel


class DesignerCountSchema(BaseModel):
    name: str
    count: int

    model_config = {"from_attributes": True}


class DesignerAverageSchema(BaseModel):
    name: str
    average_days: float

    model_config = {"from_attributes": True}


class MonthCountSchema(BaseModel):
    month: int
    label: str
    count: int

    model_config = {"from_attributes": True}


class TopJobSchema(BaseModel):
    work_order_number: int
    item: str
    days_taken: int | None

    model_config = {"from_attributes": True}


class MetricsPeriodSchema(BaseModel):
    year: int
    month: int | None = None

    model_config = {"from_attributes": True}


class JobMetricsResponse(BaseModel):
    """Aggregates over the jobs opened in the requested period."""

    period: MetricsPeriodSchema
    total_jobs: int
    overall_avg_days: float
    jobs_per_designer: list[DesignerCountSchema]
    avg_days_per_designer: list[DesignerAverageSchema]
    opened_per_month: list[MonthCountSchema]
    top_jobs_per_designer: dict[str, list[TopJobSchema]]
    available_years: list[int]

    model_config = {"from_attributes": True}
