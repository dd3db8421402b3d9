"""Domain value objects for the manager's workload dashboard."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class MetricsPeriod:
    """Reporting window: a whole year, or one month of it when ``month`` is set."""

    year: int
    month: int | None = None

    def __post_init__(self) -> None:
        if self.month is not None and not 1 <= self.month <= 12:
            raise ValueError(f"month must be between 1 and 12, got {self.month}")


@dataclass(frozen=True)
class DesignerCount:
    name: str
    count: int


@dataclass(frozen=True)
class DesignerAverage:
    name: str
    average_days: float


@dataclass(frozen=True)
class MonthCount:
    month: int
    label: str
    count: int


@dataclass(frozen=True)
class TopJob:
    work_order_number: int
    item: str
    days_taken: int | None


@dataclass
class JobMetrics:
    """Aggregates over the jobs opened within a period."""

    period: MetricsPeriod
    total_jobs: int = 0
    overall_avg_days: float = 0.0
    jobs_per_designer: list[DesignerCount] = field(default_factory=list)
    avg_days_per_designer: list[DesignerAverage] = field(default_factory=list)
    opened_per_month: list[MonthCount] = field(default_factory=list)
    top_jobs_per_designer: dict[str, list[TopJob]] = field(default_factory=dict)
    available_years: list[int] = field(default_factory=list)
