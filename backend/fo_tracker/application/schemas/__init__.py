from .job import (
    DesignerResponse,
    JobCreate,
    JobEditRequest,
    JobResponse,
    EditOutcomeResponse,
    FlushReportResponse,
)
from .metrics import (
    DesignerCountSchema,
    DesignerAverageSchema,
    MonthCountSchema,
    TopJobSchema,
    MetricsPeriodSchema,
    JobMetricsResponse,
)

__all__ = [
    "DesignerResponse",
    "JobCreate",
    "JobEditRequest",
    "JobResponse",
    "EditOutcomeResponse",
    "FlushReportResponse",
    "DesignerCountSchema",
    "DesignerAverageSchema",
    "MonthCountSchema",
    "TopJobSchema",
    "MetricsPeriodSchema",
    "JobMetricsResponse",
]
