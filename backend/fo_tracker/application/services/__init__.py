from .row_store import RowStore
from .pending_edits import PendingEditOverlay
from .effective_view import JobFilter, SortDirection
from .flush_coordinator import FlushCoordinator
from .job_change_broadcaster import JobChangeBroadcaster
from .realtime_ingestion import RealtimeIngestion
from .job_session import JobSession
from .session_registry import JobSessionRegistry
from .metrics_service import MetricsService

__all__ = [
    "RowStore",
    "PendingEditOverlay",
    "JobFilter",
    "SortDirection",
    "FlushCoordinator",
    "JobChangeBroadcaster",
    "RealtimeIngestion",
    "JobSession",
    "JobSessionRegistry",
    "MetricsService",
]
