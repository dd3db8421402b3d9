from .job_repository import JobRepository
from .designer_repository import DesignerRepository
from .job_change_feed import JobChangeFeed, JobSubscription

__all__ = [
    "JobRepository",
    "DesignerRepository",
    "JobChangeFeed",
    "JobSubscription",
]
