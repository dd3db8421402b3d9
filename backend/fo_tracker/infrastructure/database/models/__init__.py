from .designer import DesignerModel
from .job import JobModel

__all__ = [
    "DesignerModel",
    "JobModel",
]
