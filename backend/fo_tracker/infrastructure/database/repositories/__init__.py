from .designer_repository import SQLAlchemyDesignerRepository
from .job_repository import SQLAlchemyJobRepository

__all__ = [
    "SQLAlchemyDesignerRepository",
    "SQLAlchemyJobRepository",
]
