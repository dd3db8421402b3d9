"""Abstract repository interface (port) for the designer roster."""

from abc import ABC, abstractmethod

from fo_tracker.domain.entities import Designer


class DesignerRepository(ABC):
    """Port for designer lookups: implemented in the infrastructure layer."""

    @abstractmethod
    async def fetch_designers(self, active_only: bool = True) -> list[Designer]:
        """Retrieve designers, by default only the active ones."""
        ...
