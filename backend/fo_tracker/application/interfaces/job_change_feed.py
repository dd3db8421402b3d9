"""Port for realtime job change notifications."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from fo_tracker.domain.entities import JobChangeEvent


class JobSubscription(ABC):
    """An open subscription. Iterate it for events; ``close()`` unsubscribes."""

    @abstractmethod
    def __aiter__(self) -> AsyncIterator[JobChangeEvent]:
        ...

    @abstractmethod
    def close(self) -> None:
        """Stop receiving events. Safe to call more than once."""
        ...


class JobChangeFeed(ABC):
    """Delivers insert/update/delete events on the jobs table in publish order."""

    @abstractmethod
    def subscribe(self) -> JobSubscription:
        """Register a new subscriber; events published afterwards are delivered to it."""
        ...

    @abstractmethod
    async def broadcast(self, event: JobChangeEvent) -> None:
        """Publish an event to every current subscriber."""
        ...
