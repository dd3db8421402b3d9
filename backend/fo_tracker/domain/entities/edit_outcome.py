"""Result types for a proposed field edit."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Accepted:
    """The edit is allowed; ``updates`` is the full set of column changes to stage.

    ``warning`` carries a soft, non-blocking message for the user (e.g. a
    job marked as paginated before its path was filled in).
    """

    updates: dict[str, Any] = field(default_factory=dict)
    warning: str | None = None

    @property
    def accepted(self) -> bool:
        return True


@dataclass(frozen=True)
class Rejected:
    """The edit is refused and nothing is staged."""

    reason: str

    @property
    def accepted(self) -> bool:
        return False


EditOutcome = Accepted | Rejected
