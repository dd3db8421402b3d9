"""Domain entity: a member of the design team who can be assigned jobs."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Designer:
    """Designer roster entry. Read-only from the edit session's point of view."""

    id: str
    name: str
    email: str = ""
    active: bool = True
