"""Role entity for RBAC."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Role:
    """Role - named group of callers that can be granted permissions."""

    name: str
    description: str = ""
