"""Permission entity - authorization unit guarding one entity instance."""

from dataclasses import dataclass


@dataclass
class Permission:
    """Permission - named, independently activatable, owned by the authorization manager."""

    name: str
    description: str = ""
    active: bool = True
