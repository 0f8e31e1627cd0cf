"""Domain entities."""

from rowguard.domain.entities.identity import Identity
from rowguard.domain.entities.permission import Permission
from rowguard.domain.entities.role import Role

__all__ = [
    "Identity",
    "Permission",
    "Role",
]
