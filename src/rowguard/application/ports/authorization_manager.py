"""Authorization manager port - role/permission graph owned outside rowguard."""

from typing import Protocol

from rowguard.domain.entities import Permission, Role


class AuthorizationManager(Protocol):
    """Port for permission CRUD and role grant edges.

    Mutating calls return False (or raise) on failure; rowguard treats either
    as an inconsistency and aborts the enclosing transaction.
    """

    def add(self, permission: Permission) -> bool: ...

    def get_permission(self, name: str) -> Permission | None: ...

    def update(self, old_name: str, permission: Permission) -> bool: ...

    def remove(self, permission: Permission) -> bool: ...

    def get_roles(self) -> list[Role]: ...

    def grant(self, role: Role, permission: Permission) -> None: ...

    def revoke(self, role: Role, permission: Permission) -> None: ...

    def has_grant(self, role: Role, permission: Permission) -> bool: ...

    def check_access(self, user_id: str | None, permission_name: str) -> bool: ...
