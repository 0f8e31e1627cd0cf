"""Role assignment reconciliation for one permission."""

from collections.abc import Iterable
from dataclasses import dataclass, field

import structlog

from rowguard.application.ports import AuthorizationManager
from rowguard.domain.entities import Permission
from rowguard.domain.exceptions import InconsistencyError

logger = structlog.get_logger(__name__)


@dataclass
class ReconcileResult:
    """Role names whose grant edge was added or removed."""

    granted: list[str] = field(default_factory=list)
    revoked: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.granted or self.revoked)


class RoleAssignmentSynchronizer:
    """Moves a permission's granted role set to a desired set with minimal edge changes."""

    def __init__(self, authorization_manager: AuthorizationManager) -> None:
        self._auth = authorization_manager

    def current_roles(self, permission: Permission) -> frozenset[str]:
        """Names of roles that currently grant the permission."""
        return frozenset(
            role.name for role in self._auth.get_roles() if self._auth.has_grant(role, permission)
        )

    def reconcile(self, permission: Permission, desired_roles: Iterable[str]) -> ReconcileResult:
        desired = set(desired_roles)
        result = ReconcileResult()

        for role in self._auth.get_roles():
            wanted = role.name in desired
            try:
                granted = self._auth.has_grant(role, permission)
                if wanted and not granted:
                    self._auth.grant(role, permission)
                    result.granted.append(role.name)
                elif granted and not wanted:
                    self._auth.revoke(role, permission)
                    result.revoked.append(role.name)
            except Exception as e:
                raise InconsistencyError(
                    f"Failed to update grant of '{permission.name}' for role '{role.name}'"
                ) from e

        if result.changed:
            logger.info(
                "Permission roles reconciled",
                permission=permission.name,
                granted=result.granted,
                revoked=result.revoked,
            )
        return result
