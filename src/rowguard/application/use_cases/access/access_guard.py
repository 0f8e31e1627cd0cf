"""Access guard - caller checks for secure settings and secured rows."""

from collections.abc import Iterable

import structlog

from rowguard.application.ports import AuthorizationManager, Caller
from rowguard.domain.exceptions import PermissionDenied

logger = structlog.get_logger(__name__)


class AccessGuard:
    """Answers whether a caller may change secure settings or see a secured row."""

    def __init__(self, authorization_manager: AuthorizationManager) -> None:
        self._auth = authorization_manager

    def authorize(self, caller: Caller, required_roles: Iterable[str]) -> bool:
        """Admin passes; otherwise every required role must be held. No roles, no grant."""
        identity = caller.identity
        if identity is not None and identity.is_admin:
            return True

        roles = list(required_roles)
        if not roles:
            return False

        for role in roles:
            if not caller.has_role(role):
                return False
        return True

    def ensure_authorized(self, caller: Caller, required_roles: Iterable[str]) -> None:
        """Raise PermissionDenied unless authorize() passes."""
        roles = tuple(required_roles)
        if not self.authorize(caller, roles):
            identity = caller.identity
            logger.warning(
                "Secure access check failed",
                user_id=identity.user_id if identity else None,
                secure_roles=roles,
            )
            raise PermissionDenied("You are not allowed to perform this action.")

    def can_access_row(self, caller: Caller, permission_name: str) -> bool:
        identity = caller.identity
        if identity is not None and identity.is_admin:
            return True
        user_id = identity.user_id if identity else None
        return self._auth.check_access(user_id, permission_name)
