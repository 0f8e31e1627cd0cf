"""Keycloak OIDC provider - callers from introspected access tokens."""

from dataclasses import dataclass

import structlog
from keycloak import KeycloakOpenID
from keycloak.exceptions import KeycloakError

from rowguard.domain.entities import Identity

logger = structlog.get_logger(__name__)


@dataclass
class OIDCUser:
    """Authenticated user from OIDC token."""

    user_id: str
    email: str | None
    username: str | None
    realm_roles: list[str]


@dataclass(frozen=True)
class KeycloakCaller:
    """Caller backed by Keycloak realm roles. ``user=None`` is an anonymous caller."""

    user: OIDCUser | None = None
    admin_role: str = "admin"

    @property
    def identity(self) -> Identity | None:
        if self.user is None:
            return None
        return Identity(
            user_id=self.user.user_id,
            username=self.user.username,
            is_admin=self.has_role(self.admin_role),
        )

    def has_role(self, role: str) -> bool:
        return self.user is not None and role in self.user.realm_roles


class KeycloakProvider:
    """Keycloak OIDC - validates JWT and extracts user info."""

    def __init__(
        self,
        server_url: str,
        realm: str,
        client_id: str,
        client_secret: str = "",
        admin_role: str = "admin",
    ) -> None:
        self._keycloak = KeycloakOpenID(
            server_url=server_url,
            realm_name=realm,
            client_id=client_id,
            client_secret_key=client_secret,
        )
        self._admin_role = admin_role

    def decode_token(self, token: str) -> OIDCUser | None:
        """Introspect JWT, return user info or None for inactive/invalid tokens."""
        try:
            token_info = self._keycloak.introspect(token)
        except KeycloakError as e:
            logger.warning("Token introspection failed", error=str(e))
            return None
        if not token_info.get("active"):
            return None
        return OIDCUser(
            user_id=token_info.get("sub", ""),
            email=token_info.get("email"),
            username=token_info.get("preferred_username"),
            realm_roles=token_info.get("realm_access", {}).get("roles", []),
        )

    def caller_for(self, token: str | None) -> KeycloakCaller:
        """Caller for a bearer token; missing or invalid tokens give an anonymous caller."""
        user = self.decode_token(token) if token else None
        return KeycloakCaller(user=user, admin_role=self._admin_role)
