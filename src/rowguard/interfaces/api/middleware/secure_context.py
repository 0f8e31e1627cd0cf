"""Secure context middleware - builds the RequestContext for each request."""

from typing import Any

import falcon
import falcon.asgi

from rowguard.application.dto import RequestContext
from rowguard.infrastructure.auth.keycloak_provider import KeycloakCaller, KeycloakProvider

_BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


class SecureContextMiddleware:
    """Sets ``req.context.secure`` from the bearer token and the submitted role list."""

    def __init__(
        self,
        keycloak_provider: KeycloakProvider | None = None,
        access_roles_field: str = "secure_access_roles",
        secure_enabled: bool = True,
        admin_role: str = "admin",
    ) -> None:
        self._keycloak = keycloak_provider
        self._access_roles_field = access_roles_field
        self._secure_enabled = secure_enabled
        self._admin_role = admin_role

    async def process_request(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        req.context.secure = RequestContext(
            caller=self._caller(req),
            access_roles=await self._access_roles(req),
            secure=self._secure_enabled,
        )

    def _caller(self, req: falcon.asgi.Request) -> KeycloakCaller:
        auth = req.get_header("Authorization")
        token = auth[7:] if auth and auth.startswith("Bearer ") else None
        if self._keycloak is None or token is None:
            return KeycloakCaller(admin_role=self._admin_role)
        return self._keycloak.caller_for(token)

    async def _access_roles(self, req: falcon.asgi.Request) -> frozenset[str]:
        if req.method not in _BODY_METHODS or not req.content_length:
            return frozenset()

        body: Any = await req.get_media(default_when_empty=None)
        if not isinstance(body, dict):
            return frozenset()

        roles = body.get(self._access_roles_field)
        if not roles:
            return frozenset()
        if not isinstance(roles, list) or not all(isinstance(r, str) for r in roles):
            raise falcon.HTTPBadRequest(
                title="Invalid secure access roles",
                description=f"'{self._access_roles_field}' must be a list of role names",
            )
        return frozenset(roles)
