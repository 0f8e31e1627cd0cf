"""Fixtures for API tests."""

import falcon
import falcon.asgi
import pytest
from falcon.testing import TestClient

from rowguard.infrastructure.auth.keycloak_provider import KeycloakCaller, OIDCUser
from rowguard.interfaces.api.middleware import SecureContextMiddleware


class FakeKeycloakProvider:
    """Accepts token ``good`` as an editor, anything else as anonymous."""

    def caller_for(self, token):
        if token != "good":
            return KeycloakCaller()
        return KeycloakCaller(
            user=OIDCUser(user_id="u1", email=None, username="alice", realm_roles=["editor"])
        )


class ContextResource:
    """Echoes the secure request context."""

    def _echo(self, req, resp):
        ctx = req.context.secure
        identity = ctx.caller.identity
        resp.media = {
            "user_id": identity.user_id if identity else None,
            "access_roles": sorted(ctx.access_roles),
            "secure": ctx.secure,
        }

    async def on_get(self, req, resp):
        self._echo(req, resp)

    async def on_post(self, req, resp):
        self._echo(req, resp)


def _client(**kwargs) -> TestClient:
    app = falcon.asgi.App(middleware=[SecureContextMiddleware(**kwargs)])
    app.add_route("/context", ContextResource())
    return TestClient(app)


@pytest.fixture
def client() -> TestClient:
    return _client(keycloak_provider=FakeKeycloakProvider())


@pytest.fixture
def insecure_client() -> TestClient:
    return _client(secure_enabled=False)
