"""Pytest fixtures for rowguard tests."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Any

import pytest

from rowguard.application.dto import RequestContext, SecureOptions
from rowguard.config import Settings
from rowguard.domain.entities import Identity, Permission, Role
from rowguard.domain.value_objects import Operation
from rowguard.main import SecureComponents, build_secure_components


# --- Fake collaborators ---


class FakeAuthorizationManager:
    """In-memory authorization manager recording every call."""

    def __init__(self) -> None:
        self.permissions: dict[str, Permission] = {}
        self.roles: dict[str, Role] = {}
        self.grants: set[tuple[str, str]] = set()  # (role name, permission name)
        self.assignments: dict[str, set[str]] = {}  # user id -> role names
        self.calls: list[str] = []
        self.fail_on: set[str] = set()

    # helpers

    def add_role(self, name: str) -> Role:
        role = Role(name=name, description=name.title())
        self.roles[name] = role
        return role

    def assign(self, user_id: str, *roles: str) -> None:
        self.assignments.setdefault(user_id, set()).update(roles)

    def roles_of(self, permission_name: str) -> set[str]:
        return {r for r, p in self.grants if p == permission_name}

    # AuthorizationManager

    def add(self, permission: Permission) -> bool:
        self.calls.append("add")
        if "add" in self.fail_on or permission.name in self.permissions:
            return False
        self.permissions[permission.name] = replace(permission)
        return True

    def get_permission(self, name: str) -> Permission | None:
        self.calls.append("get_permission")
        permission = self.permissions.get(name)
        return replace(permission) if permission else None

    def update(self, old_name: str, permission: Permission) -> bool:
        self.calls.append("update")
        if "update" in self.fail_on or old_name not in self.permissions:
            return False
        del self.permissions[old_name]
        self.permissions[permission.name] = replace(permission)
        self.grants = {
            (r, permission.name if p == old_name else p) for r, p in self.grants
        }
        return True

    def remove(self, permission: Permission) -> bool:
        self.calls.append("remove")
        if "remove" in self.fail_on:
            return False
        self.permissions.pop(permission.name, None)
        self.grants = {(r, p) for r, p in self.grants if p != permission.name}
        return True

    def get_roles(self) -> list[Role]:
        self.calls.append("get_roles")
        return list(self.roles.values())

    def grant(self, role: Role, permission: Permission) -> None:
        self.calls.append("grant")
        if "grant" in self.fail_on:
            raise RuntimeError("grant failed")
        self.grants.add((role.name, permission.name))

    def revoke(self, role: Role, permission: Permission) -> None:
        self.calls.append("revoke")
        self.grants.discard((role.name, permission.name))

    def has_grant(self, role: Role, permission: Permission) -> bool:
        self.calls.append("has_grant")
        if "has_grant" in self.fail_on:
            raise RuntimeError("has_grant failed")
        return (role.name, permission.name) in self.grants

    def check_access(self, user_id: str | None, permission_name: str) -> bool:
        self.calls.append("check_access")
        permission = self.permissions.get(permission_name)
        if permission is None or not permission.active or user_id is None:
            return False
        return bool(self.assignments.get(user_id, set()) & self.roles_of(permission_name))


@dataclass
class FakeCaller:
    """Caller with a fixed identity and role set."""

    identity: Identity | None = None
    roles: frozenset[str] = frozenset()
    asked: list[str] = field(default_factory=list)

    def has_role(self, role: str) -> bool:
        self.asked.append(role)
        return role in self.roles


class FakeSecureEntity:
    """In-memory secure entity. ``old_attributes=None`` means not yet persisted."""

    def __init__(
        self,
        entity_name: str = "Document",
        key: dict[str, Any] | None = None,
        attributes: dict[str, Any] | None = None,
        old_attributes: dict[str, Any] | None = None,
        transactional: set[Operation] | None = None,
        save_result: bool = True,
    ) -> None:
        self._entity_name = entity_name
        self._key = dict(key or {"id": 42})
        self.attributes: dict[str, Any] = {"rbac_on": 0, "rbac_item": None, "title": ""}
        self.attributes.update(attributes or {})
        self.old_attributes = old_attributes
        self.transactional = set(Operation) if transactional is None else transactional
        self.save_result = save_result
        self.on_save: Callable[[FakeSecureEntity], None] | None = None
        self.saved: list[dict[str, Any]] = []
        self._pending: dict[str, Any] = {}

    @property
    def entity_name(self) -> str:
        return self._entity_name

    @property
    def is_new_record(self) -> bool:
        return self.old_attributes is None

    def primary_key(self) -> dict[str, Any]:
        return dict(self._key)

    def has_attribute(self, name: str) -> bool:
        return name in self.attributes

    def get_attribute(self, name: str) -> Any:
        return self.attributes.get(name)

    def set_attribute(self, name: str, value: Any) -> None:
        self.attributes[name] = value
        self._pending[name] = value

    def get_old_attribute(self, name: str) -> Any:
        return (self.old_attributes or {}).get(name)

    def is_attribute_changed(self, name: str) -> bool:
        if self.old_attributes is None:
            return self.attributes.get(name) is not None
        return self.attributes.get(name) != self.old_attributes.get(name)

    def is_transactional(self, operation: Operation) -> bool:
        return operation in self.transactional

    def save(self) -> bool:
        if self.on_save is not None:
            self.on_save(self)
        self.saved.append(dict(self._pending))
        self._pending.clear()
        return self.save_result

    def persist(self) -> None:
        """Mark current attributes as the last persisted state."""
        self.old_attributes = dict(self.attributes)


# --- Fixtures ---


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def auth() -> FakeAuthorizationManager:
    """Authorization manager with editor, viewer and auditor roles."""
    manager = FakeAuthorizationManager()
    for name in ("editor", "viewer", "auditor"):
        manager.add_role(name)
    return manager


@pytest.fixture
def options() -> SecureOptions:
    return SecureOptions(
        description_template='Access to document "{param}"',
        secure_roles=("editor",),
    )


@pytest.fixture
def admin() -> FakeCaller:
    return FakeCaller(identity=Identity(user_id="root", username="root", is_admin=True))


@pytest.fixture
def editor() -> FakeCaller:
    return FakeCaller(
        identity=Identity(user_id="u-editor", username="ed"),
        roles=frozenset({"editor"}),
    )


@pytest.fixture
def stranger() -> FakeCaller:
    return FakeCaller(identity=Identity(user_id="u-stranger", username="st"))


@pytest.fixture
def components(options, auth, settings) -> SecureComponents:
    return build_secure_components(options, auth, settings=settings)


def make_context(caller: FakeCaller, *roles: str, secure: bool = True) -> RequestContext:
    return RequestContext(caller=caller, access_roles=frozenset(roles), secure=secure)
