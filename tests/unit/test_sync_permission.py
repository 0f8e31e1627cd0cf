"""Unit tests for PermissionLifecycleManager."""

import pytest

from rowguard.application.dto import SecureOptions
from rowguard.domain.entities import Permission
from rowguard.domain.exceptions import ConfigurationError, InconsistencyError
from rowguard.domain.value_objects import Operation, SecureFieldMap
from rowguard.main import build_secure_components

from tests.conftest import FakeSecureEntity, make_context


def _insert(components, entity, context) -> None:
    manager = components.manager
    manager.on_before_validate(entity, context)
    manager.on_before_insert(entity, context)
    manager.on_after_insert(entity, context)


def _inserted(components, editor, *roles, **attributes) -> FakeSecureEntity:
    entity = FakeSecureEntity(attributes={"rbac_on": 1, **attributes})
    _insert(components, entity, make_context(editor, *roles))
    entity.persist()
    return entity


class TestAfterInsert:
    """Tests for permission creation."""

    def test_creates_named_active_permission(self, components, auth, editor) -> None:
        entity = FakeSecureEntity("Document", key={"id": 42}, attributes={"rbac_on": 1})

        _insert(components, entity, make_context(editor))

        permission = auth.permissions["ACCESS_DOCUMENT_42"]
        assert permission.active
        assert entity.get_attribute("rbac_item") == "ACCESS_DOCUMENT_42"
        assert entity.saved == [{"rbac_item": "ACCESS_DOCUMENT_42"}]

    def test_public_entity_gets_inactive_permission(self, components, auth, stranger) -> None:
        _insert(components, FakeSecureEntity(key={"id": 7}), make_context(stranger))
        assert not auth.permissions["ACCESS_DOCUMENT_7"].active

    def test_description_rendered_from_param(self, auth, editor, settings) -> None:
        options = SecureOptions(
            description_template='Access to document "{param}"',
            fields=SecureFieldMap(description_param="title"),
            secure_roles=("editor",),
        )
        components = build_secure_components(options, auth, settings=settings)
        entity = FakeSecureEntity(attributes={"rbac_on": 1, "title": "Budget"})

        _insert(components, entity, make_context(editor))

        assert auth.permissions["ACCESS_DOCUMENT_42"].description == 'Access to document "Budget"'

    def test_grants_submitted_roles(self, components, auth, editor) -> None:
        _insert(components, FakeSecureEntity(attributes={"rbac_on": 1}), make_context(editor, "viewer"))
        assert auth.roles_of("ACCESS_DOCUMENT_42") == {"viewer"}

    def test_requires_transaction(self, components, auth, editor) -> None:
        entity = FakeSecureEntity(attributes={"rbac_on": 1}, transactional=set())

        with pytest.raises(ConfigurationError, match="INSERT should be transactional for Document"):
            _insert(components, entity, make_context(editor))
        assert auth.permissions == {}

    def test_failed_add_raises_inconsistency(self, components, auth, editor) -> None:
        auth.fail_on.add("add")
        with pytest.raises(InconsistencyError, match="creation"):
            _insert(components, FakeSecureEntity(attributes={"rbac_on": 1}), make_context(editor))

    def test_duplicate_name_raises_inconsistency(self, components, auth, editor) -> None:
        auth.add(Permission(name="ACCESS_DOCUMENT_42"))
        with pytest.raises(InconsistencyError):
            _insert(components, FakeSecureEntity(attributes={"rbac_on": 1}), make_context(editor))

    def test_failed_name_save_raises_inconsistency(self, components, editor) -> None:
        entity = FakeSecureEntity(attributes={"rbac_on": 1}, save_result=False)
        with pytest.raises(InconsistencyError, match="saving permission name"):
            _insert(components, entity, make_context(editor))

    def test_change_set_released(self, components, editor) -> None:
        entity = FakeSecureEntity(attributes={"rbac_on": 1})
        _insert(components, entity, make_context(editor))
        assert components.manager.changes_for(entity) is None


class TestAfterUpdate:
    """Tests for permission update."""

    def test_unrelated_change_makes_no_manager_calls(self, components, auth, editor) -> None:
        entity = _inserted(components, editor, title="Old")
        entity.set_attribute("title", "New")
        context = make_context(editor)

        components.manager.on_before_validate(entity, context)
        auth.calls.clear()
        components.manager.on_after_update(entity, context)

        assert auth.calls == []

    def test_toggles_active(self, components, auth, editor) -> None:
        entity = _inserted(components, editor)
        entity.set_attribute("rbac_on", 0)
        context = make_context(editor)

        components.manager.on_before_validate(entity, context)
        components.manager.on_after_update(entity, context)

        assert not auth.permissions["ACCESS_DOCUMENT_42"].active

    def test_renames_permission(self, components, auth, admin) -> None:
        entity = _inserted(components, admin, "viewer")
        entity.set_attribute("rbac_item", "ACCESS_RENAMED")
        context = make_context(admin, "viewer")

        components.manager.on_before_validate(entity, context)
        components.manager.on_after_update(entity, context)

        assert "ACCESS_DOCUMENT_42" not in auth.permissions
        assert auth.roles_of("ACCESS_RENAMED") == {"viewer"}

    def test_reconciles_roles_without_flag_change(self, components, auth, editor, stranger) -> None:
        entity = _inserted(components, editor, "viewer")
        context = make_context(stranger, "auditor")

        components.manager.on_before_validate(entity, context)
        components.manager.on_after_update(entity, context)

        assert auth.roles_of("ACCESS_DOCUMENT_42") == {"auditor"}

    def test_evaluates_when_no_change_set_stored(self, components, auth, editor) -> None:
        entity = _inserted(components, editor)
        entity.set_attribute("rbac_on", 0)

        components.manager.on_after_update(entity, make_context(editor))

        assert not auth.permissions["ACCESS_DOCUMENT_42"].active

    def test_missing_permission_skipped(self, components, auth, editor) -> None:
        entity = _inserted(components, editor)
        del auth.permissions["ACCESS_DOCUMENT_42"]
        entity.set_attribute("rbac_on", 0)
        context = make_context(editor)

        components.manager.on_before_validate(entity, context)
        components.manager.on_after_update(entity, context)

        assert "update" not in auth.calls

    def test_failed_update_raises_inconsistency(self, components, auth, editor) -> None:
        entity = _inserted(components, editor)
        entity.set_attribute("rbac_on", 0)
        auth.fail_on.add("update")

        with pytest.raises(InconsistencyError, match="updating"):
            components.manager.on_after_update(entity, make_context(editor))

    def test_requires_transaction(self, components, editor) -> None:
        entity = _inserted(components, editor)
        entity.transactional = {Operation.INSERT}
        with pytest.raises(ConfigurationError, match="UPDATE"):
            components.manager.on_after_update(entity, make_context(editor))


class TestAfterDelete:
    """Tests for permission removal."""

    def test_removes_permission_and_grants(self, components, auth, editor) -> None:
        entity = _inserted(components, editor, "viewer")

        components.manager.on_after_delete(entity, make_context(editor))

        assert auth.permissions == {}
        assert auth.grants == set()

    def test_already_removed_permission_is_noop(self, components, auth, editor) -> None:
        entity = _inserted(components, editor)
        auth.remove(auth.permissions["ACCESS_DOCUMENT_42"])
        auth.calls.clear()

        components.manager.on_after_delete(entity, make_context(editor))

        assert "remove" not in auth.calls

    def test_failed_remove_raises_inconsistency(self, components, auth, editor) -> None:
        entity = _inserted(components, editor)
        auth.fail_on.add("remove")
        with pytest.raises(InconsistencyError, match="removing"):
            components.manager.on_after_delete(entity, make_context(editor))

    def test_requires_transaction(self, components, editor) -> None:
        entity = _inserted(components, editor)
        entity.transactional = set()
        with pytest.raises(ConfigurationError, match="DELETE"):
            components.manager.on_after_delete(entity, make_context(editor))
