"""Permission lifecycle - keeps an entity's permission in step with the entity row."""

from collections.abc import Callable
from weakref import WeakKeyDictionary

import structlog

from rowguard.application.dto import RequestContext, SecureOptions
from rowguard.application.ports import AuthorizationManager, SecureEntity
from rowguard.application.use_cases.entity.pipeline import HookPriority
from rowguard.application.use_cases.entity.resolve_conflicts import ConflictResolver
from rowguard.application.use_cases.entity.track_changes import AttributeChangeTracker
from rowguard.application.use_cases.permission.name_permission import PermissionNamer
from rowguard.application.use_cases.permission.reconcile_roles import (
    RoleAssignmentSynchronizer,
)
from rowguard.domain.entities import Permission
from rowguard.domain.exceptions import ConfigurationError, InconsistencyError
from rowguard.domain.value_objects import AttributeChangeSet, Operation, flag_value

logger = structlog.get_logger(__name__)


class PermissionLifecycleManager:
    """Creates, renames, toggles and removes the permission of a secure entity.

    Every write to the authorization manager happens after the entity row
    was written, inside the same transaction. A lifecycle event on a
    non-transactional operation is a configuration error; any failed
    manager call is an inconsistency. Both abort the enclosing transaction.
    """

    priority = HookPriority.NORMAL

    def __init__(
        self,
        options: SecureOptions,
        authorization_manager: AuthorizationManager,
        namer: PermissionNamer,
        tracker: AttributeChangeTracker,
        synchronizer: RoleAssignmentSynchronizer,
        resolver: ConflictResolver | None = None,
    ) -> None:
        self._options = options
        self._auth = authorization_manager
        self._namer = namer
        self._tracker = tracker
        self._synchronizer = synchronizer
        self._resolver = resolver or ConflictResolver()
        self._changes: WeakKeyDictionary[SecureEntity, AttributeChangeSet] = WeakKeyDictionary()

    def changes_for(self, entity: SecureEntity) -> AttributeChangeSet | None:
        return self._changes.get(entity)

    def on_before_validate(self, entity: SecureEntity, context: RequestContext) -> None:
        self._changes[entity] = self._tracker.evaluate(entity, context)

    def on_before_insert(self, entity: SecureEntity, context: RequestContext) -> None:
        self._resolver.suppress()

    def on_after_insert(self, entity: SecureEntity, context: RequestContext) -> None:
        try:
            self._ensure_transactional(entity, Operation.INSERT)

            fields = self._options.fields
            name = self._namer.assign(entity)
            permission = Permission(
                name=name,
                active=flag_value(entity.get_attribute(fields.secured)) != 0,
                description=self._options.render_description(
                    entity.get_attribute(fields.description_field)
                ),
            )
            self._apply(self._auth.add, permission, what="creation")
            if not entity.save():
                raise InconsistencyError(
                    f"Unexpected error saving permission name '{name}' on {entity.entity_name}"
                )
            logger.info(
                "Created entity permission",
                entity=entity.entity_name,
                permission=name,
                active=permission.active,
            )

            self._synchronizer.reconcile(permission, context.access_roles)
        finally:
            self._changes.pop(entity, None)
            self._resolver.restore()

    def on_after_update(self, entity: SecureEntity, context: RequestContext) -> None:
        self._ensure_transactional(entity, Operation.UPDATE)

        changes = self._changes.pop(entity, None)
        if changes is None:
            changes = self._tracker.evaluate(entity, context)
        if not changes.any:
            return

        fields = self._options.fields
        old_name = entity.get_old_attribute(fields.permission)
        permission = self._auth.get_permission(old_name) if old_name else None
        if permission is None:
            logger.info(
                "Entity permission already removed, skipping update",
                entity=entity.entity_name,
                permission=old_name,
            )
            return

        permission.active = flag_value(entity.get_attribute(fields.secured)) != 0
        permission.name = entity.get_attribute(fields.permission)
        self._apply(self._auth.update, old_name, permission, what="updating")
        logger.info(
            "Updated entity permission",
            entity=entity.entity_name,
            old_name=old_name,
            permission=permission.name,
            active=permission.active,
        )

        self._synchronizer.reconcile(permission, context.access_roles)

    def on_after_delete(self, entity: SecureEntity, context: RequestContext) -> None:
        self._ensure_transactional(entity, Operation.DELETE)

        name = entity.get_attribute(self._options.fields.permission)
        permission = self._auth.get_permission(name) if name else None
        if permission is None:
            return

        self._apply(self._auth.remove, permission, what="removing")
        logger.info("Removed entity permission", entity=entity.entity_name, permission=name)

    @staticmethod
    def _ensure_transactional(entity: SecureEntity, operation: Operation) -> None:
        if not entity.is_transactional(operation):
            raise ConfigurationError(
                f"Operation {operation.value.upper()} should be transactional for {entity.entity_name}"
            )

    @staticmethod
    def _apply(action: Callable[..., bool], *args: object, what: str) -> None:
        try:
            ok = action(*args)
        except InconsistencyError:
            raise
        except Exception as e:
            raise InconsistencyError(f"Unexpected error during permission {what}") from e
        if not ok:
            raise InconsistencyError(f"Unexpected error during permission {what}")
